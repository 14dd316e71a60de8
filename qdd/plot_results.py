# qdd/plot_results.py
import csv, os
import matplotlib.pyplot as plt
from collections import defaultdict
from statistics import median

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

def load_rows(path):
    rows = []
    with open(path, "r") as f:
        r = csv.DictReader(f)
        for row in r:
            row["qubits"]  = int(row["qubits"])
            row["gates"]   = int(row["gates"])
            row["nodes"]   = int(row["nodes"])
            row["wall_ms"] = float(row["wall_ms"])
            rows.append(row)
    return rows

def median_by_key(rows, key_fields, value):
    buckets = defaultdict(list)
    for r in rows:
        key = tuple(r[k] for k in key_fields)
        buckets[key].append(r[value])
    agg = []
    for key, vals in buckets.items():
        out = dict(zip(key_fields, key))
        out[value] = float(median(vals))
        agg.append(out)
    return agg

def plot_vs_qubits(rows, value, ylabel, out_path, log=False):
    pts = median_by_key(rows, ["circuit", "backend", "qubits"], value)
    if not pts: return
    series = defaultdict(list)
    for r in pts:
        series[f"{r['circuit']} / {r['backend']}"].append((r["qubits"], r[value]))
    plt.figure()
    for label, p in sorted(series.items()):
        xs, ys = zip(*sorted(p))
        plt.plot(xs, ys, marker="o", label=label)
    plt.xlabel("Qubits (n)")
    plt.ylabel(ylabel)
    plt.title(f"{ylabel} vs Qubits")
    if log:
        plt.yscale("log")
    plt.grid(True, which="both", ls="--", lw=0.5)
    plt.legend()
    plt.tight_layout()
    plt.savefig(out_path, dpi=200)
    plt.close()

def main():
    # find all qubit-scaling CSVs under data/<backend>/
    rows = []
    for root, _, files in os.walk(DATA_DIR):
        for f in sorted(files):
            if f.startswith("qubits") and f.endswith(".csv"):
                path = os.path.join(root, f)
                try:
                    got = load_rows(path)
                except (OSError, KeyError, ValueError) as e:
                    print(f"Skipping {path}: {e}")
                    continue
                print(f"Loaded {path} ({len(got)} rows)")
                rows.extend(got)

    if not rows:
        print("No CSV files found under data/")
        return

    plot_vs_qubits(rows, "wall_ms", "Runtime (ms)", os.path.join(DATA_DIR, "runtime_vs_qubits.png"), log=True)
    plot_vs_qubits(rows, "nodes", "Nodes", os.path.join(DATA_DIR, "nodes_vs_qubits.png"), log=True)
    print("\nSaved plots under data/*.png")


if __name__ == "__main__":
    main()
