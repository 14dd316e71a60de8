# qdd/bench.py
import argparse, csv, logging, os, socket, subprocess, time, platform
from datetime import datetime
import numpy as np
from .circuit import Circuit
from .ddstate import DDState
from . import draw

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

def backend_dir(backend):
    path = os.path.join(DATA_DIR, backend)
    os.makedirs(path, exist_ok=True)
    return path

# ---------------------------------------------------------------------
# circuits

def random_circuit(n, depth, seed=0):
    """Alternating layers: random single-qubit gates, then CNOT/CZ between
    neighbours in random direction."""
    rng = np.random.default_rng(seed)
    c = Circuit.empty(n)
    singles = ["h", "x", "y", "z", "s", "sdg", "t", "tdg"]
    for layer in range(depth):
        if layer % 2 == 0:
            for k in range(n):
                g = singles[int(rng.integers(0, len(singles)))]
                getattr(c, g)(k)
            if rng.integers(0, 4) == 0:
                c.u(int(rng.integers(0, n)), *rng.uniform(0, 2*np.pi, size=3))
        else:
            for k in range(layer % 4 // 2, n-1, 2):
                a, b = (k, k+1) if rng.integers(0, 2) == 0 else (k+1, k)
                if rng.integers(0, 2) == 0:
                    c.cnot(a, b)
                else:
                    c.cz(a, b)
    return c

def ghz_circuit(n):
    c = Circuit.empty(n).h(n-1)
    for k in range(n-2, -1, -1):
        c.cnot(n-1, k)
    return c

def cluster_circuit(n):
    """H on every qubit, then CZ between neighbours (linear cluster state)."""
    c = Circuit.empty(n)
    for k in range(n):
        c.h(k)
    for k in range(n-1, 0, -1):
        c.cz(k, k-1)
    return c

def graph_circuit(n):
    """H on every qubit, then CZ from each qubit to every second one below it."""
    c = Circuit.empty(n)
    for k in range(n):
        c.h(k)
    for hi in range(n-1, 0, -1):
        for lo in range(hi-1, -1, -2):
            c.cz(hi, lo)
    return c

CIRCUITS = {
    "random": lambda n, seed: random_circuit(n, 2*n, seed=seed),
    "ghz": lambda n, seed: ghz_circuit(n),
    "cluster": lambda n, seed: cluster_circuit(n),
    "graph": lambda n, seed: graph_circuit(n),
}

# ---------------------------------------------------------------------

def meta_row():
    commit = ""
    try:
        commit = subprocess.check_output(["git", "rev-parse", "--short", "HEAD"],
                                         stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        pass
    return {
        "hostname": socket.gethostname(),
        "commit": commit,
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "python": platform.python_version(),
        "machine": platform.machine(),
    }

HEADER = ["qubits","circuit","backend","gates","nodes","wall_ms","hostname","commit","timestamp"]

def new_csv(path):
    """Create/overwrite CSV with header."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writeheader()

def write_row(path, row):
    with open(path, "a", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writerow(row)

def time_run(circ, backend):
    t0 = time.perf_counter()
    st = circ.run(backend=backend, check_norm=False)
    return (time.perf_counter() - t0) * 1e3, st  # ms

def node_total(st):
    if isinstance(st, DDState):
        return sum(st.count_nodes())
    return 1 << st.n

# ---------------------------------------------------------------------
# experiments

def bench_qubits(ns, circuit, backend, out_path, seed=42):
    print(f"[run] Qubits scaling ({circuit}, {backend}) → {out_path}")
    new_csv(out_path)
    # warm the JIT kernels before timing
    time_run(CIRCUITS[circuit](min(ns), seed), backend)
    for n in ns:
        circ = CIRCUITS[circuit](n, seed)
        wall, st = time_run(circ, backend)
        nodes = node_total(st)
        m = meta_row()
        write_row(out_path, {
            "qubits": n, "circuit": circuit, "backend": backend,
            "gates": len(circ.ops), "nodes": nodes, "wall_ms": f"{wall:.3f}",
            "hostname": m["hostname"], "commit": m["commit"], "timestamp": m["timestamp"]
        })
        print(f"  n={n}  nodes={nodes}  wall={wall:.2f} ms")
    print("✓ done.\n")

def show(n, circuit, dot_path=None, seed=42, threshold=1e-6):
    st = CIRCUITS[circuit](n, seed).run(backend="dd")
    print("State vector:")
    for i, amp in enumerate(st.statevector()):
        if abs(amp) > threshold:
            print(f"  |{i:0{n}b}⟩: {amp.real:.3f}{amp.imag:+.3f}i")
    print(draw.format_adjacency(st))
    terminals, decisions = st.count_nodes()
    print(f"Terminal / decision nodes: {terminals} / {decisions}")
    if dot_path:
        with open(dot_path, "w") as f:
            f.write(draw.to_dot(st))
        print(f"DOT written to {dot_path}")

# ---------------------------------------------------------------------
def main():
    p = argparse.ArgumentParser(description="qdd benchmarks → data/<backend>/*.csv")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging from the gate engine")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_qubits = sub.add_parser("qubits")
    p_qubits.add_argument("--ns", type=str, required=True)
    p_qubits.add_argument("--circuit", type=str, default="cluster", choices=sorted(CIRCUITS))
    p_qubits.add_argument("--backend", type=str, default="dd", choices=["dd","dense"])
    p_qubits.add_argument("--seed", type=int, default=42)

    p_show = sub.add_parser("show")
    p_show.add_argument("--n", type=int, default=6)
    p_show.add_argument("--circuit", type=str, default="graph", choices=sorted(CIRCUITS))
    p_show.add_argument("--dot", type=str, default=None)

    args = p.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.cmd == "qubits":
        ns = [int(x) for x in args.ns.split(",")]
        out_path = os.path.join(backend_dir(args.backend), f"qubits_{args.circuit}.csv")
        bench_qubits(ns, args.circuit, args.backend, out_path, seed=args.seed)

    elif args.cmd == "show":
        show(args.n, args.circuit, dot_path=args.dot)

if __name__ == "__main__":
    main()
