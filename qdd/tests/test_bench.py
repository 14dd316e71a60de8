# qdd/tests/test_bench.py
import os
from qdd.bench import CIRCUITS, bench_qubits, node_total, show
from qdd.plot_results import load_rows, median_by_key

def test_bench_qubits_writes_rows(tmp_path):
    out = os.path.join(tmp_path, "dd", "qubits_ghz.csv")
    bench_qubits([3, 5], "ghz", "dd", out)
    rows = load_rows(out)
    assert [r["qubits"] for r in rows] == [3, 5]
    assert [r["nodes"] for r in rows] == [1 + 6, 1 + 10]
    assert all(r["backend"] == "dd" and r["wall_ms"] >= 0 for r in rows)

def test_dense_node_total_is_vector_length():
    st = CIRCUITS["random"](4, 1).run(backend="dense")
    assert node_total(st) == 16

def test_median_by_key():
    rows = [
        {"circuit": "ghz", "backend": "dd", "qubits": 4, "wall_ms": 1.0},
        {"circuit": "ghz", "backend": "dd", "qubits": 4, "wall_ms": 3.0},
        {"circuit": "ghz", "backend": "dd", "qubits": 4, "wall_ms": 10.0},
        {"circuit": "ghz", "backend": "dense", "qubits": 4, "wall_ms": 2.0},
    ]
    agg = median_by_key(rows, ["circuit", "backend", "qubits"], "wall_ms")
    got = {(r["backend"], r["qubits"]): r["wall_ms"] for r in agg}
    assert got == {("dd", 4): 3.0, ("dense", 4): 2.0}

def test_show_writes_dot(tmp_path, capsys):
    path = os.path.join(tmp_path, "graph.dot")
    show(3, "graph", dot_path=path)
    out = capsys.readouterr().out
    assert "Node: L00_Q2" in out
    with open(path) as f:
        assert f.read().startswith("digraph DD {")
