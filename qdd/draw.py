# qdd/draw.py
"""Read-only views of a diagram for printing and rendering."""
import cmath
import math
from typing import Dict, List, Optional, Tuple

from .ddstate import DDState
from .node import TOL, Child, Node, Terminal

Adjacency = Dict[str, List[Tuple[str, str]]]


def format_weight(w: complex) -> str:
    return f"{w.real:.3f}{w.imag:+.3f}i"


def adjacency_list(state: DDState) -> Adjacency:
    """Map node name -> [(edge label, child name), ...], sorted by name.

    Decision nodes are named ``Lxx_Qk`` after the order they are first
    reached in (zero edge before one edge); the sink is ``Sink`` and every
    terminal collapses into ``T``.
    """
    adj: Adjacency = {}
    names: Dict[Child, str] = {}
    counter = [0]

    def visit(node: Child) -> str:
        if node in names:
            return names[node]
        if isinstance(node, Terminal):
            names[node] = "T"
            adj.setdefault("T", [])
            return "T"
        name = "Sink" if node.is_sink else f"L{counter[0]:02d}_Q{node.qubit}"
        counter[0] += 1
        names[node] = name
        zero = visit(node.zero.child)
        one = visit(node.one.child)
        adj[name] = [(f"0: {format_weight(node.zero.weight)}", zero),
                     (f"1: {format_weight(node.one.weight)}", one)]
        return name

    visit(state.root)
    return dict(sorted(adj.items()))


def graph_size(state: DDState) -> Tuple[int, int]:
    """(nodes, edges) of the adjacency list."""
    adj = adjacency_list(state)
    return len(adj), sum(len(edges) for edges in adj.values())


def format_adjacency(state: DDState) -> str:
    lines = []
    for name, edges in adjacency_list(state).items():
        lines.append(f"Node: {name}")
        for label, child in edges:
            lines.append(f"  Edge: {label} -> {child}")
    return "\n".join(lines)


# ---------------------------------------------------------------------
# Graphviz

_ANGLES = [(0.0, "0"), (math.pi/4, "π/4"), (math.pi/2, "π/2"), (math.pi, "π"),
           (-math.pi/4, "-π/4"), (-math.pi/2, "-π/2"), (-math.pi, "-π")]
_SURDS = [(1/math.sqrt(2), "1/√2"), (math.sqrt(2), "√2"), (0.5, "1/2")]


def _symbol(x: float, table) -> Optional[str]:
    for value, text in table:
        if abs(x - value) < TOL:
            return text
    return None


def dot_label(w: complex) -> Optional[str]:
    """Short symbolic form of an edge weight; None for weight 1."""
    r, theta = cmath.polar(w)
    angle = _symbol(theta, _ANGLES) or f"{theta:.3f}"
    if abs(r - 1.0) < TOL:
        if angle == "0":
            return None
        if angle in ("π", "-π"):
            return "-1"
        if angle in ("π/2", "-π/2"):
            return "i" if angle == "π/2" else "-i"
        return f"e(i{angle})"
    mag = _symbol(r, _SURDS) or f"{r:.3f}"
    if angle == "0":
        return mag
    if angle in ("π", "-π"):
        return f"-{mag}"
    if angle in ("π/2", "-π/2"):
        return f"{mag}i" if angle == "π/2" else f"-{mag}i"
    return f"{mag} e(i{angle})"


def _edge_style(w: complex) -> Tuple[str, float]:
    # hue from phase, width from magnitude
    r, theta = cmath.polar(w)
    hue = (theta % (2*math.pi)) / (2*math.pi)
    return f"{hue:.3f} 0.6 0.9", 0.8 + 1.2*r


def to_dot(state: DDState) -> str:
    """Graphviz DOT text for the diagram. Terminals and the edges into them
    are left out; the sink is drawn as a box labelled 1."""
    out = ["digraph DD {",
           "  graph [rankdir=TB, splines=true, nodesep=0.6];",
           "  node [shape=circle];",
           "  root [shape=point, style=invis];"]
    ids: Dict[Node, str] = {}

    def visit(node: Child) -> Optional[str]:
        if isinstance(node, Terminal):
            return None
        if node in ids:
            return ids[node]
        nid = f"n{len(ids)}"
        ids[node] = nid
        if node.is_sink:
            out.append(f'  {nid} [label="1", shape=box, style=rounded, width=0.3, height=0.3];')
        else:
            out.append(f'  {nid} [label=<q<sub>{node.qubit}</sub>>];')
        for bit, e in enumerate(node.edges()):
            child = visit(e.child)
            if child is None:
                continue
            color, width = _edge_style(e.weight)
            label = dot_label(e.weight)
            attrs = [f'color="{color}"', f'penwidth="{width:.2f}"',
                     f'style="{"dashed" if bit == 0 else "solid"}"']
            if label is not None:
                attrs.insert(0, f'label="{label}"')
            out.append(f"  {nid} -> {child} [{', '.join(attrs)}];")
        return nid

    root = visit(state.root)
    if root is not None:
        out.append(f"  root -> {root};")
    out.append("}")
    return "\n".join(out) + "\n"
