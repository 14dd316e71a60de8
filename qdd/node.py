# qdd/node.py
"""Decision-diagram node model.

A state is a DAG of ``Node`` objects. Each ``Node`` tests one qubit and has a
``zero`` and a ``one`` edge, each a ``(weight, child)`` pair. Paths end either
in the sink (a ``Node`` testing ``SINK``: every qubit on the path is decided)
or in a ``Terminal`` (the path carries no amplitude).

Nodes are shared between parents and mutated in place, so anything that
rewrites a node changes every parent pointing at it. Nodes hash and compare
by identity; ``equivalent`` is the value comparison.
"""
from dataclasses import dataclass
from typing import Dict, NamedTuple, Tuple, Union

SINK = -1       # qubit index of the sink node
TOL = 1e-12     # absolute tolerance for weight comparisons


class InvariantViolation(AssertionError):
    """The diagram is not in a shape the algorithms can work with."""


@dataclass(eq=False)
class Terminal:
    value: complex = 0j

    def __repr__(self) -> str:
        return f"Terminal({self.value})"


class Edge(NamedTuple):
    weight: complex
    child: "Child"


@dataclass(eq=False)
class Node:
    qubit: int
    zero: Edge
    one: Edge

    @property
    def is_sink(self) -> bool:
        return self.qubit == SINK

    def edges(self):
        return (self.zero, self.one)

    def __repr__(self) -> str:
        if self.is_sink:
            return "Node(sink)"
        return f"Node(q={self.qubit}, zero={self.zero.weight:.3g}, one={self.one.weight:.3g})"


Child = Union[Node, Terminal]

TERMINAL = Terminal()
DEAD = Edge(0j, TERMINAL)


def make_sink() -> Node:
    return Node(SINK, DEAD, DEAD)


def level(node: Child) -> int:
    """Qubit tested by ``node``; terminals sit at the bottom with the sink."""
    return SINK if isinstance(node, Terminal) else node.qubit


def is_dead(edge: Edge) -> bool:
    return isinstance(edge.child, Terminal) or abs(edge.weight) < TOL


def edge(weight: complex, child: Child) -> Edge:
    """Build an edge, collapsing negligible weights onto the dead edge."""
    if isinstance(child, Terminal) or abs(weight) < TOL:
        return DEAD
    return Edge(complex(weight), child)


def scaled(e: Edge, factor: complex) -> Edge:
    return edge(e.weight * factor, e.child)


def make_node(qubit: int, zero: Edge, one: Edge) -> Edge:
    """Return an edge to a fresh node with the given (unnormalized) edges.

    The first live weight is factored out onto the returned edge so that
    nodes built from proportional branches look alike. Two dead edges give
    the dead edge.
    """
    zero_dead, one_dead = is_dead(zero), is_dead(one)
    if zero_dead and one_dead:
        return DEAD
    norm = one.weight if zero_dead else zero.weight
    zero = DEAD if zero_dead else Edge(zero.weight / norm, zero.child)
    one = DEAD if one_dead else Edge(one.weight / norm, one.child)
    return Edge(norm, Node(qubit, zero, one))


def iter_nodes(root: Child):
    """Every distinct node reachable from ``root`` (terminals included)."""
    seen = set()
    stack = [root]
    while stack:
        node = stack.pop()
        if node in seen:
            continue
        seen.add(node)
        yield node
        if isinstance(node, Node):
            stack.append(node.one.child)
            stack.append(node.zero.child)


def parent_counts(root: Child) -> Dict[Child, int]:
    """Number of edges pointing at each node reachable from ``root``.

    A node referenced by both edges of one parent counts twice.
    """
    counts: Dict[Child, int] = {root: 0}
    for node in iter_nodes(root):
        if isinstance(node, Node):
            for e in node.edges():
                counts[e.child] = counts.get(e.child, 0) + 1
    return counts


def equivalent(a: Child, b: Child, tol: float = TOL, _equal=None) -> bool:
    """Value equality of two sub-diagrams: same qubits, same weights, same
    children, recursively. Pointer equality is only the fast path."""
    if a is b:
        return True
    if isinstance(a, Terminal) or isinstance(b, Terminal):
        return (isinstance(a, Terminal) and isinstance(b, Terminal)
                and abs(a.value - b.value) < tol)
    if a.qubit != b.qubit:
        return False
    if _equal is None:
        _equal = set()
    if (a, b) in _equal:
        return True
    for ea, eb in zip(a.edges(), b.edges()):
        if abs(ea.weight - eb.weight) >= tol:
            return False
    for ea, eb in zip(a.edges(), b.edges()):
        if not equivalent(ea.child, eb.child, tol, _equal):
            return False
    _equal.add((a, b))
    return True


def _weight_key(w: complex):
    w = complex(w)
    return round(w.real, 12), round(w.imag, 12)


def reshare(root: Child) -> Tuple[Child, int]:
    """Merge value-equal nodes bottom-up.

    Two nodes are merged when they test the same qubit, carry the same
    weights (to 12 decimals) and point at the same representatives. Edges
    are re-pointed in place; terminals keep their identity. Returns the
    representative of ``root`` and the number of nodes dropped.
    """
    canon: Dict[Node, Node] = {}
    table: Dict[tuple, Node] = {}

    def visit(node: Child) -> Child:
        if isinstance(node, Terminal):
            return node
        if node in canon:
            return canon[node]
        zero, one = visit(node.zero.child), visit(node.one.child)
        if zero is not node.zero.child:
            node.zero = Edge(node.zero.weight, zero)
        if one is not node.one.child:
            node.one = Edge(node.one.weight, one)
        key = (node.qubit, _weight_key(node.zero.weight), id(zero),
               _weight_key(node.one.weight), id(one))
        rep = table.setdefault(key, node)
        canon[node] = rep
        return rep

    root = visit(root)
    return root, len(canon) - len(table)
