# qdd/apply_dd.py
"""Gate application on a decision-diagram state.

Single-qubit gates rewrite the edges of every node at the target level.
All parents of such a node want the same rewrite, so in-place mutation is
safe there. Two-qubit gates only act on the ``one`` branch of each control
node, which may share nodes with the ``zero`` branch (or with other parts of
the diagram), so they copy whatever is shared before rewriting it.
"""
import logging
from typing import Callable, Dict, Tuple

import numpy as np

from . import gates as G
from .ddstate import DDState
from .levels import iter_level
from .node import (DEAD, Child, Edge, InvariantViolation, Node, Terminal,
                   edge, equivalent, is_dead, make_node, parent_counts,
                   reshare, scaled)
from .state import check_pair, check_qubit

logger = logging.getLogger(__name__)

Rewrite = Callable[[Edge, Edge], Tuple[Edge, Edge]]

# ---------------------------------------------------------------------
# single-qubit gates

def _rewrite_level(state: DDState, k: int, rewrite: Callable[[Node], None]):
    check_qubit(state.n, k)
    for node in iter_level(state.root, k):
        rewrite(node)

def apply_X(state: DDState, k: int):
    def flip(node):
        node.zero, node.one = node.one, node.zero
    _rewrite_level(state, k, flip)

def apply_Y(state: DDState, k: int):
    def flip(node):
        zero, one = node.zero, node.one
        node.zero = Edge(1j * one.weight, one.child)
        node.one = Edge(-1j * zero.weight, zero.child)
    _rewrite_level(state, k, flip)

def apply_phase(state: DDState, k: int, ph: complex):
    """Multiply the |1> branch of qubit k by ``ph``."""
    def rotate(node):
        node.one = Edge(node.one.weight * ph, node.one.child)
    _rewrite_level(state, k, rotate)

def apply_Z(state: DDState, k: int): apply_phase(state, k, G.Z_PHASE)
def apply_S(state: DDState, k: int): apply_phase(state, k, G.S_PHASE)
def apply_Sdg(state: DDState, k: int): apply_phase(state, k, G.SDG_PHASE)
def apply_T(state: DDState, k: int): apply_phase(state, k, G.T_PHASE)
def apply_Tdg(state: DDState, k: int): apply_phase(state, k, G.TDG_PHASE)

def apply_P(state: DDState, k: int, theta: float):
    apply_phase(state, k, G.p_phase(theta))

# ---------------------------------------------------------------------
# branch arithmetic

def _add(a: Edge, b: Edge, memo: Dict) -> Edge:
    """Edge to the sub-state ``a.weight*a.child + b.weight*b.child``.

    Both operands must test the same qubit. New nodes are only created
    where the two operands differ; shared parts are reused.
    """
    if is_dead(a):
        return edge(b.weight, b.child)
    if is_dead(b):
        return a
    if a.child is b.child:
        return edge(a.weight + b.weight, a.child)
    na, nb = a.child, b.child
    if na.qubit != nb.qubit:
        raise InvariantViolation(
            f"cannot combine branches testing qubits {na.qubit} and {nb.qubit}")
    if na.is_sink:
        return edge(a.weight + b.weight, na)
    key = (a, b)
    if key in memo:
        return memo[key]
    zero = _add(scaled(na.zero, a.weight), scaled(nb.zero, b.weight), memo)
    one = _add(scaled(na.one, a.weight), scaled(nb.one, b.weight), memo)
    result = make_node(na.qubit, zero, one)
    memo[key] = result
    return result

def _mix(node: Node, m, memo: Dict) -> Tuple[Edge, Edge]:
    a, b = node.zero, node.one
    zero = _add(scaled(a, m[0][0]), scaled(b, m[0][1]), memo)
    one = _add(scaled(a, m[1][0]), scaled(b, m[1][1]), memo)
    return zero, one

def _remap_level(state: DDState, k: int, new_edges: Callable[[Node], Tuple[Edge, Edge]]):
    """Compute the new edges of every node at level k before assigning any;
    a failure leaves the diagram as it was."""
    check_qubit(state.n, k)
    updates = [(node, new_edges(node)) for node in iter_level(state.root, k)]
    for node, (zero, one) in updates:
        node.zero, node.one = zero, one

def apply_single_qubit(state: DDState, U2: np.ndarray, k: int):
    """Apply an arbitrary 2x2 gate U2 to qubit k."""
    U2 = np.asarray(U2)
    assert U2.shape == (2, 2)
    m = [[complex(x) for x in row] for row in U2]
    memo = {}
    _remap_level(state, k, lambda node: _mix(node, m, memo))

def apply_U(state: DDState, k: int, theta: float, phi: float, lam: float):
    apply_single_qubit(state, G.U(theta, phi, lam), k)

def _hadamard(node: Node, memo: Dict) -> Tuple[Edge, Edge]:
    a, b = node.zero, node.one
    r = G.INV_ROOT_TWO
    a_dead, b_dead = is_dead(a), is_dead(b)
    if a_dead and b_dead:
        return a, b
    if a.child is b.child:
        # one shared sub-state: only the weights mix
        zero = edge((a.weight + b.weight) * r, a.child)
        one = edge((a.weight - b.weight) * r, a.child)
    elif a_dead:
        zero = edge(b.weight * r, b.child)
        one = edge(-b.weight * r, b.child)
    elif b_dead:
        zero = edge(a.weight * r, a.child)
        one = edge(a.weight * r, a.child)
    else:
        logger.debug("H: summing distinct branches below qubit %d", node.qubit)
        zero = _add(scaled(a, r), scaled(b, r), memo)
        one = _add(scaled(a, r), scaled(b, -r), memo)
    return zero, one

def apply_H(state: DDState, k: int):
    memo = {}
    _remap_level(state, k, lambda node: _hadamard(node, memo))

# ---------------------------------------------------------------------
# controlled gates, control above target

def _swap_edges(zero: Edge, one: Edge):
    return one, zero

def _negate_one(zero: Edge, one: Edge):
    return zero, Edge(-one.weight, one.child)

def _rewrite_below(node: Child, target: int, rewrite: Rewrite,
                   parents: Dict[Child, int], copies: Dict[Node, Node],
                   exclusive: bool) -> Child:
    """Apply ``rewrite`` to every target-level node under ``node``.

    A node is rewritten in place only if it and every node above it on the
    way down have a single parent; anything else is copied, once per gate,
    through ``copies``. Nodes below the target level are reused as they are.
    """
    if isinstance(node, Terminal) or node.qubit < target:
        return node
    exclusive = exclusive and parents.get(node, 0) == 1
    if not exclusive and node in copies:
        return copies[node]
    if node.qubit == target:
        zero, one = rewrite(node.zero, node.one)
    else:
        zero = Edge(node.zero.weight, _rewrite_below(
            node.zero.child, target, rewrite, parents, copies, exclusive))
        one = Edge(node.one.weight, _rewrite_below(
            node.one.child, target, rewrite, parents, copies, exclusive))
    if exclusive:
        node.zero, node.one = zero, one
        return node
    copy = Node(node.qubit, zero, one)
    copies[node] = copy
    return copy

def _apply_controlled(state: DDState, control: int, target: int,
                      rewrite: Rewrite, name: str):
    parents = parent_counts(state.root)
    copies: Dict[Node, Node] = {}
    merged = 0
    # collect first; the loop rewrites edges under these nodes
    for node in list(iter_level(state.root, control)):
        if is_dead(node.one):
            continue
        weight, child = node.one
        child = _rewrite_below(child, target, rewrite, parents, copies, True)
        if child is not node.zero.child and equivalent(node.zero.child, child):
            child = node.zero.child
            merged += 1
        node.one = Edge(weight, child)
    state.root, dropped = reshare(state.root)
    logger.debug("%s(%d, %d): %d nodes copied, %d branches re-merged, %d nodes re-shared",
                 name, control, target, len(copies), merged, dropped)

# ---------------------------------------------------------------------
# CNOT with the control below the target

def _split(e: Edge) -> Tuple[Edge, Edge]:
    if is_dead(e):
        return DEAD, DEAD
    return scaled(e.child.zero, e.weight), scaled(e.child.one, e.weight)

def _splice(low: Edge, high: Edge, control: int, memo: Dict) -> Edge:
    """Sub-state equal to ``low`` where ``control`` is 0 and to ``high``
    where it is 1."""
    if low == high:
        return low
    live = {e.child.qubit for e in (low, high) if not is_dead(e)}
    if not live:
        return DEAD
    if len(live) > 1:
        raise InvariantViolation(f"cannot splice branches testing qubits {sorted(live)}")
    q = live.pop()
    if q < control:
        raise InvariantViolation(f"no node tests control qubit {control} below this branch")
    key = (low, high)
    if key in memo:
        return memo[key]
    l0, l1 = _split(low)
    h0, h1 = _split(high)
    if q == control:
        result = make_node(q, l0, h1)
    else:
        result = make_node(q, _splice(l0, h0, control, memo),
                           _splice(l1, h1, control, memo))
    memo[key] = result
    return result

def _cnot_from_below(state: DDState, control: int, target: int):
    memo = {}

    def splice_both(node):
        zero, one = node.zero, node.one
        return _splice(zero, one, control, memo), _splice(one, zero, control, memo)

    _remap_level(state, target, splice_both)
    state.root, dropped = reshare(state.root)
    logger.debug("CNOT(%d, %d): %d spliced nodes, %d nodes re-shared",
                 control, target, len(memo), dropped)

# ---------------------------------------------------------------------

def apply_CNOT(state: DDState, control: int, target: int):
    check_pair(state.n, control, target)
    if control > target:
        _apply_controlled(state, control, target, _swap_edges, "CNOT")
    else:
        _cnot_from_below(state, control, target)

def apply_CZ(state: DDState, control: int, target: int):
    check_pair(state.n, control, target)
    # symmetric in its two qubits: always walk down from the higher one
    upper, lower = max(control, target), min(control, target)
    _apply_controlled(state, upper, lower, _negate_one, "CZ")


SINGLE_QUBIT = {
    "H": apply_H, "X": apply_X, "Y": apply_Y, "Z": apply_Z, "S": apply_S,
    "SDG": apply_Sdg, "T": apply_T, "TDG": apply_Tdg, "P": apply_P, "U": apply_U,
}
TWO_QUBIT = {"CNOT": apply_CNOT, "CZ": apply_CZ}
