# qdd/ddstate.py
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np
from numba import njit

from .node import (DEAD, Child, Edge, InvariantViolation, Node, Terminal,
                   iter_nodes, level, make_sink)
from .state import check_qubit, sample_bit


@njit
def _scatter_kernel(psi, amp, base, free):
    # add amp at every index that agrees with base outside the free bits
    m = free.shape[0]
    for combo in range(1 << m):
        idx = base
        for i in range(m):
            if (combo >> i) & 1:
                idx |= 1 << free[i]
        psi[idx] += amp


def _norm2(node: Child, memo: Dict[Child, float]) -> float:
    """Squared norm of the sub-state below ``node``, counting skipped levels."""
    if node in memo:
        return memo[node]
    if isinstance(node, Terminal):
        r = abs(node.value)**2
    elif node.is_sink:
        r = 1.0
    else:
        r = 0.0
        for e in node.edges():
            if e.weight != 0:
                skipped = node.qubit - level(e.child) - 1
                r += abs(e.weight)**2 * _norm2(e.child, memo) * 2.0**skipped
    memo[node] = r
    return r


def _upper_nodes(root: Child, k: int):
    """Distinct nodes testing qubit >= k, reached without passing level k."""
    stack = [root]
    seen = set()
    while stack:
        node = stack.pop()
        if node in seen:
            continue
        seen.add(node)
        if isinstance(node, Terminal) or node.qubit < k:
            continue
        yield node
        if node.qubit > k:
            stack.append(node.one.child)
            stack.append(node.zero.child)


@dataclass
class DDState:
    n: int
    root: Node

    @staticmethod
    def zero(n: int) -> "DDState":
        """|0...0>: one node per qubit, from n-1 down to 0, ending in the sink."""
        if n < 0:
            raise ValueError(f"qubit count must be non-negative, got {n}")
        current = make_sink()
        for q in range(n):
            current = Node(q, Edge(1 + 0j, current), DEAD)
        return DDState(n=n, root=current)

    # ------------------------------------------------------------------
    # amplitudes

    def statevector(self) -> np.ndarray:
        psi = np.zeros(1 << self.n, dtype=np.complex128)
        self._collect(self.root, 1 + 0j, 0, 0, psi)
        return psi

    def as_numpy(self) -> np.ndarray:
        return self.statevector()

    def _collect(self, node: Child, amp: complex, index: int, mask: int, psi: np.ndarray):
        if amp == 0:
            return
        if isinstance(node, Terminal):
            amp = amp * node.value
            if amp != 0:
                self._scatter(amp, index, mask, psi)
            return
        if node.is_sink:
            self._scatter(amp, index, mask, psi)
            return
        q = node.qubit
        mask |= 1 << q
        self._collect(node.zero.child, amp * node.zero.weight, index, mask, psi)
        self._collect(node.one.child, amp * node.one.weight, index | (1 << q), mask, psi)

    def _scatter(self, amp: complex, index: int, mask: int, psi: np.ndarray):
        free = np.array([q for q in range(self.n) if not (mask >> q) & 1], dtype=np.int64)
        _scatter_kernel(psi, complex(amp), index, free)

    # ------------------------------------------------------------------
    # norms & measurement

    def norm2(self) -> float:
        top = self.n - 1 - level(self.root)
        return _norm2(self.root, {}) * 2.0**top

    def check_normalized(self, tol=1e-6):
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise AssertionError(f"Normalization failed: ||psi||^2={n2}")

    def probabilities(self, k: int) -> Tuple[float, float]:
        """Marginal probabilities (p0, p1) of qubit ``k``.

        Distinct root-to-node paths are distinct basis prefixes, so the
        probability mass reaching a node is the plain sum over its incoming
        paths. An edge that jumps over level ``k`` leaves the qubit
        undecided and splits its mass evenly.
        """
        check_qubit(self.n, k)
        norms: Dict[Child, float] = {}
        p = [0.0, 0.0]
        top = 2.0**(self.n - 1 - level(self.root))
        if level(self.root) < k:
            half = top * _norm2(self.root, norms) / 2
            p = [half, half]
        else:
            mass = {self.root: top}
            nodes = sorted(_upper_nodes(self.root, k), key=lambda x: x.qubit, reverse=True)
            for node in nodes:
                m = mass.get(node, 0.0)
                if m == 0:
                    continue
                for bit, e in enumerate(node.edges()):
                    w2 = abs(e.weight)**2
                    if w2 == 0:
                        continue
                    c = e.child
                    spread = m * w2 * 2.0**(node.qubit - level(c) - 1)
                    if node.qubit == k:
                        p[bit] += spread * _norm2(c, norms)
                    elif isinstance(c, Node) and c.qubit >= k:
                        mass[c] = mass.get(c, 0.0) + spread
                    else:
                        half = spread * _norm2(c, norms) / 2
                        p[0] += half
                        p[1] += half
        total = p[0] + p[1]
        if total <= 0:
            raise InvariantViolation("diagram has zero norm; no outcome probabilities")
        return p[0] / total, p[1] / total

    def measure(self, k: int, rng: Optional[np.random.Generator] = None) -> int:
        """Sample qubit ``k`` without collapsing the state."""
        p0, _ = self.probabilities(k)
        return sample_bit(p0, rng)

    # ------------------------------------------------------------------
    # diagnostics

    def count_nodes(self) -> Tuple[int, int]:
        """(terminal nodes, decision nodes), each distinct object once."""
        terminals = decisions = 0
        for node in iter_nodes(self.root):
            if isinstance(node, Terminal):
                terminals += 1
            else:
                decisions += 1
        return terminals, decisions

    def validate(self):
        for node in iter_nodes(self.root):
            if isinstance(node, Terminal):
                continue
            if node.qubit >= self.n:
                raise InvariantViolation(f"node tests qubit {node.qubit} of a {self.n}-qubit state")
            for e in node.edges():
                if node.is_sink and not isinstance(e.child, Terminal):
                    raise InvariantViolation("sink edges must end in terminals")
                if isinstance(e.child, Node) and not node.is_sink and e.child.qubit >= node.qubit:
                    raise InvariantViolation(
                        f"node testing qubit {node.qubit} has a child testing {e.child.qubit}")

    def copy(self) -> "DDState":
        """Independent diagram with the same sharing."""
        clones: Dict[Node, Node] = {}

        def clone(node: Child) -> Child:
            if isinstance(node, Terminal):
                return node
            if node not in clones:
                clones[node] = Node(node.qubit,
                                    Edge(node.zero.weight, clone(node.zero.child)),
                                    Edge(node.one.weight, clone(node.one.child)))
            return clones[node]

        return DDState(self.n, clone(self.root))
