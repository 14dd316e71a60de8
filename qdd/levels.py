# qdd/levels.py
from typing import Iterator
from .node import Child, Node, Terminal


def iter_level(root: Child, qubit: int) -> Iterator[Node]:
    """Yield each node testing ``qubit`` reachable from ``root``, once.

    Nodes testing a lower qubit are not descended: a path that skips the
    level has no node to yield.
    """
    stack = [root]
    seen = set()
    while stack:
        node = stack.pop()
        if node in seen:
            continue
        seen.add(node)
        if isinstance(node, Terminal):
            continue
        if node.qubit == qubit:
            yield node
        elif node.qubit > qubit:
            # children test lower qubits only
            stack.append(node.one.child)
            stack.append(node.zero.child)
