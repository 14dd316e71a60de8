# qdd/circuit.py
import logging
from dataclasses import dataclass
from typing import List, Tuple, Union
import numpy as np
from .ddstate import DDState
from .state import State

logger = logging.getLogger(__name__)

Op = Tuple[str, Tuple]  # e.g., ("H",(k,)) or ("CNOT",(c,t)) or ("U",(k,theta,phi,lam))

@dataclass
class Circuit:
    n: int
    ops: List[Op]

    @staticmethod
    def empty(n:int) -> "Circuit":
        return Circuit(n, [])

    def _add(self, name:str, *args) -> "Circuit":
        self.ops.append((name, args)); return self

    def h(self, k:int): return self._add("H", k)
    def x(self, k:int): return self._add("X", k)
    def y(self, k:int): return self._add("Y", k)
    def z(self, k:int): return self._add("Z", k)
    def s(self, k:int): return self._add("S", k)
    def sdg(self, k:int): return self._add("SDG", k)
    def t(self, k:int): return self._add("T", k)
    def tdg(self, k:int): return self._add("TDG", k)
    def p(self, k:int, theta:float): return self._add("P", k, theta)
    def u(self, k:int, theta:float, phi:float, lam:float): return self._add("U", k, theta, phi, lam)
    def cnot(self, c:int, t:int): return self._add("CNOT", c, t)
    def cz(self, c:int, t:int): return self._add("CZ", c, t)

    def run(self, backend:str="dd", dtype=np.complex128, check_norm=True,
            num_threads=None, check_norm_tol=1e-6) -> Union[DDState, State]:
        """Run on the decision-diagram backend ("dd") or the dense
        state-vector reference ("dense"). ``dtype`` and ``num_threads``
        only apply to the dense backend."""
        if backend == "dd":
            from . import apply_dd as backend_ops
            st = DDState.zero(self.n)
        elif backend == "dense":
            from . import apply_dense as backend_ops
            if num_threads is not None:
                backend_ops.set_threads(int(num_threads))
            st = State.zero(self.n, dtype=dtype)
        else:
            raise NotImplementedError(f"Unknown backend: {backend}")

        logger.debug("running %d ops on %d qubits (%s)", len(self.ops), self.n, backend)
        for name, args in self.ops:
            if name in backend_ops.SINGLE_QUBIT:
                backend_ops.SINGLE_QUBIT[name](st, *args)
            elif name in backend_ops.TWO_QUBIT:
                backend_ops.TWO_QUBIT[name](st, *args)
            else:
                raise ValueError(f"Unknown gate {name}")

        if check_norm:
            st.check_normalized(tol=check_norm_tol)
        return st
