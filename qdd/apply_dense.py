# qdd/apply_dense.py
import numpy as np
from numba import njit, prange, set_num_threads
from . import gates as G
from .state import State, check_pair, check_qubit

# ---------- low-level kernels (Numba JIT) ----------

@njit(parallel=True, fastmath=True)
def _single_qubit_kernel(psi, U2, k):
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    nblocks = N // block
    for b in prange(nblocks):
        base = b * block
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

@njit(parallel=True, fastmath=True)
def _controlled_kernel(psi, U2, control, target):
    N = psi.shape[0]
    mc = 1 << control
    mt = 1 << target
    # one disjoint pair per index with control=1, target=0
    for i0 in prange(N):
        if (i0 & mc) != 0 and (i0 & mt) == 0:
            i1 = i0 | mt
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

# ---------- user-facing apply helpers ----------

def set_threads(n: int):
    set_num_threads(n)

def apply_single_qubit(state: State, U2: np.ndarray, k: int):
    check_qubit(state.n, k)
    _single_qubit_kernel(state.psi, np.asarray(U2).astype(state.dtype), k)

def apply_controlled(state: State, U2: np.ndarray, control: int, target: int):
    """Apply U2 to ``target`` on the part of the state where ``control`` is 1."""
    check_pair(state.n, control, target)
    _controlled_kernel(state.psi, np.asarray(U2).astype(state.dtype), control, target)

def _single(make):
    def apply(state: State, k: int, *params):
        apply_single_qubit(state, make(*params, dtype=state.dtype), k)
    return apply

def _controlled(make):
    def apply(state: State, control: int, target: int):
        apply_controlled(state, make(dtype=state.dtype), control, target)
    return apply

SINGLE_QUBIT = {name: _single(make) for name, make in G.SINGLE_QUBIT.items()}
TWO_QUBIT = {name: _controlled(make) for name, make in G.CONTROLLED.items()}
