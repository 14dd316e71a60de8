# qdd/gates.py
import cmath
import numpy as np

INV_ROOT_TWO = 1.0 / np.sqrt(2.0)

# phase picked up by the |1> branch
Z_PHASE = -1 + 0j
S_PHASE = 1j
SDG_PHASE = -1j
T_PHASE = cmath.exp(1j * np.pi / 4)
TDG_PHASE = cmath.exp(-1j * np.pi / 4)


def p_phase(theta: float) -> complex:
    return cmath.exp(1j * theta)


def H(dtype=np.complex128) -> np.ndarray:
    s = INV_ROOT_TWO
    return np.array([[s, s],
                     [s, -s]], dtype=dtype)

def X(dtype=np.complex128) -> np.ndarray:
    return np.array([[0, 1],
                     [1, 0]], dtype=dtype)

def Y(dtype=np.complex128) -> np.ndarray:
    # -1 times the textbook Pauli Y
    return np.array([[0, 1j],
                     [-1j, 0]], dtype=dtype)

def phase(ph: complex, dtype=np.complex128) -> np.ndarray:
    return np.array([[1, 0],
                     [0, ph]], dtype=dtype)

def Z(dtype=np.complex128) -> np.ndarray: return phase(Z_PHASE, dtype)
def S(dtype=np.complex128) -> np.ndarray: return phase(S_PHASE, dtype)
def Sdg(dtype=np.complex128) -> np.ndarray: return phase(SDG_PHASE, dtype)
def T(dtype=np.complex128) -> np.ndarray: return phase(T_PHASE, dtype)
def Tdg(dtype=np.complex128) -> np.ndarray: return phase(TDG_PHASE, dtype)

def P(theta: float, dtype=np.complex128) -> np.ndarray:
    return phase(p_phase(theta), dtype)

def U(theta: float, phi: float, lam: float, dtype=np.complex128) -> np.ndarray:
    """U3 with the OpenQASM / Qiskit global phase."""
    c = np.cos(theta / 2.0)
    s = np.sin(theta / 2.0)
    return np.array([[c, -cmath.exp(1j*lam)*s],
                     [cmath.exp(1j*phi)*s, cmath.exp(1j*(phi+lam))*c]], dtype=dtype)


# name -> matrix factory; parametrized gates take their angles first
SINGLE_QUBIT = {
    "H": H, "X": X, "Y": Y, "Z": Z, "S": S, "SDG": Sdg,
    "T": T, "TDG": Tdg, "P": P, "U": U,
}

# controlled gates act with this 2x2 on the target when the control is 1
CONTROLLED = {"CNOT": X, "CZ": Z}
