# qdd/state.py
import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple


def check_qubit(n: int, k: int, what: str = "qubit"):
    if not 0 <= k < n:
        raise ValueError(f"{what} index {k} out of range for {n} qubits")


def check_pair(n: int, control: int, target: int):
    check_qubit(n, control, "control")
    check_qubit(n, target, "target")
    if control == target:
        raise ValueError("control and target must differ")


def sample_bit(p0: float, rng: Optional[np.random.Generator] = None) -> int:
    rng = np.random.default_rng() if rng is None else rng
    return 0 if rng.random() < p0 else 1


@dataclass
class State:
    """Dense 2**n amplitude vector, little-endian (bit k = qubit k)."""
    n: int
    psi: np.ndarray  # shape (2**n,), dtype complex64/128

    @staticmethod
    def zero(n: int, dtype=np.complex128) -> "State":
        if n < 0:
            raise ValueError(f"qubit count must be non-negative, got {n}")
        N = 1 << n
        psi = np.zeros(N, dtype=dtype)
        psi[0] = 1.0 + 0.0j
        return State(n=n, psi=psi)

    @property
    def dtype(self):
        return self.psi.dtype

    def norm2(self) -> float:
        return float(np.vdot(self.psi, self.psi).real)

    def check_normalized(self, tol=1e-6):
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise AssertionError(f"Normalization failed: ||psi||^2={n2}")

    def probabilities(self, k: int) -> Tuple[float, float]:
        check_qubit(self.n, k)
        p = np.abs(self.psi)**2
        ones = (np.arange(p.shape[0]) >> k) & 1
        p1 = float(p[ones == 1].sum())
        total = float(p.sum())
        return (total - p1) / total, p1 / total

    def measure(self, k: int, rng: Optional[np.random.Generator] = None) -> int:
        p0, _ = self.probabilities(k)
        return sample_bit(p0, rng)

    def copy(self) -> "State":
        return State(self.n, self.psi.copy())

    def statevector(self) -> np.ndarray:
        return self.psi

    def as_numpy(self) -> np.ndarray:
        return self.psi
