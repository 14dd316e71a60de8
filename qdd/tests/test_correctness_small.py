# qdd/tests/test_correctness_small.py
import cmath
import numpy as np
import pytest
from qdd.circuit import Circuit
from qdd.ddstate import DDState
from qdd import apply_dd as A
from qdd import gates as G

R = 1 / np.sqrt(2)

def almost(p, q, tol=1e-9):
    return np.allclose(p, q, atol=tol, rtol=0)

def probs(psi):
    return np.abs(psi)**2

def basis(n, i):
    v = np.zeros(1 << n, dtype=complex); v[i] = 1.0
    return v

def test_initial_state_is_all_zero():
    st = DDState.zero(3)
    assert almost(st.statevector(), basis(3, 0))

def test_h_on_zero():
    st = Circuit.empty(1).h(0).run()
    assert almost(st.statevector(), [R, R])

def test_h_on_both_qubits():
    st = Circuit.empty(2).h(0).h(1).run()
    psi = st.statevector()
    assert almost(psi, [0.5, 0.5, 0.5, 0.5])
    assert np.all(psi.imag == 0)

def test_y_on_basis_states():
    # Y = [[0, i], [-i, 0]]
    assert almost(Circuit.empty(1).y(0).run().statevector(), [0, -1j])
    assert almost(Circuit.empty(1).x(0).y(0).run().statevector(), [1j, 0])
    assert almost(G.Y(), [[0, 1j], [-1j, 0]])

def test_h_z_y_phases():
    # Y Z H |0> = Y (|0> - |1>)/sqrt2 = -i (|0> + |1>)/sqrt2
    st = Circuit.empty(1).h(0).z(0).y(0).run()
    assert almost(st.statevector(), [-1j*R, -1j*R])

def test_x_flips():
    # |0> -> X -> |1>
    st = Circuit.empty(1).x(0).run()
    assert almost(probs(st.statevector()), [0.0, 1.0])

def test_cnot_control_off_noop():
    # |00> --(CNOT c=1,t=0)--> stays |00>
    st = Circuit.empty(2).cnot(1,0).run()
    assert almost(st.statevector(), basis(2, 0))

def test_cnot_control_on_flips():
    # Prepare |10> by X on qubit 1 (control), then CNOT(1->0): |10> -> |11>
    st = Circuit.empty(2).x(1).cnot(1,0).run()
    assert almost(st.statevector(), basis(2, 3))

def test_cnot_control_below_target():
    # |01> (qubit 0 set) --(CNOT c=0,t=1)--> |11>
    st = Circuit.empty(2).x(0).cnot(0,1).run()
    assert almost(st.statevector(), basis(2, 3))
    st = Circuit.empty(2).x(1).cnot(0,1).run()
    assert almost(st.statevector(), basis(2, 2))

def test_bell_pair_both_directions():
    a = Circuit.empty(2).h(1).cnot(1,0).run().statevector()
    b = Circuit.empty(2).h(0).cnot(0,1).run().statevector()
    assert almost(a, [R, 0, 0, R])
    assert almost(b, [R, 0, 0, R])

def test_cnot_pair_returns_to_zero():
    st = Circuit.empty(3).h(2).cnot(2,0).cnot(2,0).h(2).run()
    assert almost(st.statevector(), basis(3, 0))

def test_normalization():
    st = Circuit.empty(3).h(0).h(1).cnot(1,0).t(2).u(2, 0.3, 1.1, -0.4).cz(0,2).cnot(0,2).run()
    n2 = float(np.vdot(st.statevector(), st.statevector()).real)
    assert abs(1.0 - n2) < 1e-6
    assert abs(1.0 - st.norm2()) < 1e-6

@pytest.mark.parametrize("gate, phase", [
    ("z", -1), ("s", 1j), ("sdg", -1j),
    ("t", cmath.exp(1j*np.pi/4)), ("tdg", cmath.exp(-1j*np.pi/4)),
])
def test_phase_gates(gate, phase):
    c = Circuit.empty(1).h(0)
    getattr(c, gate)(0)
    assert almost(c.run().statevector(), [R, R*phase])

def test_p_gate():
    st = Circuit.empty(1).h(0).p(0, 0.7).run()
    assert almost(st.statevector(), [R, R*cmath.exp(0.7j)])

def test_u_on_zero_uses_phi():
    theta, phi, lam = 0.9, 0.4, -1.3
    st = Circuit.empty(1).u(0, theta, phi, lam).run()
    expect = [np.cos(theta/2), cmath.exp(1j*phi)*np.sin(theta/2)]
    assert almost(st.statevector(), expect)

def test_u_matches_matrix_on_superposition():
    theta, phi, lam = 1.7, -0.6, 2.2
    st = Circuit.empty(2).h(0).h(1).s(1).u(1, theta, phi, lam).run()
    plus = np.array([R, R]); plus_i = np.array([R, 1j*R])
    expect = np.kron(G.U(theta, phi, lam) @ plus_i, plus)
    assert almost(st.statevector(), expect)

def test_u_as_x():
    st = Circuit.empty(2).u(1, np.pi, 0.0, np.pi).run()
    assert almost(st.statevector(), basis(2, 2))

def test_x_twice_is_identity():
    st = Circuit.empty(3).h(0).cnot(0,2).t(2).run()
    before = st.statevector().copy()
    for k in range(3):
        A.apply_X(st, k); A.apply_X(st, k)
    assert np.array_equal(st.statevector(), before)

def test_h_twice_is_identity():
    st = Circuit.empty(3).h(2).cnot(2,1).t(1).h(0).run()
    before = st.statevector().copy()
    for k in range(3):
        A.apply_H(st, k); A.apply_H(st, k)
        assert almost(st.statevector(), before)

def test_cnot_twice_is_identity():
    st = Circuit.empty(3).h(0).h(2).t(0).cnot(2,1).s(1).run()
    before = st.statevector().copy()
    for c in range(3):
        for t in range(3):
            if c == t:
                continue
            A.apply_CNOT(st, c, t); A.apply_CNOT(st, c, t)
            assert almost(st.statevector(), before)

def test_cz_twice_is_identity():
    st = Circuit.empty(3).h(0).h(1).h(2).t(1).run()
    before = st.statevector().copy()
    A.apply_CZ(st, 2, 0); A.apply_CZ(st, 0, 2)
    assert almost(st.statevector(), before)

def test_cz_is_symmetric():
    a = Circuit.empty(3).h(0).h(1).h(2).cz(2,0).run().statevector()
    b = Circuit.empty(3).h(0).h(1).h(2).cz(0,2).run().statevector()
    assert almost(a, b)
    assert almost(a, np.array([1, 1, 1, 1, 1, -1, 1, -1]) / np.sqrt(8))

def test_qubit_out_of_range():
    st = DDState.zero(2)
    with pytest.raises(ValueError):
        A.apply_H(st, 2)
    with pytest.raises(ValueError):
        A.apply_X(st, -1)
    with pytest.raises(ValueError):
        A.apply_CNOT(st, 0, 5)
    with pytest.raises(ValueError):
        A.apply_CZ(st, 1, 1)

def test_bad_circuits():
    with pytest.raises(ValueError):
        DDState.zero(-1)
    with pytest.raises(ValueError):
        Circuit(1, [("FOO", (0,))]).run()
    with pytest.raises(NotImplementedError):
        Circuit.empty(1).h(0).run(backend="gpu")
