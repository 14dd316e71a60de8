# qdd/tests/test_measure.py
import numpy as np
import pytest
from qdd.circuit import Circuit
from qdd.ddstate import DDState

def test_plus_state_marginals():
    st = Circuit.empty(1).h(0).run()
    assert np.allclose(st.probabilities(0), (0.5, 0.5))

def test_rotation_marginals():
    theta = 1.2
    st = Circuit.empty(3).u(1, theta, 0.3, 0.8).run()
    p0, p1 = st.probabilities(1)
    assert np.isclose(p1, np.sin(theta/2)**2)
    assert np.isclose(p0 + p1, 1.0)
    assert np.allclose(st.probabilities(0), (1.0, 0.0))
    assert np.allclose(st.probabilities(2), (1.0, 0.0))

def test_bell_marginals():
    st = Circuit.empty(2).h(1).cnot(1,0).run()
    assert np.allclose(st.probabilities(0), (0.5, 0.5))
    assert np.allclose(st.probabilities(1), (0.5, 0.5))

def test_definite_outcomes():
    st = Circuit.empty(3).x(1).run()
    assert np.allclose(st.probabilities(1), (0.0, 1.0))
    rng = np.random.default_rng(0)
    assert all(st.measure(1, rng) == 1 for _ in range(20))
    assert all(st.measure(0, rng) == 0 for _ in range(20))

def test_measure_does_not_collapse():
    st = Circuit.empty(2).h(0).cnot(0,1).run()
    before = st.statevector().copy()
    st.measure(0, np.random.default_rng(1))
    assert np.allclose(st.statevector(), before)

def test_sampling_frequency():
    st = Circuit.empty(2).h(0).run()
    rng = np.random.default_rng(123)
    ones = sum(st.measure(0, rng) for _ in range(2000))
    assert 0.45 < ones / 2000 < 0.55

def test_marginals_of_unnormalized_diagram_are_normalized():
    st = DDState.zero(2)
    st.root.zero = st.root.zero._replace(weight=3.0)
    assert np.isclose(st.norm2(), 9.0)
    assert np.allclose(st.probabilities(1), (1.0, 0.0))
    with pytest.raises(AssertionError):
        st.check_normalized()

def test_large_state_marginals_without_statevector():
    n = 40
    c = Circuit.empty(n)
    for k in range(n):
        c.h(k)
    for k in range(n-1, 0, -1):
        c.cz(k, k-1)
    st = c.run()
    for k in (0, 17, n-1):
        assert np.allclose(st.probabilities(k), (0.5, 0.5))

def test_measure_rejects_bad_qubit():
    st = DDState.zero(2)
    with pytest.raises(ValueError):
        st.probabilities(2)
    with pytest.raises(ValueError):
        st.measure(-1)
