import math
import numpy as np
import pytest

from pdcphd.errors import NumericalCollapseError
from pdcphd.esf import esf
from pdcphd.intensity import pseudo_likelihood, update_intensity
from pdcphd.upsilon import compute_update_stats, upsilon

def naive_upsilon(esf_vals, m, u, lam, qD_mass, W, N_max):
    out = np.zeros(N_max + 1)
    for n in range(N_max + 1):
        for j in range(min(m, n) + 1):
            if n >= j + u:
                out[n] += (math.exp(-lam) * lam**(m - j) * math.factorial(n) / math.factorial(n - j - u)
                           * qD_mass**(n - j - u) / W**n * esf_vals[j])
    return out

@pytest.fixture
def setup():
    rng = np.random.default_rng(5)
    J, m, N_max = 40, 3, 6
    w = rng.random(J) * 0.1
    pD = rng.uniform(0.3, 0.95, J)
    L = rng.random((J, m)) * 1e-3
    cdn = rng.random(N_max + 1); cdn /= cdn.sum()
    return w, pD, L, cdn, N_max

def test_shapes(setup):
    w, pD, L, cdn, N_max = setup
    st = compute_update_stats(w, pD, L, 2.0, 1e-4, N_max)
    assert st.m == 3
    assert st.XI.shape == (3,)
    assert st.esf_full.shape == (4,)
    assert st.esf_minus.shape == (3, 3)
    assert st.upsilon0.shape == (N_max + 1,)
    assert st.upsilon1.shape == (N_max + 1,)
    assert st.upsilon1_minus.shape == (N_max + 1, 3)

def test_matches_direct_sums(setup):
    w, pD, L, cdn, N_max = setup
    lam, pdf_c = 2.0, 1e-4
    st = compute_update_stats(w, pD, L, lam, pdf_c, N_max)
    XI = ((pD * w) @ L) / pdf_c
    qD_mass = float((1 - pD) @ w)
    W = float(w.sum())
    assert np.allclose(st.XI, XI)
    assert np.allclose(st.upsilon0, naive_upsilon(esf(XI), 3, 0, lam, qD_mass, W, N_max))
    assert np.allclose(st.upsilon1, naive_upsilon(esf(XI), 3, 1, lam, qD_mass, W, N_max))
    for ell in range(3):
        e = esf(np.delete(XI, ell))
        assert np.allclose(st.upsilon1_minus[:, ell], naive_upsilon(e, 2, 1, lam, qD_mass, W, N_max))

def test_no_measurements_missed_detection_only(setup):
    w, pD, _, cdn, N_max = setup
    st = compute_update_stats(w, pD, np.zeros((w.shape[0], 0)), 2.0, 1e-4, N_max)
    assert st.m == 0
    assert st.esf_minus.shape == (0, 0)
    assert st.upsilon1_minus.shape == (N_max + 1, 0)
    w_post = update_intensity(w, pD, st, cdn, 1e-4)
    ratio = (st.upsilon1 @ cdn) / (st.upsilon0 @ cdn)
    assert np.allclose(w_post, (1 - pD) * ratio * w)

def test_perfect_detection_no_clutter_unit_mass():
    rng = np.random.default_rng(2)
    J, N_max = 30, 5
    w = rng.random(J) * 0.05
    pD = np.ones(J)
    L = rng.random((J, 1))
    cdn = np.full(N_max + 1, 1.0 / (N_max + 1))
    st = compute_update_stats(w, pD, L, 0.0, 1e-3, N_max)
    w_post = update_intensity(w, pD, st, cdn, 1e-3)
    assert np.isclose(w_post.sum(), 1.0)

def test_collapse_raises():
    J, N_max = 10, 1
    w = np.full(J, 0.1)
    pD = np.full(J, 0.9)
    L = np.full((J, 2), 1e-3)
    st = compute_update_stats(w, pD, L, 0.0, 1e-3, N_max)
    # two measurements, no clutter, at most one target
    assert np.all(st.upsilon0 == 0.0)
    with pytest.raises(NumericalCollapseError):
        pseudo_likelihood(pD, st, np.array([0.5, 0.5]), 1e-3)

def test_zero_mass_raises():
    with pytest.raises(NumericalCollapseError):
        compute_update_stats(np.zeros(3), np.ones(3), np.ones((3, 1)), 1.0, 1.0, 3)

def test_many_measurements_large_XI():
    # m > N_max and XI ~ 1.5e4: the top ESF orders overflow, the ones used stay finite
    rng = np.random.default_rng(11)
    J, m, N_max = 50, 80, 20
    lam, pdf_c = 10.0, 5e-5
    w = np.full(J, 1.0 / J)
    pD = np.full(J, 0.5)
    L = rng.uniform(1.0, 2.0, (J, m))
    st = compute_update_stats(w, pD, L, lam, pdf_c, N_max)
    assert np.all((st.XI > 1e4) & (st.XI < 2e4))
    assert np.isinf(st.esf_full[-1])
    assert np.all(np.isfinite(st.esf_full[:N_max + 1]))

    assert np.all(np.isfinite(st.upsilon0))
    assert np.all(np.isfinite(st.upsilon1))
    assert np.all(np.isfinite(st.upsilon1_minus))
    assert np.isclose(st.upsilon0[0], math.exp(-lam) * lam**m)

    qD_mass = float((1 - pD) @ w)
    W = float(w.sum())
    assert np.allclose(st.upsilon0, naive_upsilon(st.esf_full, m, 0, lam, qD_mass, W, N_max))
    assert np.allclose(st.upsilon1, naive_upsilon(st.esf_full, m, 1, lam, qD_mass, W, N_max))
    for ell in (0, m - 1):
        e = esf(np.delete(st.XI, ell))
        assert np.allclose(st.upsilon1_minus[:, ell], naive_upsilon(e, m - 1, 1, lam, qD_mass, W, N_max))

    cdn = np.full(N_max + 1, 1.0 / (N_max + 1))
    w_post = update_intensity(w, pD, st, cdn, pdf_c)
    assert np.all(np.isfinite(w_post))

def test_upsilon_ignores_overflowed_orders():
    e = esf(np.full(80, 1e4))
    assert np.isinf(e[-1])
    out = upsilon(e, 80, 0, 10.0, 5.0, 30.0, 20)
    assert np.all(np.isfinite(out))
    assert np.isclose(out[0], math.exp(-10.0) * 10.0**80)
