
from __future__ import annotations
import numpy as np
from scipy.special import xlogy

from .errors import NumericalCollapseError
from .logmath import log_binomial, log_poisson, sum_exp

def weighted_survival(w_prev: np.ndarray, pS: np.ndarray) -> tuple[float, float]:
    """
    Weight-averaged survival and death probabilities of the previous intensity.
    A zero-mass intensity has nothing to survive: (0, 1).
    """
    w_prev = np.asarray(w_prev, dtype=np.float64)
    pS = np.asarray(pS, dtype=np.float64)
    W = float(np.sum(w_prev))
    if w_prev.size == 0 or W <= 0.0:
        return 0.0, 1.0
    p = float(pS @ w_prev) / W
    p = min(max(p, 0.0), 1.0)
    return p, 1.0 - p

def predict_cardinality(cdn_prev: np.ndarray, w_prev: np.ndarray, pS: np.ndarray, w_birth_sum: float) -> np.ndarray:
    """
    Predicted cardinality distribution over 0..N_max.

    Binomial thinning of cdn_prev by the averaged survival probability,
    convolved with a Poisson(w_birth_sum) birth count and truncated at N_max.
    """
    cdn_prev = np.asarray(cdn_prev, dtype=np.float64)
    N = cdn_prev.shape[0] - 1
    pS_bar, qS_bar = weighted_survival(w_prev, pS)

    # survive[j] = sum_{ell>=j} C(ell, j) pS^j qS^(ell-j) cdn_prev[ell]
    j = np.arange(N + 1)[:, None]
    ell = np.arange(N + 1)[None, :]
    log_terms = log_binomial(ell, j) + xlogy(j, pS_bar) + xlogy(np.maximum(ell - j, 0), qS_bar)
    survive = sum_exp(np.where(ell >= j, log_terms, -np.inf), cdn_prev[None, :], axis=1)

    # cdn[n] = sum_{j<=n} Pois(n-j; birth) survive[j]
    n = np.arange(N + 1)[:, None]
    jj = np.arange(N + 1)[None, :]
    log_terms = log_poisson(np.maximum(n - jj, 0), w_birth_sum)
    cdn = sum_exp(np.where(jj <= n, log_terms, -np.inf), survive[None, :], axis=1)

    total = float(np.sum(cdn))
    if not np.isfinite(total) or total <= 0.0:
        raise NumericalCollapseError("predicted cardinality normalizer", total)
    return cdn / total

def update_cardinality(cdn_pred: np.ndarray, upsilon0: np.ndarray) -> np.ndarray:
    cdn = np.asarray(upsilon0, dtype=np.float64) * np.asarray(cdn_pred, dtype=np.float64)
    total = float(np.sum(cdn))
    if not np.isfinite(total) or total <= 0.0:
        raise NumericalCollapseError("upsilon0 . cdn_predict", total)
    return cdn / total

def expected_cardinality(cdn: np.ndarray) -> float:
    cdn = np.asarray(cdn, dtype=np.float64)
    return float(np.arange(cdn.shape[0]) @ cdn)
