
from __future__ import annotations
import numpy as np
from scipy.special import gammaln, logsumexp, xlogy

def log_factorial(n):
    return gammaln(np.asarray(n, dtype=np.float64) + 1.0)

def log_falling_factorial(n, k):
    """log(n! / (n-k)!); entries with k > n are returned as -inf."""
    n = np.asarray(n, dtype=np.float64)
    k = np.asarray(k, dtype=np.float64)
    d = n - k
    out = gammaln(n + 1.0) - gammaln(np.maximum(d, 0.0) + 1.0)
    return np.where(d >= 0, out, -np.inf)

def log_binomial(n, k):
    return log_falling_factorial(n, k) - log_factorial(k)

def log_poisson(n, rate: float):
    n = np.asarray(n, dtype=np.float64)
    return -float(rate) + xlogy(n, float(rate)) - gammaln(n + 1.0)

def sum_exp(log_terms, weights=None, axis=-1) -> np.ndarray:
    """
    sum(weights * exp(log_terms)) along `axis`, evaluated via log-sum-exp.

    All combinatorial sums of the cardinality recursion go through here so
    that factorials and powers never leave log space before the final sum.
    Terms with weight 0 or log term -inf contribute nothing.
    """
    log_terms = np.asarray(log_terms, dtype=np.float64)
    if log_terms.shape[axis] == 0:
        return np.zeros(np.delete(log_terms.shape, axis % log_terms.ndim))
    if weights is None:
        weights = np.ones_like(log_terms)
    weights = np.broadcast_to(np.asarray(weights, dtype=np.float64), log_terms.shape)
    # logsumexp cannot cancel -inf against a zero weight, nor exp(-inf) against an inf weight
    dead = (weights == 0) | np.isneginf(log_terms)
    log_terms = np.where(dead, -np.inf, log_terms)
    weights = np.where(dead, 0.0, weights)
    with np.errstate(divide="ignore"):
        return np.exp(logsumexp(log_terms, axis=axis, b=weights))
