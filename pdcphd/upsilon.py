
from __future__ import annotations
from dataclasses import dataclass
import numpy as np
from scipy.special import xlogy

from .errors import NumericalCollapseError
from .esf import esf, esf_leave_one_out
from .logmath import log_falling_factorial, sum_exp

@dataclass
class UpdateStats:
    XI: np.ndarray              # (m,)
    esf_full: np.ndarray        # (m+1,)
    esf_minus: np.ndarray       # (m, m), row ell drops measurement ell
    upsilon0: np.ndarray        # (N_max+1,)
    upsilon1: np.ndarray        # (N_max+1,)
    upsilon1_minus: np.ndarray  # (N_max+1, m)
    L: np.ndarray               # (J, m)

    @property
    def m(self) -> int:
        return int(self.XI.shape[0])

def upsilon(esf_vals: np.ndarray, m: int, u: int, lambda_c: float,
            qD_mass: float, total_mass: float, N_max: int) -> np.ndarray:
    """
    Upsilon^u over n = 0..N_max for a measurement set of size m whose
    elementary symmetric functions are esf_vals (length m+1):

        sum_j exp(-lambda_c) lambda_c^(m-j) n!/(n-j-u)!
              qD_mass^(n-j-u) / total_mass^n  esf_vals[j]

    over j = 0..min(m, n) with n >= j + u. Entries of esf_vals past
    min(m, N_max) are never read, so they may overflow to inf.
    """
    j_max = min(m, N_max)
    n = np.arange(N_max + 1)[:, None]
    j = np.arange(j_max + 1)[None, :]
    valid = n >= j + u
    log_terms = (-lambda_c + xlogy(m - j, lambda_c)
                 + log_falling_factorial(n, j + u)
                 + xlogy(np.maximum(n - j - u, 0), qD_mass)
                 - n * np.log(total_mass))
    log_terms = np.where(valid, log_terms, -np.inf)
    weights = np.asarray(esf_vals, dtype=np.float64)[None, :j_max + 1]
    return sum_exp(log_terms, weights, axis=1)

def compute_update_stats(w: np.ndarray, pD: np.ndarray, L: np.ndarray, lambda_c: float,
                         pdf_c: float, N_max: int) -> UpdateStats:
    w = np.asarray(w, dtype=np.float64)
    pD = np.asarray(pD, dtype=np.float64)
    L = np.asarray(L, dtype=np.float64)
    if L.size == 0:
        L = np.zeros((w.shape[0], 0), dtype=np.float64)
    m = L.shape[1]

    total_mass = float(np.sum(w))
    if not np.isfinite(total_mass) or total_mass <= 0.0:
        raise NumericalCollapseError("predicted intensity mass", total_mass)
    qD_mass = float((1.0 - pD) @ w)

    XI = ((pD * w) @ L) / pdf_c
    esf_full = esf(XI)
    esf_minus = esf_leave_one_out(XI)

    upsilon0 = upsilon(esf_full, m, 0, lambda_c, qD_mass, total_mass, N_max)
    upsilon1 = upsilon(esf_full, m, 1, lambda_c, qD_mass, total_mass, N_max)
    upsilon1_minus = np.zeros((N_max + 1, m), dtype=np.float64)
    for ell in range(m):
        upsilon1_minus[:, ell] = upsilon(esf_minus[ell], m - 1, 1, lambda_c, qD_mass, total_mass, N_max)

    return UpdateStats(XI=XI, esf_full=esf_full, esf_minus=esf_minus, upsilon0=upsilon0,
                       upsilon1=upsilon1, upsilon1_minus=upsilon1_minus, L=L)
