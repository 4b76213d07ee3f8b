
from __future__ import annotations
import numpy as np

def esf(Z) -> np.ndarray:
    """
    Elementary symmetric functions e_0..e_m of Z.

    Expands prod_i (1 + Z[i] t) one factor at a time; coefficient j of the
    running polynomial is e_j. O(m^2). High orders may overflow to inf
    for large Z without disturbing the lower ones.
    """
    Z = np.asarray(Z, dtype=np.float64).reshape(-1)
    m = Z.shape[0]
    e = np.zeros(m + 1, dtype=np.float64)
    e[0] = 1.0
    with np.errstate(over="ignore"):
        for i, z in enumerate(Z):
            e[1:i+2] = e[1:i+2] + z * e[:i+1]
    return e

def esf_leave_one_out(Z) -> np.ndarray:
    """Row ell holds esf(Z with Z[ell] removed). Shape (m, m)."""
    Z = np.asarray(Z, dtype=np.float64).reshape(-1)
    m = Z.shape[0]
    out = np.zeros((m, m), dtype=np.float64)
    for ell in range(m):
        out[ell] = esf(np.delete(Z, ell))
    return out
