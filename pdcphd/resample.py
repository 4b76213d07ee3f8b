
from __future__ import annotations
import math
import numpy as np

def effective_sample_size(w: np.ndarray) -> float:
    w = np.asarray(w, dtype=np.float64)
    S = float(np.sum(w))
    if w.size == 0 or S <= 0.0:
        return 0.0
    return float(1.0 / np.sum((w / S) ** 2))

def resample_count(S: float, J_target: int, J_max: int) -> int:
    return int(min(math.ceil(S * J_target), J_max))

def resample(x: np.ndarray, w: np.ndarray, J_target: int, J_max: int, rng: np.random.Generator):
    """
    Multinomial resampling to min(ceil(S*J_target), J_max) particles with
    equal weights S/J. Returns (x_new, w_new, idx).
    """
    x = np.asarray(x, dtype=np.float64)
    w = np.asarray(w, dtype=np.float64)
    S = float(np.sum(w))
    J = resample_count(S, J_target, J_max) if S > 0.0 else 0
    if J == 0:
        return np.zeros((0,) + x.shape[1:], dtype=np.float64), np.zeros(0, dtype=np.float64), np.zeros(0, dtype=np.int64)

    idx = rng.choice(w.shape[0], size=J, replace=True, p=w / S)
    # fancy indexing copies, so duplicates are independent rows
    return x[idx], np.full(J, S / J, dtype=np.float64), idx
