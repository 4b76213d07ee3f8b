
from __future__ import annotations
import numpy as np
from scipy.optimize import linear_sum_assignment

def ospa_dist(X: np.ndarray, Y: np.ndarray, c: float, p: float = 1.0):
    """
    OSPA distance between two sets of position rows.
    Returns (dist, localization component, cardinality component).
    """
    X = np.asarray(X, dtype=np.float64).reshape(-1, 2) if np.size(X) else np.zeros((0, 2))
    Y = np.asarray(Y, dtype=np.float64).reshape(-1, 2) if np.size(Y) else np.zeros((0, 2))
    n, m = X.shape[0], Y.shape[0]
    if n == 0 and m == 0:
        return 0.0, 0.0, 0.0
    if n == 0 or m == 0:
        return float(c), 0.0, float(c)

    D = np.linalg.norm(X[:, None, :] - Y[None, :, :], axis=2)
    D = np.minimum(D, c) ** p
    rows, cols = linear_sum_assignment(D)
    cost = float(np.sum(D[rows, cols]))

    nm = max(n, m)
    dist = ((c**p * abs(m - n) + cost) / nm) ** (1.0 / p)
    loc = (cost / nm) ** (1.0 / p)
    card = (c**p * abs(m - n) / nm) ** (1.0 / p)
    return float(dist), float(loc), float(card)

def positions(X: np.ndarray) -> np.ndarray:
    X = np.asarray(X, dtype=np.float64).reshape(-1, 4)
    return X[:, [0, 2]]

def ospa_series(truth_X: list[np.ndarray], est_X: list[np.ndarray], c: float, p: float = 1.0) -> np.ndarray:
    """Per-step OSPA on positions of kinematic rows [px, vx, py, vy]. Shape (K, 3)."""
    out = np.zeros((len(truth_X), 3), dtype=np.float64)
    for k, (Xt, Xe) in enumerate(zip(truth_X, est_X)):
        out[k] = ospa_dist(positions(Xt), positions(Xe), c, p)
    return out
