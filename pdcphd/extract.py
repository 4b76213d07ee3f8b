
from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np

MASS_THRESHOLD = 0.5

@dataclass
class Estimate:
    N: int
    X: np.ndarray = field(default_factory=lambda: np.zeros((0, 4)))
    pD: float = 0.0

def average_pD(x: np.ndarray, w: np.ndarray) -> float:
    w = np.asarray(w, dtype=np.float64)
    S = float(np.sum(w))
    if w.size == 0 or S <= 0.0:
        return 0.0
    return float(np.asarray(x)[:, 0] @ w / S)

def extract_states(x: np.ndarray, w: np.ndarray, cluster_fn, k_min: int = 1) -> Estimate:
    """
    Point estimates from a resampled particle set.

    Nothing is reported unless the total mass exceeds MASS_THRESHOLD; then
    every cluster from cluster_fn(x, w, k_min) carrying more than
    MASS_THRESHOLD is reported by the kinematic part of its centroid.
    """
    x = np.asarray(x, dtype=np.float64)
    w = np.asarray(w, dtype=np.float64)
    pD = average_pD(x, w)
    if float(np.sum(w)) <= MASS_THRESHOLD:
        return Estimate(N=0, X=np.zeros((0, 4)), pD=pD)

    centroids, members = cluster_fn(x, w, k_min)
    states = [c[1:] for c, idx in zip(centroids, members) if float(np.sum(w[idx])) > MASS_THRESHOLD]
    X = np.array(states, dtype=np.float64).reshape(len(states), x.shape[1] - 1)
    return Estimate(N=len(states), X=X, pD=pD)
