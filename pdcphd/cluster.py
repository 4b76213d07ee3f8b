
from __future__ import annotations
import numpy as np
from scipy.cluster.vq import kmeans2

def weighted_kmeans(x: np.ndarray, w: np.ndarray, k_min: int = 1, rng: np.random.Generator | None = None):
    """
    Partition particles with k-means, k = max(k_min, round(sum(w))), capped at
    the number of distinct particles. Centroids are weight-averaged over members.
    Returns (centroids (k, D), [member index arrays]).
    """
    x = np.asarray(x, dtype=np.float64)
    w = np.asarray(w, dtype=np.float64)
    J = x.shape[0]
    if J == 0:
        return np.zeros((0,) + x.shape[1:], dtype=np.float64), []

    n_distinct = np.unique(x, axis=0).shape[0]
    k = int(min(max(int(k_min), int(round(float(np.sum(w))))), n_distinct))
    k = max(k, 1)

    if k == 1:
        labels = np.zeros(J, dtype=int)
    else:
        seed = None if rng is None else int(rng.integers(2**31 - 1))
        _, labels = kmeans2(x, k, minit="++", seed=seed)

    centroids = []
    members = []
    for c in range(k):
        idx = np.flatnonzero(labels == c)
        if idx.size == 0:
            continue
        wc = w[idx] + 1e-12
        centroids.append(np.sum(x[idx] * wc[:, None], axis=0) / np.sum(wc))
        members.append(idx)
    return np.array(centroids, dtype=np.float64).reshape(len(members), x.shape[1]), members
