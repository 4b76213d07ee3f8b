
from __future__ import annotations
import numpy as np

from .errors import NumericalCollapseError
from .upsilon import UpdateStats

def pseudo_likelihood(pD: np.ndarray, stats: UpdateStats, cdn_pred: np.ndarray, pdf_c: float) -> np.ndarray:
    """
    Per-particle CPHD pseudo-likelihood: a missed-detection term plus one
    detection term per measurement, each scaled by its upsilon ratio.
    """
    pD = np.asarray(pD, dtype=np.float64)
    cdn_pred = np.asarray(cdn_pred, dtype=np.float64)
    denom = float(stats.upsilon0 @ cdn_pred)
    if not np.isfinite(denom) or denom <= 0.0:
        raise NumericalCollapseError("upsilon0 . cdn_predict", denom)

    pseudo = (float(stats.upsilon1 @ cdn_pred) / denom) * (1.0 - pD)
    if stats.m:
        ratios = (stats.upsilon1_minus.T @ cdn_pred) / denom
        pseudo = pseudo + (pD[:, None] * stats.L / pdf_c) @ ratios
    return pseudo

def update_intensity(w: np.ndarray, pD: np.ndarray, stats: UpdateStats, cdn_pred: np.ndarray, pdf_c: float) -> np.ndarray:
    return pseudo_likelihood(pD, stats, cdn_pred, pdf_c) * np.asarray(w, dtype=np.float64)
