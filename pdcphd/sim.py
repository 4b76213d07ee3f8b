
from __future__ import annotations
import numpy as np

from .config import SceneCfg
from .model import Model

def gen_truth(scene: SceneCfg, model: Model) -> dict:
    """Noise-free NCV ground truth. X[k] holds rows [px, vx, py, vy] of live targets."""
    K = int(scene.K)
    X = [[] for _ in range(K)]
    ids = [[] for _ in range(K)]
    for tgt in scene.targets:
        s = np.asarray(tgt.x0, dtype=np.float64)
        for k in range(max(tgt.birth, 0), min(tgt.death, K)):
            X[k].append(s)
            ids[k].append(int(tgt.id))
            s = model.F @ s

    X = [np.array(x, dtype=np.float64).reshape(len(x), 4) for x in X]
    N = np.array([x.shape[0] for x in X], dtype=int)
    return {"K": K, "X": X, "N": N, "track_ids": ids}

def gen_meas(truth: dict, model: Model, scene: SceneCfg, rng: np.random.Generator | None = None) -> list[np.ndarray]:
    """Thinned, noisy target returns plus Poisson clutter uniform over range_c."""
    if rng is None:
        rng = np.random.default_rng(scene.seed)
    D = np.sqrt(model.R)
    lo = model.range_c[:, 0]
    span = model.range_c[:, 1] - model.range_c[:, 0]

    meas = []
    for k in range(truth["K"]):
        Xk = truth["X"][k]
        Z = np.zeros((0, 2), dtype=np.float64)
        if Xk.shape[0]:
            if scene.detection_pd is None:
                pd = model.compute_pD(Xk)
            else:
                pd = np.full(Xk.shape[0], scene.detection_pd, dtype=np.float64)
            detected = rng.random(Xk.shape[0]) <= pd
            Xd = Xk[detected]
            Z = Xd @ model.H.T + rng.standard_normal((Xd.shape[0], 2)) @ D.T

        N_c = rng.poisson(model.lambda_c)
        C = lo[None, :] + span[None, :] * rng.random((N_c, 2))
        meas.append(np.vstack([Z, C]))
    return meas

def simulate_scenario(scene: SceneCfg, model: Model):
    rng = np.random.default_rng(scene.seed)
    truth = gen_truth(scene, model)
    meas = gen_meas(truth, model, scene, rng)
    return truth, meas
