
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import List
import numpy as np

from .cardinality import expected_cardinality, predict_cardinality, update_cardinality
from .cluster import weighted_kmeans
from .config import FilterCfg, ModelCfg, validate_filter_cfg
from .errors import MeasurementError, NumericalCollapseError
from .extract import Estimate, extract_states
from .intensity import update_intensity
from .model import Model, PD_IDX
from .resample import effective_sample_size, resample
from .upsilon import compute_update_stats

logger = logging.getLogger(__name__)

# bootstrap prior: one negligible particle, no targets
M_INIT = np.array([0.1, 0.0, 0.1, 0.0], dtype=np.float64)
W_INIT = float(np.finfo(np.float64).eps)

@dataclass
class FilterState:
    x: np.ndarray
    w: np.ndarray
    cdn: np.ndarray
    k: int = 0
    stage: str = "initialized"

    @property
    def J(self) -> int:
        return int(self.w.shape[0])

@dataclass
class StepDiagnostics:
    k: int
    pD_avg: float
    eap: float
    N: int
    neff_update: float
    neff_resample: float
    pD_model: float
    cdn_mean: float
    J_predict: int
    J_resample: int

@dataclass
class FilterResult:
    params: FilterCfg
    J_birth: int
    estimates: List[Estimate] = field(default_factory=list)
    diagnostics: List[StepDiagnostics] = field(default_factory=list)

    @property
    def N(self) -> np.ndarray:
        return np.array([e.N for e in self.estimates], dtype=int)

    @property
    def X(self) -> list[np.ndarray]:
        return [e.X for e in self.estimates]

    @property
    def pD(self) -> np.ndarray:
        return np.array([e.pD for e in self.estimates], dtype=np.float64)

def as_measurement_set(Z, z_dim: int, k: int | None = None) -> np.ndarray:
    Z = np.asarray(Z, dtype=np.float64)
    if Z.size == 0:
        if Z.ndim == 2 and Z.shape[1] not in (0, z_dim):
            raise MeasurementError(k, Z.shape, z_dim)
        return np.zeros((0, z_dim), dtype=np.float64)
    if Z.ndim != 2 or Z.shape[1] != z_dim:
        raise MeasurementError(k, Z.shape, z_dim)
    if not np.all(np.isfinite(Z)):
        raise MeasurementError(k, Z.shape, z_dim)
    return Z

def validate_measurements(meas, z_dim: int) -> list[np.ndarray]:
    return [as_measurement_set(Z, z_dim, k) for k, Z in enumerate(meas)]

class PDCPHDFilter:
    """
    SMC pD-CPHD recursion. Holds only immutable configuration; the particle
    set and cardinality distribution travel in FilterState values.
    """

    def __init__(self, model: Model | ModelCfg, params: FilterCfg | None = None, cluster_fn=weighted_kmeans):
        self.params = params if params is not None else FilterCfg()
        validate_filter_cfg(self.params)
        self.model = model if isinstance(model, Model) else Model(model)
        self.cluster_fn = cluster_fn
        self.J_birth = self.model.L_birth * self.params.J_target

    def init_state(self, rng: np.random.Generator) -> FilterState:
        x = np.concatenate([[rng.beta(1.0, 1.0)], M_INIT])[None, :]
        w = np.array([W_INIT], dtype=np.float64)
        cdn = np.zeros(self.params.N_max + 1, dtype=np.float64)
        cdn[0] = 1.0
        return FilterState(x=x, w=w, cdn=cdn, k=0, stage="initialized")

    def predict(self, state: FilterState, rng: np.random.Generator) -> FilterState:
        model = self.model
        pS = model.compute_pS(state.x)
        x_predict = model.gen_newstate(state.x, rng)
        w_predict = pS * state.w

        x_birth, w_birth = model.gen_birth(self.params.J_target, rng)
        x_predict = np.vstack([x_predict, x_birth])
        w_predict = np.concatenate([w_predict, w_birth])

        cdn_predict = predict_cardinality(state.cdn, state.w, pS, float(np.sum(model.w_birth)))
        return FilterState(x=x_predict, w=w_predict, cdn=cdn_predict, k=state.k, stage="predicted")

    def update(self, pred: FilterState, Z: np.ndarray) -> FilterState:
        model = self.model
        pD = pred.x[:, PD_IDX]
        L = model.likelihood_matrix(Z, pred.x)
        stats = compute_update_stats(pred.w, pD, L, model.lambda_c, model.pdf_c, self.params.N_max)
        w_update = update_intensity(pred.w, pD, stats, pred.cdn, model.pdf_c)
        cdn_update = update_cardinality(pred.cdn, stats.upsilon0)
        return FilterState(x=pred.x, w=w_update, cdn=cdn_update, k=pred.k, stage="updated")

    def resample(self, upd: FilterState, rng: np.random.Generator) -> FilterState:
        x, w, _ = resample(upd.x, upd.w, self.params.J_target, self.params.J_max, rng)
        return FilterState(x=x, w=w, cdn=upd.cdn, k=upd.k, stage="resampled")

    def extract(self, rsp: FilterState, rng: np.random.Generator) -> Estimate:
        cluster_fn = partial(self.cluster_fn, rng=rng)
        return extract_states(rsp.x, rsp.w, cluster_fn, self.params.k_min_clusters)

    def step(self, state: FilterState, Z, rng: np.random.Generator):
        """One time step. Returns (next_state, Estimate, StepDiagnostics)."""
        k = state.k
        Z = as_measurement_set(Z, self.model.z_dim, k)
        try:
            pred = self.predict(state, rng)
            upd = self.update(pred, Z)
        except NumericalCollapseError as err:
            raise NumericalCollapseError(err.quantity, err.value, k=k) from err

        rsp = self.resample(upd, rng)
        est = self.extract(rsp, rng)

        diag = StepDiagnostics(
            k=k,
            pD_avg=est.pD,
            eap=float(np.sum(rsp.w)),
            N=est.N,
            neff_update=effective_sample_size(upd.w),
            neff_resample=effective_sample_size(rsp.w),
            pD_model=float(np.mean(self.model.compute_pD(pred.x[:, 1:]))),
            cdn_mean=expected_cardinality(upd.cdn),
            J_predict=pred.J,
            J_resample=rsp.J,
        )
        if self.params.run_flag != "silence":
            logger.info(" time= %d #avg pD=%.4g #eap target=%.4g #est card=%d Neff_updt= %d Neff_rsmp= %d",
                        k, diag.pD_avg, diag.eap, diag.N, round(diag.neff_update), round(diag.neff_resample))

        nxt = FilterState(x=rsp.x, w=rsp.w, cdn=rsp.cdn, k=k + 1, stage="extracted")
        return nxt, est, diag

def run_filter(meas, model: Model | ModelCfg, params: FilterCfg | None = None,
               rng: np.random.Generator | None = None, cluster_fn=weighted_kmeans) -> FilterResult:
    """
    Run the recursion over every measurement set in `meas` (each an (m, 2)
    array or an empty list). Configuration and all measurement sets are
    checked before the first step.
    """
    filt = PDCPHDFilter(model, params, cluster_fn=cluster_fn)
    meas = validate_measurements(meas, filt.model.z_dim)
    if rng is None:
        rng = np.random.default_rng(filt.params.seed)

    result = FilterResult(params=filt.params, J_birth=filt.J_birth)
    state = filt.init_state(rng)
    for Z in meas:
        state, est, diag = filt.step(state, Z, rng)
        result.estimates.append(est)
        result.diagnostics.append(diag)
    return result
