
from __future__ import annotations
import numpy as np
from scipy.stats import multivariate_normal

from .config import ModelCfg, validate_model_cfg

# particle layout: [pD, px, vx, py, vy]
X_DIM = 5
Z_DIM = 2
PD_IDX = 0
POS_IDX = (1, 3)

def ncv_F_B(T: float):
    """Nearly-constant-velocity transition on [px, vx, py, vy] and its noise gain."""
    A0 = np.array([[1, T], [0, 1]], dtype=np.float64)
    B0 = np.array([[0.5*T*T], [T]], dtype=np.float64)
    F = np.kron(np.eye(2), A0)
    B = np.kron(np.eye(2), B0)
    return F, B

class Model:
    """
    Motion, birth, measurement, clutter and detection-profile collaborators of
    the filter, evaluated on particle batches of shape (J, X_DIM).
    """

    def __init__(self, cfg: ModelCfg):
        validate_model_cfg(cfg)
        self.cfg = cfg
        mo = cfg.motion
        self.T = float(mo.T)
        self.sigma_v = float(mo.sigma_v)
        self.F, self.B = ncv_F_B(self.T)
        self.P_S = float(mo.P_S)
        self.pd_concentration = float(mo.pd_concentration)

        self.H = np.array([[1, 0, 0, 0], [0, 0, 1, 0]], dtype=np.float64)
        self.R = np.diag(np.asarray(cfg.measurement.sigma_z, dtype=np.float64)**2)

        self.L_birth = len(cfg.births)
        self.w_birth = np.array([b.w for b in cfg.births], dtype=np.float64)
        self.m_birth = np.array([b.m for b in cfg.births], dtype=np.float64)
        self.B_birth = np.array([b.B for b in cfg.births], dtype=np.float64)
        self.u_b = np.array([b.u for b in cfg.births], dtype=np.float64)
        self.v_b = np.array([b.v for b in cfg.births], dtype=np.float64)

        self.lambda_c = float(cfg.clutter.lambda_c)
        self.range_c = np.array(cfg.clutter.range_c, dtype=np.float64)
        self.pdf_c = float(cfg.clutter.pdf_c)

        de = cfg.detection
        self.pd_max = float(de.pd_max)
        self.pd_mid = np.asarray(de.pd_mid, dtype=np.float64)
        self.pd_sigma = np.asarray(de.pd_sigma, dtype=np.float64)

    @property
    def x_dim(self) -> int:
        return X_DIM

    @property
    def z_dim(self) -> int:
        return Z_DIM

    def compute_pS(self, x: np.ndarray) -> np.ndarray:
        return np.full(np.asarray(x).shape[0], self.P_S, dtype=np.float64)

    def gen_newstate(self, x: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        J = x.shape[0]
        out = np.empty_like(x)
        kin = x[:, 1:]
        out[:, 1:] = kin @ self.F.T + (self.sigma_v * rng.standard_normal((J, 2))) @ self.B.T

        # Beta jitter keeps the mean of the detection coordinate
        mu = np.clip(x[:, PD_IDX], 1e-6, 1.0 - 1e-6)
        out[:, PD_IDX] = rng.beta(mu * self.pd_concentration, (1.0 - mu) * self.pd_concentration)
        return out

    def gen_birth(self, J_per_birth: int, rng: np.random.Generator):
        """Returns (x_birth (L_birth*J_per_birth, X_DIM), w_birth)."""
        parts = []
        for t in range(self.L_birth):
            kin = self.m_birth[t][None, :] + rng.standard_normal((J_per_birth, 4)) @ self.B_birth[t].T
            pd = rng.beta(self.u_b[t], self.v_b[t], size=J_per_birth)
            parts.append(np.column_stack([pd, kin]))
        x = np.vstack(parts)
        J_birth = x.shape[0]
        w = np.full(J_birth, float(np.sum(self.w_birth)) / J_birth, dtype=np.float64)
        return x, w

    def compute_likelihood(self, z: np.ndarray, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        if x.shape[0] == 0:
            return np.zeros(0, dtype=np.float64)
        pos = x[:, list(POS_IDX)]
        return np.atleast_1d(multivariate_normal.pdf(pos, mean=np.asarray(z, dtype=np.float64), cov=self.R))

    def likelihood_matrix(self, Z: np.ndarray, x: np.ndarray) -> np.ndarray:
        Z = np.asarray(Z, dtype=np.float64).reshape(-1, Z_DIM)
        L = np.zeros((np.asarray(x).shape[0], Z.shape[0]), dtype=np.float64)
        for ell in range(Z.shape[0]):
            L[:, ell] = self.compute_likelihood(Z[ell], x)
        return L

    def compute_pD(self, X: np.ndarray) -> np.ndarray:
        """Detection profile on position; X holds kinematic rows [px, vx, py, vy]."""
        X = np.asarray(X, dtype=np.float64).reshape(-1, 4)
        if X.shape[0] == 0:
            return np.zeros(0, dtype=np.float64)
        P = X[:, [0, 2]]
        e_sq = np.sum(((P - self.pd_mid[None, :]) / self.pd_sigma[None, :])**2, axis=1)
        return self.pd_max * np.exp(-e_sq / 2.0)
