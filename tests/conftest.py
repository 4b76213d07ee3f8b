import numpy as np
import pytest

from pdcphd.config import (BirthCfg, ClutterCfg, DetectionCfg, FilterCfg, MeasurementCfg,
                           ModelCfg, MotionCfg)

def make_model_cfg(lambda_c=0.0, births=None, sigma_z=2.0, sigma_v=1.0, P_S=0.99):
    if births is None:
        births = [BirthCfg(w=0.1, m=(100.0, 0.0, 200.0, 0.0),
                           B=tuple(map(tuple, np.diag([5.0, 1.0, 5.0, 1.0]))), u=10.0, v=1.0)]
    return ModelCfg(
        motion=MotionCfg(T=1.0, sigma_v=sigma_v, P_S=P_S, pd_concentration=100.0),
        births=births,
        measurement=MeasurementCfg(sigma_z=(sigma_z, sigma_z)),
        detection=DetectionCfg(),
        clutter=ClutterCfg(lambda_c=lambda_c),
    )

@pytest.fixture
def model_cfg():
    return make_model_cfg()

@pytest.fixture
def filter_cfg():
    return FilterCfg(J_max=5000, J_target=200, N_max=10, run_flag="silence", seed=3)

@pytest.fixture
def rng():
    return np.random.default_rng(1234)
