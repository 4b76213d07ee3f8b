import json
import numpy as np
import pytest

import run_filter as cli
from pdcphd.errors import MeasurementError
from pdcphd.filter import run_filter

from conftest import make_model_cfg

def test_load_measurements_keeps_shape(tmp_path):
    p = tmp_path / "m.json"
    p.write_text(json.dumps({"K": 2, "Z": [[[1.0, 2.0], [3.0, 4.0]], []]}), encoding="utf-8")
    meas = cli.load_measurements(p)
    assert meas[0].shape == (2, 2)
    assert meas[1].shape == (0, 2)

def test_wrong_dimension_rejected(tmp_path, filter_cfg):
    p = tmp_path / "m.json"
    p.write_text(json.dumps({"K": 1, "Z": [[[1, 2, 3], [4, 5, 6]]]}), encoding="utf-8")
    meas = cli.load_measurements(p)
    assert meas[0].shape == (2, 3)
    with pytest.raises(MeasurementError):
        run_filter(meas, make_model_cfg(), filter_cfg)
