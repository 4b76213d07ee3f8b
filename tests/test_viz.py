import json
import matplotlib
matplotlib.use("Agg")
import numpy as np

from pdcphd.viz import save_cardinality_curve, save_estimates_xy, save_ospa_curve, save_pd_curve, write_json

def test_write_json_numpy(tmp_path):
    p = tmp_path / "o.json"
    write_json({"N": np.array([1, 2]), "pD": np.float64(0.5), "X": [np.zeros((1, 4))]}, p)
    data = json.loads(p.read_text(encoding="utf-8"))
    assert data["N"] == [1, 2]
    assert data["pD"] == 0.5
    assert data["X"] == [[[0.0, 0.0, 0.0, 0.0]]]

def test_plots_written(tmp_path):
    truth = [np.array([[0.0, 0.0, 0.0, 0.0]]), np.zeros((0, 4))]
    est = [np.array([[1.0, 0.0, 1.0, 0.0]]), np.zeros((0, 4))]
    meas = [np.array([[0.5, 0.5]]), np.zeros((0, 2))]
    save_estimates_xy(truth, est, meas, tmp_path / "xy.png")
    save_cardinality_curve([1, 0], [1, 0], tmp_path / "card.png", cdn_mean=[1.0, 0.1])
    save_pd_curve([0.9, 0.8], tmp_path / "pd.png", pd_model=[0.98, 0.98])
    save_ospa_curve(np.zeros((2, 3)), tmp_path / "ospa.png", c=100.0)
    for name in ("xy.png", "card.png", "pd.png", "ospa.png"):
        assert (tmp_path / name).stat().st_size > 0

def test_cardinality_curve_label(tmp_path, monkeypatch):
    import matplotlib.pyplot as plt
    import pdcphd.viz as viz
    monkeypatch.setattr(viz.plt, "close", lambda *a, **k: None)
    save_cardinality_curve([1, 2], [3, 4], tmp_path / "count.png", label="Measurements")
    texts = [t.get_text() for t in plt.gca().get_legend().get_texts()]
    plt.close("all")
    assert texts == ["True", "Measurements"]
