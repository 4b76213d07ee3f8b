
from __future__ import annotations
import argparse
import csv
import json
import logging
from pathlib import Path
import numpy as np

from pdcphd.config import load_config
from pdcphd.filter import run_filter
from pdcphd.metrics import ospa_series
from pdcphd.model import Model
from pdcphd.sim import simulate_scenario
from pdcphd.viz import save_estimates_xy, save_cardinality_curve, save_pd_curve, save_ospa_curve, write_json

def write_csv(rows, path):
    if not rows:
        Path(path).write_text("", encoding="utf-8")
        return
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        w.writerows(rows)

def load_measurements(path) -> list[np.ndarray]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    # shapes are checked by run_filter, only an empty set gets its width here
    return [np.asarray(Z, dtype=float) if len(Z) else np.zeros((0, 2)) for Z in data["Z"]]

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", type=str, default="configs/pdcphd_default.yaml")
    ap.add_argument("--meas", type=str, default=None, help="measurements.json from run_simulate.py")
    ap.add_argument("--outdir", type=str, default="outputs")
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    cfg = load_config(args.config)
    outdir = Path(args.outdir); outdir.mkdir(parents=True, exist_ok=True)
    model = Model(cfg.model)

    truth = None
    if args.meas is not None:
        meas = load_measurements(args.meas)
    elif cfg.scene is not None:
        truth, meas = simulate_scenario(cfg.scene, model)
    else:
        raise ValueError("need --meas or a scene section in config")

    res = run_filter(meas, model, cfg.filter)

    est_rows = []
    for d, e in zip(res.diagnostics, res.estimates):
        est_rows.append({"k": d.k, "N": e.N, "pD": e.pD, "eap": d.eap, "cdn_mean": d.cdn_mean,
                         "neff_update": d.neff_update, "neff_resample": d.neff_resample,
                         "J_predict": d.J_predict, "J_resample": d.J_resample})
    write_csv(est_rows, outdir/"estimates.csv")
    write_json({"filter": cfg.filter.__dict__, "J_birth": res.J_birth,
                "N": res.N, "X": res.X, "pD": res.pD}, outdir/"estimates.json")

    save_pd_curve(res.pD, outdir/"pd.png", pd_model=[d.pD_model for d in res.diagnostics])
    if truth is not None:
        ospa = ospa_series(truth["X"], res.X, cfg.viz.ospa_c, cfg.viz.ospa_p)
        write_json({"ospa": ospa}, outdir/"ospa.json")
        save_ospa_curve(ospa, outdir/"ospa.png", c=cfg.viz.ospa_c)
        save_estimates_xy(truth["X"], res.X, meas, outdir/"estimates_xy.png")
        save_cardinality_curve(truth["N"], res.N, outdir/"cardinality.png",
                               cdn_mean=[d.cdn_mean for d in res.diagnostics])
        print(f"mean OSPA={float(np.mean(ospa[:, 0])):.2f}")
    else:
        save_estimates_xy([], res.X, meas, outdir/"estimates_xy.png")

    print(f"Done. outputs -> {outdir.resolve()}")

if __name__ == "__main__":
    main()
