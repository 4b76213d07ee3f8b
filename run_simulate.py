
from __future__ import annotations
import argparse
import csv
from pathlib import Path

from pdcphd.config import load_config
from pdcphd.model import Model
from pdcphd.sim import simulate_scenario
from pdcphd.viz import save_estimates_xy, save_cardinality_curve, write_json

def write_csv(rows, path):
    if not rows:
        Path(path).write_text("", encoding="utf-8")
        return
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        w.writerows(rows)

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", type=str, default="configs/pdcphd_default.yaml")
    ap.add_argument("--outdir", type=str, default="outputs")
    args = ap.parse_args()

    cfg = load_config(args.config)
    if cfg.scene is None:
        raise ValueError("scene section missing in config")
    outdir = Path(args.outdir); outdir.mkdir(parents=True, exist_ok=True)

    model = Model(cfg.model)
    truth, meas = simulate_scenario(cfg.scene, model)

    rows = []
    for k, Z in enumerate(meas):
        for z in Z:
            rows.append({"k": k, "x_m": float(z[0]), "y_m": float(z[1])})

    write_json({"K": truth["K"], "X": truth["X"], "N": truth["N"], "track_ids": truth["track_ids"]},
               outdir/"ground_truth.json")
    write_json({"K": len(meas), "Z": meas}, outdir/"measurements.json")
    write_csv(rows, outdir/"measurements.csv")
    save_estimates_xy(truth["X"], [], meas, outdir/"scenario_xy.png", title="Scenario (XY)")
    save_cardinality_curve(truth["N"], [len(Z) for Z in meas], outdir/"measurement_count.png",
                           label="Measurements")
    print(f"K={len(meas)}, measurements={len(rows)}, max targets={int(truth['N'].max(initial=0))}")

if __name__ == "__main__":
    main()
