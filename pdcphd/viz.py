
from __future__ import annotations
import json
from pathlib import Path
import numpy as np
import matplotlib.pyplot as plt

def _to_jsonable(obj):
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    raise TypeError(f"not JSON serializable: {type(obj).__name__}")

def write_json(obj, path):
    Path(path).write_text(json.dumps(obj, indent=2, default=_to_jsonable), encoding="utf-8")

def save_estimates_xy(truth_X, est_X, meas, out_path, title="Estimates vs truth (XY)"):
    plt.figure()
    any_pts = False
    Z = [z for z in meas if len(z)]
    if Z:
        Z = np.vstack(Z); any_pts = True
        plt.scatter(Z[:, 0], Z[:, 1], s=4, c="lightgray", label="Measurements")
    T = [x for x in truth_X if len(x)]
    if T:
        T = np.vstack(T); any_pts = True
        plt.scatter(T[:, 0], T[:, 2], s=6, c="k", label="Truth")
    E = [x for x in est_X if len(x)]
    if E:
        E = np.vstack(E); any_pts = True
        plt.scatter(E[:, 0], E[:, 2], s=14, marker="x", c="tab:red", label="Estimates")
    plt.axis("equal"); plt.xlabel("x (m)"); plt.ylabel("y (m)")
    plt.title(title)
    if any_pts:
        plt.legend(loc="best", fontsize=8)
    plt.tight_layout(); plt.savefig(out_path, dpi=200); plt.close()

def save_cardinality_curve(truth_N, est_N, out_path, cdn_mean=None, label="Estimated"):
    plt.figure()
    k = np.arange(len(est_N))
    plt.step(np.arange(len(truth_N)), truth_N, where="mid", c="k", label="True")
    plt.plot(k, est_N, "x", c="tab:red", label=label)
    if cdn_mean is not None:
        plt.plot(k, cdn_mean, c="tab:blue", lw=1, label="Posterior mean")
    plt.xlabel("time step"); plt.ylabel("cardinality")
    plt.title("Cardinality vs time")
    plt.legend(loc="best", fontsize=8)
    plt.tight_layout(); plt.savefig(out_path, dpi=200); plt.close()

def save_pd_curve(pd_est, out_path, pd_model=None):
    plt.figure()
    k = np.arange(len(pd_est))
    plt.plot(k, pd_est, c="tab:red", label="Estimated avg pD")
    if pd_model is not None:
        plt.plot(k, pd_model, c="k", ls="--", label="Profile at prediction")
    plt.ylim(0.0, 1.0)
    plt.xlabel("time step"); plt.ylabel("pD")
    plt.title("Detection probability vs time")
    plt.legend(loc="best", fontsize=8)
    plt.tight_layout(); plt.savefig(out_path, dpi=200); plt.close()

def save_ospa_curve(ospa, out_path, c=None):
    ospa = np.asarray(ospa, dtype=float).reshape(-1, 3)
    plt.figure()
    k = np.arange(ospa.shape[0])
    for i, name in enumerate(("OSPA", "localization", "cardinality")):
        plt.plot(k, ospa[:, i], label=name)
    if c is not None:
        plt.ylim(0.0, float(c))
    plt.xlabel("time step"); plt.ylabel("distance (m)")
    plt.title("OSPA vs time")
    plt.legend(loc="best", fontsize=8)
    plt.tight_layout(); plt.savefig(out_path, dpi=200); plt.close()
