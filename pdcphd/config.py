
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple
import numpy as np
import yaml

from .errors import ConfigError

RUN_FLAGS = ("disp", "silence")

@dataclass(frozen=True)
class FilterCfg:
    J_max: int = 30000
    J_target: int = 3000
    N_max: int = 20
    run_flag: str = "disp"
    k_min_clusters: int = 1
    seed: int | None = None

@dataclass(frozen=True)
class MotionCfg:
    T: float = 1.0
    sigma_v: float = 5.0
    P_S: float = 0.99
    pd_concentration: float = 100.0

@dataclass(frozen=True)
class BirthCfg:
    w: float
    m: Tuple[float, float, float, float]
    B: Tuple[Tuple[float, ...], ...]
    u: float = 1.0
    v: float = 1.0

@dataclass(frozen=True)
class MeasurementCfg:
    sigma_z: Tuple[float, float] = (10.0, 10.0)

@dataclass(frozen=True)
class DetectionCfg:
    pd_max: float = 0.98
    pd_mid: Tuple[float, float] = (0.0, 0.0)
    pd_sigma: Tuple[float, float] = (6000.0, 6000.0)

@dataclass(frozen=True)
class ClutterCfg:
    lambda_c: float = 10.0
    range_c: Tuple[Tuple[float, float], Tuple[float, float]] = ((-1000.0, 1000.0), (-1000.0, 1000.0))

    @property
    def pdf_c(self) -> float:
        (x0, x1), (y0, y1) = self.range_c
        return 1.0 / ((x1 - x0) * (y1 - y0))

@dataclass(frozen=True)
class ModelCfg:
    motion: MotionCfg
    births: List[BirthCfg]
    measurement: MeasurementCfg
    detection: DetectionCfg
    clutter: ClutterCfg

@dataclass(frozen=True)
class SceneTargetCfg:
    id: int
    birth: int
    death: int
    x0: Tuple[float, float, float, float]

@dataclass(frozen=True)
class SceneCfg:
    seed: int
    K: int
    targets: List[SceneTargetCfg]
    detection_pd: float | None = None

@dataclass(frozen=True)
class VizCfg:
    ospa_c: float = 100.0
    ospa_p: float = 1.0

@dataclass(frozen=True)
class Config:
    filter: FilterCfg
    model: ModelCfg
    scene: SceneCfg | None
    viz: VizCfg

def _pair(v, name: str) -> Tuple[float, float]:
    v = [float(a) for a in v]
    if len(v) != 2:
        raise ConfigError(f"{name} must have 2 entries, got {len(v)}")
    return (v[0], v[1])

def parse_filter_cfg(fl: Dict[str, Any]) -> FilterCfg:
    seed = fl.get("seed", None)
    return FilterCfg(
        J_max=int(fl.get("J_max", 30000)),
        J_target=int(fl.get("J_target", 3000)),
        N_max=int(fl.get("N_max", 20)),
        run_flag=str(fl.get("run_flag", "disp")),
        k_min_clusters=int(fl.get("k_min_clusters", 1)),
        seed=None if seed is None else int(seed),
    )

def parse_model_cfg(md: Dict[str, Any]) -> ModelCfg:
    mo = md.get("motion", {})
    motion = MotionCfg(
        T=float(mo.get("T", 1.0)),
        sigma_v=float(mo.get("sigma_v", 5.0)),
        P_S=float(mo.get("P_S", 0.99)),
        pd_concentration=float(mo.get("pd_concentration", 100.0)),
    )

    births = []
    for b in md.get("births", []):
        B = b.get("B", [10.0, 10.0, 10.0, 10.0])
        B = np.asarray(B, dtype=float)
        if B.ndim == 1:
            B = np.diag(B)
        births.append(BirthCfg(
            w=float(b["w"]),
            m=tuple(float(a) for a in b["m"]),
            B=tuple(tuple(float(a) for a in row) for row in B),
            u=float(b.get("u", 1.0)),
            v=float(b.get("v", 1.0)),
        ))

    me = md.get("measurement", {})
    measurement = MeasurementCfg(sigma_z=_pair(me.get("sigma_z", [10.0, 10.0]), "measurement.sigma_z"))

    de = md.get("detection", {})
    detection = DetectionCfg(
        pd_max=float(de.get("pd_max", 0.98)),
        pd_mid=_pair(de.get("pd_mid", [0.0, 0.0]), "detection.pd_mid"),
        pd_sigma=_pair(de.get("pd_sigma", [6000.0, 6000.0]), "detection.pd_sigma"),
    )

    cl = md.get("clutter", {})
    rc = cl.get("range_c", [[-1000.0, 1000.0], [-1000.0, 1000.0]])
    if len(rc) != 2:
        raise ConfigError(f"clutter.range_c must have 2 rows, got {len(rc)}")
    clutter = ClutterCfg(
        lambda_c=float(cl.get("lambda_c", 10.0)),
        range_c=(_pair(rc[0], "clutter.range_c[0]"), _pair(rc[1], "clutter.range_c[1]")),
    )

    return ModelCfg(motion=motion, births=births, measurement=measurement,
                    detection=detection, clutter=clutter)

def parse_scene_cfg(sc: Dict[str, Any]) -> SceneCfg:
    K = int(sc["K"])
    targets = []
    for i, t in enumerate(sc.get("targets", [])):
        targets.append(SceneTargetCfg(
            id=int(t.get("id", i + 1)),
            birth=int(t.get("birth", 0)),
            death=int(t.get("death", K)),
            x0=tuple(float(a) for a in t["x0"]),
        ))
    pd = sc.get("detection_pd", None)
    return SceneCfg(seed=int(sc.get("seed", 0)), K=K, targets=targets,
                    detection_pd=None if pd is None else float(pd))

def validate_filter_cfg(cfg: FilterCfg) -> None:
    if cfg.N_max < 0:
        raise ConfigError(f"N_max must be >= 0, got {cfg.N_max}")
    if cfg.J_target < 1:
        raise ConfigError(f"J_target must be >= 1, got {cfg.J_target}")
    if cfg.J_max < 1:
        raise ConfigError(f"J_max must be >= 1, got {cfg.J_max}")
    if cfg.k_min_clusters < 1:
        raise ConfigError(f"k_min_clusters must be >= 1, got {cfg.k_min_clusters}")
    if cfg.run_flag not in RUN_FLAGS:
        raise ConfigError(f"run_flag must be one of {RUN_FLAGS}, got {cfg.run_flag!r}")

def _check_prob(p: float, name: str) -> None:
    if not (0.0 <= p <= 1.0):
        raise ConfigError(f"{name} must lie in [0, 1], got {p}")

def validate_model_cfg(cfg: ModelCfg) -> None:
    mo = cfg.motion
    if mo.T <= 0 or mo.sigma_v < 0:
        raise ConfigError(f"motion needs T > 0 and sigma_v >= 0, got T={mo.T}, sigma_v={mo.sigma_v}")
    _check_prob(mo.P_S, "motion.P_S")
    if mo.pd_concentration <= 0:
        raise ConfigError(f"motion.pd_concentration must be > 0, got {mo.pd_concentration}")

    if not cfg.births:
        raise ConfigError("model needs at least one birth term")
    for i, b in enumerate(cfg.births):
        if len(b.m) != 4:
            raise ConfigError(f"births[{i}].m must have 4 entries, got {len(b.m)}")
        if np.asarray(b.B, dtype=float).shape != (4, 4):
            raise ConfigError(f"births[{i}].B must be 4x4, got {np.asarray(b.B).shape}")
        if b.w < 0:
            raise ConfigError(f"births[{i}].w must be >= 0, got {b.w}")
        if b.u <= 0 or b.v <= 0:
            raise ConfigError(f"births[{i}] beta parameters must be > 0, got u={b.u}, v={b.v}")
    if sum(b.w for b in cfg.births) <= 0:
        raise ConfigError("total birth weight must be > 0")

    if min(cfg.measurement.sigma_z) <= 0:
        raise ConfigError(f"measurement.sigma_z must be > 0, got {cfg.measurement.sigma_z}")

    de = cfg.detection
    _check_prob(de.pd_max, "detection.pd_max")
    if min(de.pd_sigma) <= 0:
        raise ConfigError(f"detection.pd_sigma must be > 0, got {de.pd_sigma}")

    cl = cfg.clutter
    if cl.lambda_c < 0:
        raise ConfigError(f"clutter.lambda_c must be >= 0, got {cl.lambda_c}")
    (x0, x1), (y0, y1) = cl.range_c
    if x1 <= x0 or y1 <= y0:
        raise ConfigError(f"clutter.range_c must have positive extent, got {cl.range_c}")

def parse_config(data: Dict[str, Any]) -> Config:
    filt = parse_filter_cfg(data.get("filter", {}))
    model = parse_model_cfg(data["model"])
    validate_filter_cfg(filt)
    validate_model_cfg(model)

    sc = data.get("scene", None)
    scene = None if sc is None else parse_scene_cfg(sc)

    vz = data.get("viz", {})
    viz = VizCfg(ospa_c=float(vz.get("ospa_c", 100.0)),
                 ospa_p=float(vz.get("ospa_p", 1.0)))

    return Config(filter=filt, model=model, scene=scene, viz=viz)

def load_config(path: str | Path) -> Config:
    path = Path(path)
    data: Dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8"))
    return parse_config(data)
