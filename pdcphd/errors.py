
from __future__ import annotations

class ConfigError(ValueError):
    pass

class MeasurementError(ValueError):
    def __init__(self, k: int | None, shape, z_dim: int):
        self.k = k
        self.shape = tuple(shape)
        self.z_dim = int(z_dim)
        where = "" if k is None else f" at time {k}"
        super().__init__(f"measurement set{where} has shape {self.shape}, expected (m, {self.z_dim})")

class NumericalCollapseError(FloatingPointError):
    def __init__(self, quantity: str, value: float, k: int | None = None):
        self.quantity = quantity
        self.value = float(value)
        self.k = k
        where = "" if k is None else f" at time {k}"
        super().__init__(f"numerical collapse{where}: {quantity} = {self.value!r}")
