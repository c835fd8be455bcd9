from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class TolerancePolicy:
    """
    Value-object holding the per-channel colour tolerances (0-255).

    ``uniform`` applies when all three channel deltas are equal (a flat
    brightness shift), ``general`` applies otherwise.
    """
    general: int = 110
    uniform: int = 100

    def __post_init__(self):
        for name in ("general", "uniform"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"{name} tolerance must be in [0, 255], got {value}")
        if self.uniform > self.general:
            raise ValueError(
                f"uniform tolerance ({self.uniform}) must not exceed general tolerance ({self.general})"
            )

    def threshold_for(self, d_r: int, d_g: int, d_b: int) -> int:
        if d_r == d_g == d_b:
            return self.uniform
        return self.general


DEFAULT_TOLERANCE = TolerancePolicy()
