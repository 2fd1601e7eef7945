"""
Configuration for the splat field component.

This module provides the caller-facing configuration surface. Bounded fields are
clamped here, at the boundary, so out-of-range values never reach buffer math.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

logger = logging.getLogger(__name__)

MAX_SPLAT_COUNT = 100000
SPLAT_COUNT_RANGE: Tuple[int, int] = (1, MAX_SPLAT_COUNT)
SPLAT_SIZE_RANGE: Tuple[float, float] = (0.001, 0.1)
CLOUD_RADIUS_RANGE: Tuple[float, float] = (0.5, 10.0)
SPEED_RANGE: Tuple[float, float] = (0.0, 10.0)

Distribution = Literal["uniform", "golden"]
Animation = Literal["static", "orbit"]


@dataclass
class SplatFieldConfig:
    """Configuration for a procedurally generated splat field."""

    splat_count: int = 1000
    """Number of splats in the field (1 to 100000)."""

    splat_size: float = 0.01
    """Isotropic standard deviation of every splat (0.001 to 0.1)."""

    cloud_radius: float = 2.0
    """Radius of the bounding sphere of the cloud (0.5 to 10)."""

    speed: float = 1.0
    """Animation speed multiplier, only used by the orbit animation (0 to 10)."""

    distribution: Distribution = "uniform"
    """Base position sampler: 'uniform' ball or 'golden' angle spiral."""

    animation: Animation = "static"
    """Per-frame animation: 'static' or 'orbit'."""

    seed: Optional[int] = None
    """Seed for the random radius samples. None gives a different cloud per run."""

    device: str = "cpu"
    """Torch device the buffers are allocated on."""

    @classmethod
    def static(cls, **kwargs) -> "SplatFieldConfig":
        """Uniform ball of splats that never moves."""
        return cls(distribution="uniform", animation="static", **kwargs)

    @classmethod
    def animated(cls, **kwargs) -> "SplatFieldConfig":
        """Golden-angle spiral cloud orbiting around the vertical axis."""
        return cls(distribution="golden", animation="orbit", **kwargs)

    def clamped(self) -> "SplatFieldConfig":
        """
        Return a copy with every bounded field clamped into its valid range.

        A warning is logged for each field that had to be changed.

        Returns:
            New SplatFieldConfig with in-range values
        """
        bounds = {
            "splat_count": SPLAT_COUNT_RANGE,
            "splat_size": SPLAT_SIZE_RANGE,
            "cloud_radius": CLOUD_RADIUS_RANGE,
            "speed": SPEED_RANGE,
        }
        changes = {}
        for name, (low, high) in bounds.items():
            value = getattr(self, name)
            clamped = min(max(value, low), high)
            if clamped != value:
                logger.warning("%s=%s is out of range [%s, %s], clamped to %s", name, value, low, high, clamped)
                changes[name] = clamped
        return dataclasses.replace(self, **changes)


__all__ = [
    "MAX_SPLAT_COUNT",
    "SPLAT_COUNT_RANGE",
    "SPLAT_SIZE_RANGE",
    "CLOUD_RADIUS_RANGE",
    "SPEED_RANGE",
    "SplatFieldConfig",
]
