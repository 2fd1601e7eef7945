"""
Golden-angle spiral sampler.

Angles come from a golden-angle spiral over the sphere, which depends only on
the index and the splat count. Radii are randomized with a cube-root draw so the
cloud fills the ball with uniform density.
"""

import math
from typing import Optional, Tuple

import torch

from .base import BaseSampler, sample_radii

GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


def golden_spiral_angles(count: int) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Compute spiral angles for count points.

    Args:
        count: Number of points (> 0)

    Returns:
        Tuple of (inclination [count], azimuth [count]) in radians
    """
    index = torch.arange(count, dtype=torch.float64)
    if count > 1:
        t = index / (count - 1)
    else:
        t = torch.zeros(count, dtype=torch.float64)
    inclination = torch.acos((1.0 - 2.0 * t).clamp(-1.0, 1.0))
    azimuth = index * GOLDEN_ANGLE
    return inclination, azimuth


class GoldenSpiralSampler(BaseSampler):
    """
    Golden-angle spiral directions with randomized volumetric radius.

    The vertical axis is y: inclination is measured from +y and azimuth turns
    in the horizontal xz plane.
    """

    name = "golden"

    def _generate_impl(self, count: int, radius: float, generator: Optional[torch.Generator]) -> torch.Tensor:
        inclination, azimuth = golden_spiral_angles(count)
        r = sample_radii(count, radius, generator)

        sin_incl = torch.sin(inclination)
        x = r * sin_incl * torch.cos(azimuth)
        y = r * torch.cos(inclination)
        z = r * sin_incl * torch.sin(azimuth)
        return torch.stack((x, y, z), dim=-1)
