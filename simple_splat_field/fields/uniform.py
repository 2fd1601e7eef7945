"""
Uniform-in-ball sampler.

Each point is drawn independently and uniformly from the solid ball. There is
no smoothness guarantee between neighbouring indices.
"""

from typing import Optional

import torch
import torch.nn.functional as F

from .base import BaseSampler, sample_radii


class UniformSphereSampler(BaseSampler):
    """Independent uniform samples from the solid ball of a given radius."""

    name = "uniform"

    def _generate_impl(self, count: int, radius: float, generator: Optional[torch.Generator]) -> torch.Tensor:
        # Normalized isotropic Gaussian gives a uniform direction on the sphere
        directions = torch.randn(count, 3, generator=generator, dtype=torch.float64)
        directions = F.normalize(directions, p=2, dim=-1)
        radii = sample_radii(count, radius, generator)
        return directions * radii.unsqueeze(-1)
