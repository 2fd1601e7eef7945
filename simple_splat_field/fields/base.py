"""
Base sampler class for splat field base positions.

This module provides the abstract base class for all position samplers,
defining the common interface for seeding the rest pose of a splat field.
"""

from abc import ABC, abstractmethod
from typing import Optional

import torch


class BaseSampler(ABC):
    """
    Abstract base class for base position samplers.

    A sampler places N points inside a sphere of a given radius. All random
    draws go through the supplied generator so that a seeded generator yields
    the exact same field on every call.

    Attributes:
        name: Short name used to select the sampler from configuration
    """

    name: str = ""

    def generate(
        self,
        count: int,
        radius: float,
        generator: Optional[torch.Generator] = None,
        device: torch.device = torch.device("cpu"),
    ) -> torch.Tensor:
        """
        Generate base positions for a splat field.

        Args:
            count: Number of splats. Non-positive counts give an empty field.
            radius: Radius of the bounding sphere
            generator: Optional CPU torch generator used for every random draw
            device: Torch device for the returned tensor

        Returns:
            Base positions [N, 3] as float32
        """
        if count <= 0:
            return torch.zeros(0, 3, dtype=torch.float32, device=device)
        positions = self._generate_impl(count, radius, generator)
        return positions.to(device=device, dtype=torch.float32)

    @abstractmethod
    def _generate_impl(self, count: int, radius: float, generator: Optional[torch.Generator]) -> torch.Tensor:
        """
        Place count (> 0) points on the CPU.

        Args:
            count: Number of splats, always positive
            radius: Radius of the bounding sphere
            generator: Optional CPU torch generator

        Returns:
            Positions [count, 3]
        """
        pass


def sample_radii(count: int, radius: float, generator: Optional[torch.Generator] = None) -> torch.Tensor:
    """
    Draw radii with uniform volumetric density inside a ball.

    Args:
        count: Number of radii
        radius: Ball radius
        generator: Optional CPU torch generator

    Returns:
        Radii [count] in [0, radius)
    """
    u = torch.rand(count, generator=generator, dtype=torch.float64)
    # Cube root keeps the density uniform per unit volume
    return radius * u.pow(1.0 / 3.0)
