"""
Base position samplers for splat fields.

This module provides the sampler hierarchy (BaseSampler, UniformSphereSampler,
GoldenSpiralSampler) and a lookup by configuration name.
"""

from simple_splat_field.fields.base import BaseSampler, sample_radii
from simple_splat_field.fields.golden import GOLDEN_ANGLE, GoldenSpiralSampler, golden_spiral_angles
from simple_splat_field.fields.uniform import UniformSphereSampler

SAMPLERS = {
    UniformSphereSampler.name: UniformSphereSampler,
    GoldenSpiralSampler.name: GoldenSpiralSampler,
}


def get_sampler(name: str) -> BaseSampler:
    """
    Create a sampler from its configuration name.

    Args:
        name: 'uniform' or 'golden'

    Returns:
        New sampler instance

    Raises:
        ValueError: If the name is unknown
    """
    if name not in SAMPLERS:
        raise ValueError(f"Unknown distribution '{name}', expected one of {sorted(SAMPLERS)}")
    return SAMPLERS[name]()


__all__ = [
    "BaseSampler",
    "UniformSphereSampler",
    "GoldenSpiralSampler",
    "GOLDEN_ANGLE",
    "SAMPLERS",
    "get_sampler",
    "golden_spiral_angles",
    "sample_radii",
]
