"""
Simple Splat Field - A procedural Gaussian splat producer for external buffer renderers.

This package generates a synthetic splat cloud, animates it frame by frame, and
publishes it into structured buffers consumed by an external renderer, to
exercise a renderer's external buffer ingestion path without an authored asset.
"""

__version__ = "0.1.0"

from simple_splat_field.config import SplatFieldConfig
from simple_splat_field.core import (
    BufferPublisher,
    BufferQuartet,
    SplatFieldComponent,
    SplatFrame,
    StructuredBuffer,
    ValidatingRenderer,
)
from simple_splat_field.errors import (
    BufferAllocationError,
    BufferConsistencyError,
    PublisherStateError,
    SplatFieldError,
)
from simple_splat_field.fields import GoldenSpiralSampler, UniformSphereSampler

__all__ = [
    "SplatFieldConfig",
    "SplatFieldComponent",
    "BufferPublisher",
    "BufferQuartet",
    "SplatFrame",
    "StructuredBuffer",
    "ValidatingRenderer",
    "UniformSphereSampler",
    "GoldenSpiralSampler",
    "SplatFieldError",
    "BufferAllocationError",
    "BufferConsistencyError",
    "PublisherStateError",
]
