"""
Core generation and publication components.

This module contains the animation and covariance math, the structured buffers
and their publisher, the renderer binding, and the host-facing component.
"""

from simple_splat_field.core.animation import (
    BaseAnimation,
    OrbitAnimation,
    StaticAnimation,
    get_animation,
    position_colors,
)
from simple_splat_field.core.binding import ExternalBufferRenderer, bind_renderer
from simple_splat_field.core.buffers import BufferQuartet, SplatFrame, StructuredBuffer
from simple_splat_field.core.component import SplatFieldComponent
from simple_splat_field.core.covariance import decode, encode, encode_field
from simple_splat_field.core.publisher import BufferPublisher, PublisherState
from simple_splat_field.core.validation import ValidatingRenderer, ValidationReport

__all__ = [
    # Animation
    "BaseAnimation",
    "StaticAnimation",
    "OrbitAnimation",
    "get_animation",
    "position_colors",
    # Covariance
    "encode",
    "encode_field",
    "decode",
    # Buffers
    "StructuredBuffer",
    "SplatFrame",
    "BufferQuartet",
    "BufferPublisher",
    "PublisherState",
    # Renderers
    "ExternalBufferRenderer",
    "bind_renderer",
    "ValidatingRenderer",
    "ValidationReport",
    # Host component
    "SplatFieldComponent",
]
