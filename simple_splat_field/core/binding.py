"""
Binding between a buffer quartet and an external renderer.

The renderer only ever sees read-only buffer handles. It keeps them until the
next bind call, and never disposes them: ownership stays with the publisher.
"""

import logging
from typing import Optional, Protocol, runtime_checkable

from .buffers import BufferQuartet, StructuredBuffer

logger = logging.getLogger(__name__)


@runtime_checkable
class ExternalBufferRenderer(Protocol):
    """Renderer that draws splats from externally owned buffers."""

    def set_external_buffers(
        self,
        position: Optional[StructuredBuffer],
        color: Optional[StructuredBuffer],
        cov0: Optional[StructuredBuffer],
        cov1: Optional[StructuredBuffer],
        count: int,
    ) -> None:
        """
        Register the buffers to draw from.

        A call with count 0 and no buffers clears the binding.
        """
        ...


def bind_renderer(renderer: ExternalBufferRenderer, quartet: Optional[BufferQuartet]) -> None:
    """
    Hand a populated quartet to the renderer.

    This is the only place a renderer binding changes. Passing None binds an
    empty field so the renderer drops any handle it still holds.

    Args:
        renderer: Consumer of the buffers
        quartet: Populated quartet, or None for an empty field
    """
    if quartet is None:
        logger.info("Binding empty splat field")
        renderer.set_external_buffers(None, None, None, None, 0)
        return

    logger.info("Binding %d splats to %s", quartet.count, type(renderer).__name__)
    renderer.set_external_buffers(quartet.position, quartet.color, quartet.cov0, quartet.cov1, quartet.count)


__all__ = ["ExternalBufferRenderer", "bind_renderer"]
