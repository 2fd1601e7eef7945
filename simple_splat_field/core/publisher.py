"""
Buffer publisher for splat fields.

The publisher owns the buffer quartet read by an external renderer. It moves
between three states:

    UNBOUND --create--> BOUND --upload--> BOUND
       ^                  |
       +-----release------+
    any --dispose--> DISPOSED (terminal)

Re-creation always releases the previous quartet before the new one is bound,
so the renderer never holds a stale handle next to a live one.
"""

import enum
import logging
from typing import Optional

import torch

from ..errors import BufferAllocationError, PublisherStateError
from .binding import ExternalBufferRenderer, bind_renderer
from .buffers import BufferFactory, BufferQuartet, SplatFrame, StructuredBuffer

logger = logging.getLogger(__name__)


class PublisherState(enum.Enum):
    """Lifecycle state of a BufferPublisher."""

    UNBOUND = "unbound"
    BOUND = "bound"
    DISPOSED = "disposed"


class BufferPublisher:
    """
    Owner of the buffer quartet of one splat field.

    Attributes:
        renderer: Consumer receiving the buffer handles on each (re)creation
        device: Torch device the buffers are allocated on
        state: Current PublisherState
        quartet: Bound quartet, None unless state is BOUND
    """

    def __init__(
        self,
        renderer: ExternalBufferRenderer,
        device: torch.device = torch.device("cpu"),
        buffer_factory: BufferFactory = StructuredBuffer,
    ):
        """
        Initialize an unbound publisher.

        Args:
            renderer: Consumer of the buffers
            device: Torch device for the buffers
            buffer_factory: Callable (count, stride, device) -> StructuredBuffer
        """
        self.renderer = renderer
        self.device = torch.device(device)
        self.buffer_factory = buffer_factory
        self.state = PublisherState.UNBOUND
        self.quartet: Optional[BufferQuartet] = None

    @property
    def count(self) -> int:
        """Number of splats currently bound (0 when unbound)."""
        return self.quartet.count if self.quartet is not None else 0

    def create(self, frame: SplatFrame) -> None:
        """
        (Re)create the quartet for a frame and bind it to the renderer.

        Any previously bound quartet is released first. The new quartet is
        populated with the frame before the renderer sees it. An empty frame
        leaves the publisher unbound and binds an empty field.

        Args:
            frame: Initial data for the new quartet

        Raises:
            PublisherStateError: If the publisher has been disposed
            BufferAllocationError: If the quartet cannot be allocated
        """
        self._check_not_disposed()
        was_bound = self.quartet is not None
        self.release()

        if frame.count == 0:
            bind_renderer(self.renderer, None)
            return

        try:
            quartet = BufferQuartet.allocate(frame.count, self.device, self.buffer_factory)
        except BufferAllocationError:
            logger.error("Buffer allocation failed for %d splats, publisher left unbound", frame.count)
            self._unbind_released(was_bound)
            raise

        try:
            quartet.upload(frame)
        except Exception:
            quartet.release()
            self._unbind_released(was_bound)
            raise

        self.quartet = quartet
        self.state = PublisherState.BOUND
        bind_renderer(self.renderer, quartet)

    def upload(self, frame: SplatFrame) -> None:
        """
        Upload a frame into the bound quartet without reallocating or rebinding.

        Args:
            frame: Frame with exactly count splats

        Raises:
            PublisherStateError: If the publisher is not bound
            BufferConsistencyError: If the frame size does not match the quartet
        """
        self._check_not_disposed()
        if self.state is not PublisherState.BOUND:
            raise PublisherStateError("Cannot upload to an unbound publisher")
        self.quartet.upload(frame)
        logger.debug("Uploaded frame: %d splats", frame.count)

    def release(self) -> None:
        """Release the bound quartet, if any, and return to UNBOUND."""
        if self.quartet is not None:
            self.quartet.release()
            self.quartet = None
        if self.state is PublisherState.BOUND:
            self.state = PublisherState.UNBOUND

    def dispose(self) -> None:
        """Release all buffers and enter the terminal DISPOSED state. Idempotent."""
        if self.state is PublisherState.DISPOSED:
            return
        self.release()
        self.state = PublisherState.DISPOSED

    def _unbind_released(self, was_bound: bool) -> None:
        # The renderer still holds the handles of the quartet released above
        if was_bound:
            bind_renderer(self.renderer, None)

    def _check_not_disposed(self) -> None:
        if self.state is PublisherState.DISPOSED:
            raise PublisherStateError("Publisher has been disposed")


__all__ = ["PublisherState", "BufferPublisher"]
