"""
Host-facing splat field component.

This module wires the sampler, animation, covariance encoding and publisher
together behind the three host lifecycle hooks: activate, tick and deactivate.
The embedding application calls them from its own frame loop.
"""

import logging
from typing import Optional

import torch

from ..config import SplatFieldConfig
from ..errors import PublisherStateError
from ..fields import BaseSampler, get_sampler
from .animation import BaseAnimation, get_animation
from .binding import ExternalBufferRenderer
from .buffers import BufferFactory, SplatFrame, StructuredBuffer
from .covariance import encode_field
from .publisher import BufferPublisher, PublisherState

logger = logging.getLogger(__name__)


class SplatFieldComponent:
    """
    Procedural splat field published into externally rendered buffers.

    The config is read on every tick: changing ``config.splat_count`` while
    active re-seeds the field and re-creates the buffers on the next tick.
    Other fields take effect on the next tick without re-creation.

    Attributes:
        config: Field parameters
        renderer: Consumer of the buffers
        sampler: Base position sampler
        animation: Per-frame animation evaluator
        generator: Random source used for every re-seed
        base_positions: Rest pose [N, 3] of the current field
        publisher: Buffer owner, None while inactive
    """

    def __init__(
        self,
        config: SplatFieldConfig,
        renderer: ExternalBufferRenderer,
        sampler: Optional[BaseSampler] = None,
        animation: Optional[BaseAnimation] = None,
        generator: Optional[torch.Generator] = None,
        buffer_factory: BufferFactory = StructuredBuffer,
    ):
        """
        Initialize an inactive component.

        Args:
            config: Field parameters
            renderer: Consumer of the buffers
            sampler: Optional sampler, defaults to config.distribution
            animation: Optional animation, defaults to config.animation
            generator: Optional CPU torch generator, defaults to one seeded from config.seed
            buffer_factory: Callable (count, stride, device) -> StructuredBuffer
        """
        self.config = config
        self.renderer = renderer
        self.sampler = sampler if sampler is not None else get_sampler(config.distribution)
        self.animation = animation if animation is not None else get_animation(config.animation)

        if generator is None:
            generator = torch.Generator()
            if config.seed is not None:
                generator.manual_seed(config.seed)
            else:
                generator.seed()
        self.generator = generator

        self.buffer_factory = buffer_factory
        self.device = torch.device(config.device)
        self.base_positions: Optional[torch.Tensor] = None
        self.publisher: Optional[BufferPublisher] = None

    @property
    def is_active(self) -> bool:
        """Whether activate() has been called without a matching deactivate()."""
        return self.publisher is not None and self.publisher.state is not PublisherState.DISPOSED

    @property
    def count(self) -> int:
        """Number of splats in the current field."""
        return self.base_positions.shape[0] if self.base_positions is not None else 0

    def activate(self) -> None:
        """
        Seed the field, allocate and populate buffers, and bind them.

        Raises:
            PublisherStateError: If the component is already active
            BufferAllocationError: If the buffers cannot be allocated
        """
        if self.is_active:
            raise PublisherStateError("Component is already active")

        self.publisher = BufferPublisher(self.renderer, self.device, self.buffer_factory)
        try:
            self._recreate(time=0.0)
        except Exception:
            self.deactivate()
            raise
        logger.info(
            "Activated splat field: %d splats (%s/%s)", self.count, self.sampler.name, self.animation.name
        )

    def tick(self, time: float) -> None:
        """
        Recompute and upload the field for the given time.

        Re-creates the field instead when the configured splat count differs
        from the bound one.

        Args:
            time: Elapsed time in seconds, supplied by the host

        Raises:
            PublisherStateError: If the component is not active
        """
        if not self.is_active:
            raise PublisherStateError("Component must be activated before tick")

        if max(self.config.splat_count, 0) != self.count:
            logger.info("Splat count changed %d -> %d, re-creating buffers", self.count, self.config.splat_count)
            self._recreate(time)
            return

        if self.count == 0:
            return
        self.publisher.upload(self.compute_frame(time))

    def deactivate(self) -> None:
        """Release all buffers. Safe to call when inactive."""
        if self.publisher is not None:
            self.publisher.dispose()
            logger.info("Deactivated splat field")
        self.publisher = None
        self.base_positions = None

    def compute_frame(self, time: float) -> SplatFrame:
        """
        Evaluate the arrays of the current field for the given time.

        Args:
            time: Elapsed time in seconds

        Returns:
            SplatFrame aligned with the base positions

        Raises:
            PublisherStateError: If the component has no seeded field
        """
        if self.base_positions is None:
            raise PublisherStateError("Component has no splat field, activate it first")
        return self._evaluate(self.base_positions, time)

    def _evaluate(self, base_positions: torch.Tensor, time: float) -> SplatFrame:
        config = self.config
        positions, colors = self.animation.evaluate(base_positions, time, config.speed, config.cloud_radius)
        cov0, cov1 = encode_field(config.splat_size, base_positions.shape[0], self.device)
        return SplatFrame(positions=positions, colors=colors, cov0=cov0, cov1=cov1)

    def _recreate(self, time: float) -> None:
        config = self.config
        base_positions = self.sampler.generate(
            config.splat_count, config.cloud_radius, generator=self.generator, device=self.device
        )
        # The old field is gone once the publisher releases its quartet
        self.base_positions = None
        self.publisher.create(self._evaluate(base_positions, time))
        self.base_positions = base_positions


__all__ = ["SplatFieldComponent"]
