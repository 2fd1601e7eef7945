"""
Structured buffers and the buffer quartet.

This module provides the GPU-visible buffer objects read by external renderers
and the quartet that owns the four of them as a single scoped resource.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Tuple

import torch

from ..errors import BufferAllocationError, BufferConsistencyError

logger = logging.getLogger(__name__)

FLOAT_SIZE = 4
POSITION_STRIDE = 12
COLOR_STRIDE = 16
COVARIANCE_STRIDE = 12


class StructuredBuffer:
    """
    Fixed-stride structured buffer of packed float32 elements.

    The storage is a contiguous tensor [count, stride // 4] on the target device.
    Renderers receive the buffer as a read-only handle; only the owner may
    upload data or dispose it.

    Attributes:
        count: Number of elements
        stride: Size of one element in bytes
        device: Torch device holding the storage
    """

    def __init__(self, count: int, stride: int, device: torch.device = torch.device("cpu")):
        """
        Allocate a structured buffer.

        Args:
            count: Number of elements (> 0)
            stride: Element size in bytes, a multiple of 4
            device: Torch device

        Raises:
            ValueError: If count or stride is invalid
        """
        if count <= 0:
            raise ValueError(f"Buffer count must be positive, got {count}")
        if stride <= 0 or stride % FLOAT_SIZE != 0:
            raise ValueError(f"Buffer stride must be a positive multiple of {FLOAT_SIZE}, got {stride}")

        self.count = count
        self.stride = stride
        self.device = torch.device(device)
        self._data: Optional[torch.Tensor] = torch.zeros(count, stride // FLOAT_SIZE, dtype=torch.float32, device=device)

    @property
    def width(self) -> int:
        """Number of floats per element."""
        return self.stride // FLOAT_SIZE

    @property
    def is_valid(self) -> bool:
        """Whether the buffer still owns its storage."""
        return self._data is not None

    @property
    def data(self) -> torch.Tensor:
        """
        Current buffer contents [count, width].

        Raises:
            BufferConsistencyError: If the buffer has been disposed
        """
        if self._data is None:
            raise BufferConsistencyError("Buffer has been disposed")
        return self._data

    def set_data(self, values: torch.Tensor) -> None:
        """
        Upload values into the buffer in place.

        Args:
            values: Tensor [count, width]

        Raises:
            BufferConsistencyError: If the buffer is disposed or the shape does not match
        """
        data = self.data
        if tuple(values.shape) != tuple(data.shape):
            raise BufferConsistencyError(
                f"Cannot upload array of shape {tuple(values.shape)} into buffer of shape {tuple(data.shape)}"
            )
        data.copy_(values)

    def dispose(self) -> None:
        """Release the storage. Safe to call more than once."""
        self._data = None

    def __repr__(self) -> str:
        state = "valid" if self.is_valid else "disposed"
        return f"StructuredBuffer(count={self.count}, stride={self.stride}, device={self.device}, {state})"


BufferFactory = Callable[[int, int, torch.device], StructuredBuffer]


@dataclass
class SplatFrame:
    """
    Per-splat arrays for one frame, aligned 1:1 by index.

    Construction checks that every array has the same number of rows and the
    width expected by its buffer.
    """

    positions: torch.Tensor
    """Animated positions [N, 3]"""

    colors: torch.Tensor
    """RGBA colors [N, 4]"""

    cov0: torch.Tensor
    """Covariance part 0 (xx, xy, xz) [N, 3]"""

    cov1: torch.Tensor
    """Covariance part 1 (yy, yz, zz) [N, 3]"""

    def __post_init__(self):
        count = self.positions.shape[0]
        expected = {
            "positions": (self.positions, POSITION_STRIDE),
            "colors": (self.colors, COLOR_STRIDE),
            "cov0": (self.cov0, COVARIANCE_STRIDE),
            "cov1": (self.cov1, COVARIANCE_STRIDE),
        }
        for name, (array, stride) in expected.items():
            shape = (count, stride // FLOAT_SIZE)
            if tuple(array.shape) != shape:
                raise BufferConsistencyError(f"{name} has shape {tuple(array.shape)}, expected {shape}")

    @property
    def count(self) -> int:
        """Number of splats in the frame."""
        return self.positions.shape[0]

    def arrays(self) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor, torch.Tensor]:
        """Return the arrays in quartet order (position, color, cov0, cov1)."""
        return self.positions, self.colors, self.cov0, self.cov1


class BufferQuartet:
    """
    The four structured buffers of a splat field, handled as one unit.

    A quartet is created whole or not at all and released whole. It can be used
    as a context manager, in which case it is released on exit.

    Attributes:
        position: Position buffer, stride 12
        color: Color buffer, stride 16
        cov0: Covariance part 0 buffer, stride 12
        cov1: Covariance part 1 buffer, stride 12
        count: Number of elements in each buffer
    """

    STRIDES = (POSITION_STRIDE, COLOR_STRIDE, COVARIANCE_STRIDE, COVARIANCE_STRIDE)

    def __init__(
        self,
        position: StructuredBuffer,
        color: StructuredBuffer,
        cov0: StructuredBuffer,
        cov1: StructuredBuffer,
    ):
        self.position = position
        self.color = color
        self.cov0 = cov0
        self.cov1 = cov1
        self.count = position.count

    @classmethod
    def allocate(
        cls,
        count: int,
        device: torch.device = torch.device("cpu"),
        factory: BufferFactory = StructuredBuffer,
    ) -> "BufferQuartet":
        """
        Allocate all four buffers for count splats.

        If any allocation fails, the buffers created so far are disposed before
        the error is raised, so no partial quartet survives.

        Args:
            count: Number of splats (> 0)
            device: Torch device
            factory: Callable (count, stride, device) -> StructuredBuffer

        Returns:
            New BufferQuartet

        Raises:
            BufferAllocationError: If any of the four buffers cannot be created
        """
        created = []
        try:
            for stride in cls.STRIDES:
                created.append(factory(count, stride, device))
        except (RuntimeError, ValueError, MemoryError) as e:
            for buffer in created:
                buffer.dispose()
            raise BufferAllocationError(f"Failed to allocate buffer quartet for {count} splats: {e}") from e

        logger.info("Allocated buffer quartet: %d splats on %s", count, device)
        return cls(*created)

    @property
    def buffers(self) -> Tuple[StructuredBuffer, StructuredBuffer, StructuredBuffer, StructuredBuffer]:
        """The four buffers in binding order."""
        return self.position, self.color, self.cov0, self.cov1

    @property
    def is_valid(self) -> bool:
        """Whether all four buffers still own their storage."""
        return all(buffer.is_valid for buffer in self.buffers)

    def upload(self, frame: SplatFrame) -> None:
        """
        Upload a frame into the four buffers in place.

        Args:
            frame: Frame with exactly count splats

        Raises:
            BufferConsistencyError: If the frame size does not match the quartet
        """
        if frame.count != self.count:
            raise BufferConsistencyError(f"Frame has {frame.count} splats but buffers hold {self.count}")
        for buffer, values in zip(self.buffers, frame.arrays()):
            buffer.set_data(values)

    def release(self) -> None:
        """Dispose all four buffers together."""
        for buffer in self.buffers:
            buffer.dispose()
        logger.info("Released buffer quartet: %d splats", self.count)

    def __iter__(self) -> Iterator[StructuredBuffer]:
        return iter(self.buffers)

    def __enter__(self) -> "BufferQuartet":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


__all__ = [
    "POSITION_STRIDE",
    "COLOR_STRIDE",
    "COVARIANCE_STRIDE",
    "StructuredBuffer",
    "BufferFactory",
    "SplatFrame",
    "BufferQuartet",
]
