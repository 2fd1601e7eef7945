"""
Validating consumer for external splat buffers.

ValidatingRenderer stands in for a real renderer: it accepts bind calls like
one, and checks the bound buffers against the layout a renderer expects.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import torch

from .buffers import COLOR_STRIDE, COVARIANCE_STRIDE, POSITION_STRIDE, StructuredBuffer
from .covariance import decode

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Result of validating a bound buffer quartet."""

    count: int
    """Number of splats the renderer was bound to"""

    errors: List[str] = field(default_factory=list)
    """Problems found, empty when the quartet is valid"""

    bounds_min: Optional[Tuple[float, float, float]] = None
    """Per-axis minimum of the positions"""

    bounds_max: Optional[Tuple[float, float, float]] = None
    """Per-axis maximum of the positions"""

    max_distance: float = 0.0
    """Largest distance of a splat from the origin"""

    mean_color: Optional[Tuple[float, float, float, float]] = None
    """Mean RGBA color"""

    @property
    def ok(self) -> bool:
        """Whether no problem was found."""
        return not self.errors


class ValidatingRenderer:
    """
    Renderer that records bind calls and validates the bound buffers.

    Attributes:
        buffers: Currently bound (position, color, cov0, cov1) handles
        count: Currently bound splat count
        bind_count: Number of set_external_buffers calls received
    """

    def __init__(self, atol: float = 1e-6):
        """
        Args:
            atol: Tolerance for covariance symmetry and alpha checks
        """
        self.atol = atol
        self.buffers: Tuple[Optional[StructuredBuffer], ...] = (None, None, None, None)
        self.count = 0
        self.bind_count = 0

    def set_external_buffers(
        self,
        position: Optional[StructuredBuffer],
        color: Optional[StructuredBuffer],
        cov0: Optional[StructuredBuffer],
        cov1: Optional[StructuredBuffer],
        count: int,
    ) -> None:
        self.buffers = (position, color, cov0, cov1)
        self.count = count
        self.bind_count += 1
        logger.debug("Renderer bound to %d splats (bind #%d)", count, self.bind_count)

    @torch.no_grad()
    def validate(self) -> ValidationReport:
        """
        Check the bound quartet.

        Checks that every handle is live, that counts and strides match the
        expected layout, that every value is finite, that covariances are
        symmetric with positive diagonals, and that alpha is 1.

        Returns:
            ValidationReport with errors and summary statistics
        """
        report = ValidationReport(count=self.count)
        if self.count == 0:
            if any(buffer is not None for buffer in self.buffers):
                report.errors.append("Empty binding still holds buffer handles")
            return report

        names = ("position", "color", "cov0", "cov1")
        strides = (POSITION_STRIDE, COLOR_STRIDE, COVARIANCE_STRIDE, COVARIANCE_STRIDE)
        for name, buffer, stride in zip(names, self.buffers, strides):
            if buffer is None or not buffer.is_valid:
                report.errors.append(f"{name} buffer is missing or disposed")
                continue
            if buffer.count != self.count:
                report.errors.append(f"{name} buffer has {buffer.count} elements, expected {self.count}")
            if buffer.stride != stride:
                report.errors.append(f"{name} buffer has stride {buffer.stride}, expected {stride}")
            if not torch.isfinite(buffer.data).all():
                report.errors.append(f"{name} buffer contains non-finite values")
        if report.errors:
            return report

        position, color, cov0, cov1 = (buffer.data for buffer in self.buffers)

        covariances = decode(cov0, cov1)
        if not torch.allclose(covariances, covariances.transpose(-1, -2), atol=self.atol):
            report.errors.append("Covariance matrices are not symmetric")
        if not (torch.diagonal(covariances, dim1=-2, dim2=-1) > 0).all():
            report.errors.append("Covariance diagonals must be positive")
        if not torch.allclose(color[:, 3], torch.ones_like(color[:, 3]), atol=self.atol):
            report.errors.append("Color alpha is not 1")

        report.bounds_min = tuple(position.min(dim=0).values.tolist())
        report.bounds_max = tuple(position.max(dim=0).values.tolist())
        report.max_distance = torch.linalg.vector_norm(position, dim=-1).max().item()
        report.mean_color = tuple(color.mean(dim=0).tolist())
        return report


__all__ = ["ValidationReport", "ValidatingRenderer"]
