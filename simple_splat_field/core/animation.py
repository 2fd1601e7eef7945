"""
Per-frame animation of splat fields.

This module maps the base positions of a field plus elapsed time to animated
positions and derived colors. Evaluators are pure: they never mutate their
inputs and hold no per-frame state, so evaluating the same time twice yields
bit-identical tensors.
"""

from abc import ABC, abstractmethod
from typing import Tuple

import torch

# Offset added to the distance so the orbit rate stays finite at the center
ORBIT_DISTANCE_OFFSET = 0.5
BOB_AMPLITUDE = 0.2
BOB_PHASE_PER_UNIT = 3.0


def position_colors(positions: torch.Tensor, radius: float) -> torch.Tensor:
    """
    Derive RGBA colors from positions normalized by the cloud radius.

    Args:
        positions: Positions [N, 3]
        radius: Cloud radius used for normalization

    Returns:
        Colors [N, 4] with rgb = p / radius * 0.5 + 0.5 and alpha = 1
    """
    rgb = positions / radius * 0.5 + 0.5
    alpha = torch.ones_like(rgb[:, :1])
    return torch.cat([rgb, alpha], dim=-1)


class BaseAnimation(ABC):
    """
    Abstract base class for animation evaluators.

    Attributes:
        name: Short name used to select the animation from configuration
    """

    name: str = ""

    def evaluate(
        self,
        base_positions: torch.Tensor,
        time: float,
        speed: float,
        radius: float,
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        """
        Evaluate positions and colors for one frame.

        Args:
            base_positions: Rest pose [N, 3]
            time: Elapsed time in seconds
            speed: Animation speed multiplier
            radius: Cloud radius used for color normalization

        Returns:
            Tuple of (positions [N, 3], colors [N, 4])
        """
        positions = self.animate(base_positions, time, speed)
        return positions, position_colors(positions, radius)

    @abstractmethod
    def animate(self, base_positions: torch.Tensor, time: float, speed: float) -> torch.Tensor:
        """
        Map base positions to world positions at the given time.

        Args:
            base_positions: Rest pose [N, 3]
            time: Elapsed time in seconds
            speed: Animation speed multiplier

        Returns:
            Animated positions [N, 3]
        """
        pass


class StaticAnimation(BaseAnimation):
    """Animation that leaves every splat at its base position."""

    name = "static"

    def animate(self, base_positions: torch.Tensor, time: float, speed: float) -> torch.Tensor:
        return base_positions.clone()


class OrbitAnimation(BaseAnimation):
    """
    Differential orbit around the vertical axis with an outward travelling bob.

    Inner splats orbit faster than outer ones: the rotation angle is
    time * speed * (1 + 1 / (dist + 0.5)). The vertical bob has a phase
    proportional to the distance from the center, so the wave propagates
    outward.
    """

    name = "orbit"

    def animate(self, base_positions: torch.Tensor, time: float, speed: float) -> torch.Tensor:
        phase = time * speed
        dist = torch.linalg.vector_norm(base_positions, dim=-1)  # [N]
        angle = phase * (1.0 + 1.0 / (dist + ORBIT_DISTANCE_OFFSET))  # [N]

        cos_a = torch.cos(angle)
        sin_a = torch.sin(angle)
        x, y, z = base_positions.unbind(-1)

        # Rotation in the horizontal xz plane, y is untouched by the rotation
        rx = x * cos_a - z * sin_a
        rz = x * sin_a + z * cos_a
        ry = y + torch.sin(phase + dist * BOB_PHASE_PER_UNIT) * BOB_AMPLITUDE

        return torch.stack((rx, ry, rz), dim=-1)


ANIMATIONS = {
    StaticAnimation.name: StaticAnimation,
    OrbitAnimation.name: OrbitAnimation,
}


def get_animation(name: str) -> BaseAnimation:
    """
    Create an animation evaluator from its configuration name.

    Args:
        name: 'static' or 'orbit'

    Returns:
        New animation instance

    Raises:
        ValueError: If the name is unknown
    """
    if name not in ANIMATIONS:
        raise ValueError(f"Unknown animation '{name}', expected one of {sorted(ANIMATIONS)}")
    return ANIMATIONS[name]()


__all__ = [
    "BaseAnimation",
    "StaticAnimation",
    "OrbitAnimation",
    "ANIMATIONS",
    "get_animation",
    "position_colors",
]
