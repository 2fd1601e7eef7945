"""
Covariance encoding for splats.

A symmetric 3x3 covariance matrix is stored as two 3-vectors:
part0 = (xx, xy, xz) and part1 = (yy, yz, zz). The generator only produces
isotropic covariances, which is the simplest input a consuming renderer must
accept and serves as its reference case.
"""

from typing import Tuple

import torch


def encode(splat_size: float) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
    """
    Encode the isotropic covariance of a single splat.

    Args:
        splat_size: Standard deviation along every axis

    Returns:
        Tuple of (part0, part1) with part0 = (s^2, 0, 0), part1 = (s^2, 0, s^2)
    """
    variance = splat_size * splat_size
    return (variance, 0.0, 0.0), (variance, 0.0, variance)


def encode_field(
    splat_size: float,
    count: int,
    device: torch.device = torch.device("cpu"),
) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Encode the same isotropic covariance for every splat of a field.

    Args:
        splat_size: Standard deviation along every axis
        count: Number of splats
        device: Torch device

    Returns:
        Tuple of (part0 [N, 3], part1 [N, 3]) as float32
    """
    part0, part1 = encode(splat_size)
    cov0 = torch.tensor(part0, dtype=torch.float32, device=device).expand(max(count, 0), 3).contiguous()
    cov1 = torch.tensor(part1, dtype=torch.float32, device=device).expand(max(count, 0), 3).contiguous()
    return cov0, cov1


def decode(cov0: torch.Tensor, cov1: torch.Tensor) -> torch.Tensor:
    """
    Rebuild full covariance matrices from their two-part encoding.

    Args:
        cov0: (xx, xy, xz) per splat [N, 3]
        cov1: (yy, yz, zz) per splat [N, 3]

    Returns:
        Symmetric covariance matrices [N, 3, 3]
    """
    xx, xy, xz = cov0.unbind(-1)
    yy, yz, zz = cov1.unbind(-1)
    rows = [
        torch.stack((xx, xy, xz), dim=-1),
        torch.stack((xy, yy, yz), dim=-1),
        torch.stack((xz, yz, zz), dim=-1),
    ]
    return torch.stack(rows, dim=-2)


__all__ = ["encode", "encode_field", "decode"]
