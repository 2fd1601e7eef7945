"""
Viser-backed renderer for external splat buffers.

This module provides a renderer that reads the bound buffers each frame and
pushes them into a viser scene as Gaussian splats for visual inspection.
"""

import logging
from typing import Optional

import numpy as np
import torch
import viser

from .buffers import StructuredBuffer
from .covariance import decode

logger = logging.getLogger(__name__)


class ViserSplatRenderer:
    """
    Renderer drawing externally owned splat buffers in a viser scene.

    The renderer holds the handles it was bound to and reads them on draw().
    It never disposes them.

    Attributes:
        server: Viser server hosting the scene
        name: Scene node name of the splats
        count: Currently bound splat count
    """

    def __init__(self, server: viser.ViserServer, name: str = "/splats"):
        """
        Args:
            server: Viser server instance
            name: Scene node name for the splats
        """
        self.server = server
        self.name = name
        self.count = 0
        self._buffers = (None, None, None, None)
        self._handle = None

    def set_external_buffers(
        self,
        position: Optional[StructuredBuffer],
        color: Optional[StructuredBuffer],
        cov0: Optional[StructuredBuffer],
        cov1: Optional[StructuredBuffer],
        count: int,
    ) -> None:
        self._buffers = (position, color, cov0, cov1)
        self.count = count
        if count == 0 and self._handle is not None:
            self._handle.remove()
            self._handle = None
        logger.info("Viewer bound to %d splats", count)

    @torch.no_grad()
    def draw(self) -> None:
        """Push the current contents of the bound buffers to the scene."""
        if self.count == 0:
            return

        position, color, cov0, cov1 = (buffer.data for buffer in self._buffers)
        centers = position.cpu().numpy()
        covariances = decode(cov0, cov1).cpu().numpy()
        rgbs = np.clip(color[:, :3].cpu().numpy(), 0.0, 1.0)
        opacities = color[:, 3:4].cpu().numpy()

        # Re-adding a node under the same name replaces it in the scene
        self._handle = self.server.scene.add_gaussian_splats(
            self.name,
            centers=centers,
            covariances=covariances,
            rgbs=rgbs,
            opacities=opacities,
        )


__all__ = ["ViserSplatRenderer"]
