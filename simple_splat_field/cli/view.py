"""
View subcommand for Simple Splat Field.

This module provides the view subcommand, which publishes a splat field in real
time and draws it in a viser scene through the external buffer path.
"""

import dataclasses
import time
from typing import Optional

import torch
import viser
from rich.console import Console

from ..config import (
    CLOUD_RADIUS_RANGE,
    MAX_SPLAT_COUNT,
    SPEED_RANGE,
    SPLAT_SIZE_RANGE,
    Animation,
    Distribution,
    SplatFieldConfig,
)
from ..core.component import SplatFieldComponent
from ..core.viewer import ViserSplatRenderer
from ..errors import SplatFieldError
from ..utils.log import setup_logging


def view(
    splat_count: int = 1000,
    splat_size: float = 0.01,
    cloud_radius: float = 2.0,
    speed: float = 1.0,
    distribution: Distribution = "golden",
    animation: Animation = "orbit",
    seed: Optional[int] = None,
    port: int = 8080,
    fps: float = 30.0,
    device: str = "cpu",
    verbose: bool = False,
) -> None:
    """View a procedural splat field interactively.

    Args:
        splat_count: Initial number of splats (1 to 100000)
        splat_size: Initial isotropic splat size (0.001 to 0.1)
        cloud_radius: Initial cloud radius (0.5 to 10)
        speed: Initial animation speed (0 to 10)
        distribution: Base position sampler ('uniform' or 'golden')
        animation: Per-frame animation ('static' or 'orbit')
        seed: Optional seed for reproducible clouds
        port: Port for the viewer server (default: 8080)
        fps: Target frame rate of the host loop (default: 30)
        device: Torch device for the buffers (default: cpu)
        verbose: Enable per-frame debug logging
    """
    console = Console()
    setup_logging(verbose, console)

    if device.startswith("cuda") and not torch.cuda.is_available():
        console.print("[bold red]Error:[/bold red] CUDA requested but not available. Use --device cpu.")
        return

    config = SplatFieldConfig(
        splat_count=splat_count,
        splat_size=splat_size,
        cloud_radius=cloud_radius,
        speed=speed,
        distribution=distribution,
        animation=animation,
        seed=seed,
        device=device,
    ).clamped()

    # Setup viewer
    console.print(f"\nStarting viewer server on port {port}...")
    try:
        server = viser.ViserServer(port=port, verbose=False)
    except OSError as e:
        if "already in use" in str(e):
            console.print(f"[bold red]Error:[/bold red] Port {port} already in use. Use --port to specify a different port.")
        else:
            console.print(f"[bold red]Error:[/bold red] Failed to start server: {e}")
        return

    # Sliders are polled by the host loop, so the component is only touched from one thread
    count_slider = server.gui.add_slider("Splat count", min=1, max=MAX_SPLAT_COUNT, step=1, initial_value=config.splat_count)
    size_slider = server.gui.add_slider(
        "Splat size", min=SPLAT_SIZE_RANGE[0], max=SPLAT_SIZE_RANGE[1], step=0.001, initial_value=config.splat_size
    )
    radius_slider = server.gui.add_slider(
        "Cloud radius", min=CLOUD_RADIUS_RANGE[0], max=CLOUD_RADIUS_RANGE[1], step=0.1, initial_value=config.cloud_radius
    )
    speed_slider = server.gui.add_slider(
        "Speed", min=SPEED_RANGE[0], max=SPEED_RANGE[1], step=0.1, initial_value=config.speed
    )

    renderer = ViserSplatRenderer(server)
    component = SplatFieldComponent(config, renderer)

    console.print(f"\nViewer running at [bold cyan]http://localhost:{port}[/bold cyan]")
    console.print("Press Ctrl+C to exit\n")

    frame_duration = 1.0 / max(fps, 1.0)
    try:
        component.activate()
        renderer.draw()
        start_time = time.perf_counter()
        while True:
            frame_start = time.perf_counter()

            component.config = dataclasses.replace(
                component.config,
                splat_count=int(count_slider.value),
                splat_size=float(size_slider.value),
                cloud_radius=float(radius_slider.value),
                speed=float(speed_slider.value),
            ).clamped()
            component.tick(frame_start - start_time)
            renderer.draw()

            # Sleep for remaining frame time
            elapsed = time.perf_counter() - frame_start
            if elapsed < frame_duration:
                time.sleep(frame_duration - elapsed)
    except KeyboardInterrupt:
        console.print("\nShutting down viewer...")
    except SplatFieldError as e:
        console.print(f"[bold red]Error:[/bold red] {type(e).__name__}: {e}")
    finally:
        component.deactivate()
        server.stop()


__all__ = ["view"]
