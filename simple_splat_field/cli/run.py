"""
Run subcommand for Simple Splat Field.

This module provides a headless host loop that publishes a splat field for a
fixed number of frames and validates the bound buffers after every tick.
"""

import dataclasses
from typing import Optional

import torch
from rich.console import Console
from rich.table import Table
from tqdm import tqdm

from ..config import Animation, Distribution, SplatFieldConfig
from ..core.component import SplatFieldComponent
from ..core.validation import ValidatingRenderer, ValidationReport
from ..errors import SplatFieldError
from ..utils.log import setup_logging


def _summary_table(report: ValidationReport, frames: int, failures: int, binds: int) -> Table:
    table = Table(title="Splat field publication")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Frames", f"{frames:,}")
    table.add_row("Bound splats", f"{report.count:,}")
    table.add_row("Bind calls", f"{binds}")
    table.add_row("Failed validations", f"{failures}")
    if report.bounds_min is not None:
        table.add_row("Bounds min", ", ".join(f"{v:.3f}" for v in report.bounds_min))
        table.add_row("Bounds max", ", ".join(f"{v:.3f}" for v in report.bounds_max))
        table.add_row("Max distance", f"{report.max_distance:.3f}")
        table.add_row("Mean color", ", ".join(f"{v:.3f}" for v in report.mean_color))
    return table


def run(
    splat_count: int = 1000,
    splat_size: float = 0.01,
    cloud_radius: float = 2.0,
    speed: float = 1.0,
    distribution: Distribution = "uniform",
    animation: Animation = "static",
    seed: Optional[int] = None,
    frames: int = 120,
    fps: float = 60.0,
    recount_at: Optional[int] = None,
    recount_to: Optional[int] = None,
    device: str = "cpu",
    verbose: bool = False,
) -> None:
    """Publish a splat field headlessly and validate the buffers every frame.

    Args:
        splat_count: Number of splats (1 to 100000)
        splat_size: Isotropic splat size (0.001 to 0.1)
        cloud_radius: Radius of the cloud (0.5 to 10)
        speed: Animation speed (0 to 10)
        distribution: Base position sampler ('uniform' or 'golden')
        animation: Per-frame animation ('static' or 'orbit')
        seed: Optional seed for reproducible clouds
        frames: Number of frames to tick
        fps: Frame rate used to derive the time of each frame
        recount_at: Optional frame index at which the splat count changes
        recount_to: New splat count applied at recount_at
        device: Torch device for the buffers (default: cpu)
        verbose: Enable per-frame debug logging
    """
    console = Console()
    setup_logging(verbose, console)

    if device.startswith("cuda") and not torch.cuda.is_available():
        console.print("[bold red]Error:[/bold red] CUDA requested but not available. Use --device cpu.")
        return
    if fps <= 0:
        console.print(f"[bold red]Error:[/bold red] fps must be positive, got {fps}")
        return
    if (recount_at is None) != (recount_to is None):
        console.print("[bold red]Error:[/bold red] --recount-at and --recount-to must be given together")
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

    renderer = ValidatingRenderer()
    component = SplatFieldComponent(config, renderer)

    failures = 0
    report = ValidationReport(count=0)
    try:
        component.activate()
        for frame in tqdm(range(frames), desc="Publishing frames"):
            if recount_at is not None and frame == recount_at:
                component.config = dataclasses.replace(config, splat_count=recount_to).clamped()

            component.tick(frame / fps)

            report = renderer.validate()
            if not report.ok:
                failures += 1
                for error in report.errors:
                    console.print(f"[red]Frame {frame}:[/red] {error}")
    except SplatFieldError as e:
        console.print(f"[bold red]Error:[/bold red] {type(e).__name__}: {e}")
        return
    finally:
        component.deactivate()

    console.print(_summary_table(report, frames, failures, renderer.bind_count))
    if failures == 0:
        console.print("[bold green]All frames passed validation[/bold green]")


__all__ = ["run"]
