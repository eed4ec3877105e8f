"""freeform-gesture CLI.

Usage:
    freeform-gesture replay     Run a recorded contact stream through a detector
    freeform-gesture fit        Fit one before/after polygon pair
    freeform-gesture simulate   Write a synthetic gesture recording
    freeform-gesture benchmark  Time the detector on synthetic gestures
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional

import numpy as np
import typer

from freeform_gesture import matrix as mx
from freeform_gesture import synthetic
from freeform_gesture.config import DetectorConfig
from freeform_gesture.errors import FreeformGestureError
from freeform_gesture.fitting import fit_transform

app = typer.Typer(
    name="freeform-gesture",
    help="Multi-touch freeform transform gestures: drag, pinch, rotate, skew, warp.",
    add_completion=False,
)


def _setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _load_config(config_path: Optional[str], slop: Optional[float], max_pointers: Optional[int]) -> DetectorConfig:
    config = DetectorConfig.from_yaml(config_path) if config_path else DetectorConfig()
    overrides = config.to_dict()
    if slop is not None:
        overrides["touch_slop"] = slop
    if max_pointers is not None:
        overrides["max_pointers"] = max_pointers
    return DetectorConfig.from_dict(overrides)


def _parse_point(text: str) -> tuple[float, float]:
    try:
        x, y = (float(v) for v in text.split(","))
    except ValueError:
        raise typer.BadParameter(f"expected X,Y but got {text!r}")
    return x, y


def _format_matrix(m: np.ndarray) -> str:
    return "\n".join("   [" + "  ".join(f"{v:10.4f}" for v in row) + "]" for row in m)


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to a .json or .npz recording"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Detector YAML config"),
    slop: Optional[float] = typer.Option(None, help="Touch slop override"),
    max_pointers: Optional[int] = typer.Option(None, help="Max pointers override (0-4)"),
    consume: bool = typer.Option(True, help="Listener reports every transform as handled"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Replay a recording and print every emitted transform."""
    from freeform_gesture.detector import FreeformGestureDetector
    from freeform_gesture.recorder import ContactPlayer

    _setup_logging(log_level)
    path = Path(recording)
    if not path.exists():
        typer.echo(f"Recording not found: {recording}", err=True)
        raise typer.Exit(1)

    try:
        config = _load_config(config_path, slop, max_pointers)
        player = ContactPlayer.load(path)
    except (FreeformGestureError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Replaying {path.name} ({player.event_count} events, {player.duration:.2f}s)")
    typer.echo(f"   touch_slop={config.touch_slop} max_pointers={config.max_pointers}")

    total = mx.identity()

    def on_transform(event, matrix):
        nonlocal total
        parts = mx.decompose(matrix)
        typer.echo(f"t={event.timestamp:.3f}s pointers={len(event.points)} {parts.to_dict()}")
        if consume:
            total = matrix @ total
        return consume

    detector = FreeformGestureDetector.from_config(config, on_transform)
    try:
        emitted = detector.process(player.play())
    except FreeformGestureError as e:
        typer.echo(f"Malformed recording: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"\n{emitted} transforms emitted.")
    if consume:
        typer.echo("Combined transform:")
        typer.echo(_format_matrix(total))


@app.command()
def fit(
    before: List[str] = typer.Argument(..., help="Source points as X,Y (1-4 of them)"),
    after: List[str] = typer.Option(..., "--to", help="Destination point X,Y; repeat per source point"),
    max_pointers: int = typer.Option(4, help="Max correspondences to use (0-4)"),
):
    """Fit the matrix mapping the source points onto the destination points."""
    src = np.array([_parse_point(p) for p in before])
    dst = np.array([_parse_point(p) for p in after])
    if len(src) != len(dst):
        typer.echo(f"Got {len(src)} source points but {len(dst)} destination points", err=True)
        raise typer.Exit(1)

    try:
        result = fit_transform(src, dst, max_pointers)
    except FreeformGestureError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if result is None:
        typer.echo("No transform (no correspondences used).")
        return

    typer.echo(f"Solved with {result.pointer_count} point(s):")
    typer.echo(_format_matrix(result.matrix))
    if mx.is_affine(result.matrix):
        typer.echo(f"   {mx.decompose(result.matrix).to_dict()}")
    else:
        typer.echo("   (perspective)")


@app.command()
def simulate(
    kind: str = typer.Argument(..., help=f"Gesture kind: {', '.join(synthetic.GESTURE_KINDS)}"),
    output: str = typer.Option("gesture.json", "-o", help="Output file path"),
    steps: int = typer.Option(10, help="Number of MOVE updates"),
    compact: bool = typer.Option(False, help="Save in compact .npz format"),
):
    """Write a synthetic gesture recording."""
    from freeform_gesture.recorder import ContactRecorder

    try:
        events = synthetic.generate(kind, steps=steps)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    recorder = ContactRecorder()
    recorder.start()
    for event in events:
        recorder.add_event(event, timestamp=event.timestamp)
    recorder.stop()

    if compact:
        path = recorder.save_compact(output)
    else:
        path = Path(output)
        recorder.save(path)
    typer.echo(f"Saved {recorder.event_count} events to {path}")


@app.command()
def benchmark(
    iterations: int = typer.Option(200, help="Gestures per kind"),
    steps: int = typer.Option(30, help="MOVE updates per gesture"),
):
    """Time the detector pipeline on synthetic gestures."""
    from freeform_gesture.detector import FreeformGestureDetector
    from freeform_gesture.profiler import PipelineProfiler

    profiler = PipelineProfiler(window_size=iterations * steps)
    detector = FreeformGestureDetector(lambda event, matrix: True, profiler=profiler)

    typer.echo(f"Running benchmark: {iterations} x {len(synthetic.GESTURE_KINDS)} gestures, {steps} steps each")
    streams = [synthetic.generate(kind, steps=steps) for kind in synthetic.GESTURE_KINDS]

    t0 = time.perf_counter()
    updates = 0
    for _ in range(iterations):
        for events in streams:
            detector.process(events)
            updates += steps
    elapsed = time.perf_counter() - t0

    typer.echo("\nResults:")
    typer.echo(f"   Updates:     {updates}")
    typer.echo(f"   Per update:  {elapsed / max(updates, 1) * 1000:.4f} ms")
    typer.echo(f"   Throughput:  {updates / elapsed if elapsed > 0 else 0:.0f} updates/s")

    typer.echo("\nStage breakdown:")
    for name, stats in profiler.summary().items():
        typer.echo(f"   {name:12s} avg={stats['avg_ms']:.4f}ms  p95={stats['p95_ms']:.4f}ms")


def main():
    app()


if __name__ == "__main__":
    main()
