"""
circuitglow CLI Harness

Developer tool for exercising the glow engine outside a browser.
Subcommands:
  - synth-trace: Generate a synthetic pointer trace (JSONL)
  - replay: Replay a pointer trace against a grid of tiles, report per tile
  - validate-config: Validate (and optionally heal) an engine config file
  - schema: Print the engine config JSON Schema

Trace format: one JSON object per line, {"x": float, "y": float, "t": float}
with t in milliseconds.
"""

from __future__ import annotations

import json
import logging
import sys
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
import numpy as np
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

import config_schema
from receipts import emit_receipt, merkle, write_receipt_jsonl
from glow import (
    CONFIG_DEFAULT,
    PRESETS,
    ElementBounds,
    EngineConfig,
    GlowEngine,
    PointerSample,
)
from glow.constants import SpeedTier, TENANT_ID

console = Console()

# --- Replay defaults (desktop grid from the category page) ---
DEFAULT_COLS = 7
DEFAULT_ROWS = 4
DEFAULT_TILE_WIDTH = 220.0
DEFAULT_TILE_HEIGHT = 160.0
DEFAULT_GAP = 24.0
DEFAULT_FPS = 60.0


# =============================================================================
# Trace I/O
# =============================================================================

def read_trace(path: str) -> List[PointerSample]:
    """Read a JSONL pointer trace. Blank lines are ignored."""
    samples: List[PointerSample] = []
    with open(path, "r") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                row = json.loads(line)
                samples.append(PointerSample(x=float(row["x"]), y=float(row["y"]),
                                             timestamp_ms=float(row["t"])))
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"{path}:{line_no}: bad trace row: {e}") from e
    return samples


def write_trace(samples: List[PointerSample], path: str) -> None:
    with open(path, "w") as f:
        for s in samples:
            f.write(json.dumps({"x": s.x, "y": s.y, "t": s.timestamp_ms}) + "\n")


def generate_trace(seed: int = 42,
                   duration_ms: float = 3000.0,
                   rate_hz: float = 120.0,
                   width: float = 1600.0,
                   height: float = 800.0,
                   flick_at_ms: Optional[float] = 1500.0,
                   flick_px: float = 200.0) -> List[PointerSample]:
    """
    Synthesize a pointer trace: a slow Lissajous sweep over the grid with
    jitter, plus one fast flick of flick_px in 5 ms at flick_at_ms.
    """
    rng = np.random.default_rng(seed)
    n = max(2, int(duration_ms * rate_hz / 1000.0))
    t = np.linspace(0.0, duration_ms, n)
    phase = t / duration_ms * 2.0 * np.pi
    x = width * (0.5 + 0.45 * np.sin(phase))
    y = height * (0.5 + 0.45 * np.sin(2.0 * phase + 0.5))
    x = x + rng.normal(0.0, 1.5, n)
    y = y + rng.normal(0.0, 1.5, n)

    samples = [PointerSample(x=float(a), y=float(b), timestamp_ms=float(c))
               for a, b, c in zip(x, y, t)]

    if flick_at_ms is not None and 0 < flick_at_ms < duration_ms:
        idx = int(np.searchsorted(t, flick_at_ms))
        base = samples[max(0, idx - 1)]
        flick = PointerSample(x=base.x + flick_px, y=base.y,
                              timestamp_ms=base.timestamp_ms + 5.0)
        samples.insert(idx, flick)
        # keep the trace monotone in time after the insert
        samples = sorted(samples, key=lambda s: s.timestamp_ms)
    return samples


# =============================================================================
# Replay
# =============================================================================

def grid_bounds(cols: int, rows: int, tile_width: float, tile_height: float,
                gap: float) -> Dict[str, ElementBounds]:
    """Bounds of a cols x rows tile grid keyed by 'r{row}c{col}'."""
    tiles: Dict[str, ElementBounds] = {}
    for row in range(rows):
        for col in range(cols):
            tiles[f"r{row}c{col}"] = ElementBounds(
                left=col * (tile_width + gap),
                top=row * (tile_height + gap),
                width=tile_width,
                height=tile_height,
            )
    return tiles


def replay_trace(samples: List[PointerSample],
                 config: EngineConfig = CONFIG_DEFAULT,
                 cols: int = DEFAULT_COLS,
                 rows: int = DEFAULT_ROWS,
                 tile_width: float = DEFAULT_TILE_WIDTH,
                 tile_height: float = DEFAULT_TILE_HEIGHT,
                 gap: float = DEFAULT_GAP,
                 fps: float = DEFAULT_FPS) -> Dict[str, Any]:
    """
    Drive a GlowEngine with a recorded trace at a fixed frame rate.

    Samples are delivered in timestamp order before the first frame at or
    after their timestamp.

    Returns:
        dict with per-tile stats, speed statistics and all engine receipts
    """
    if fps <= 0:
        raise ValueError(f"fps must be > 0, got {fps}")

    engine = GlowEngine(config)
    bounds = grid_bounds(cols, rows, tile_width, tile_height, gap)
    stats: Dict[str, Dict[str, Any]] = {
        tile_id: {"paints": 0, "visible_frames": 0, "peak_intensity": 0.0, "peak_scale": 0.0}
        for tile_id in bounds
    }

    def on_render(tile_id, spec):
        stats[tile_id]["paints"] += 1
        if spec is not None:
            stats[tile_id]["peak_scale"] = max(stats[tile_id]["peak_scale"], spec.visual_scale)

    for tile_id, rect in bounds.items():
        engine.add_tile(tile_id, bounds_provider=lambda r=rect: r, on_render=on_render)

    ordered = sorted(samples, key=lambda s: s.timestamp_ms)
    speeds: List[float] = []
    tiers = {tier.value: 0 for tier in SpeedTier}
    frame_ms = 1000.0 / fps
    frames = 0

    if ordered:
        clock = ordered[0].timestamp_ms
        end = ordered[-1].timestamp_ms + 30 * frame_ms
        i = 0
        tracker = engine.tracker
        while clock <= end:
            while i < len(ordered) and ordered[i].timestamp_ms <= clock:
                sample = ordered[i]
                tracker.on_sample(sample)
                if tracker.latest is sample and tracker.previous is not None:
                    speeds.append(tracker.speed)
                    tiers[tracker.speed_tier.value] += 1
                i += 1
            engine.frame(clock)
            frames += 1
            for tile_id, tile in engine.tiles.items():
                if tile.last_spec is not None:
                    stats[tile_id]["visible_frames"] += 1
                stats[tile_id]["peak_intensity"] = max(
                    stats[tile_id]["peak_intensity"], tile.state.intensity)
            clock += frame_ms

    receipts = [r for tile in engine.tiles.values() for r in tile.receipts]
    engine.shutdown()

    speed_arr = np.asarray(speeds, dtype=float)
    speed_stats = {
        "n": int(speed_arr.size),
        "mean": float(speed_arr.mean()) if speed_arr.size else 0.0,
        "p95": float(np.percentile(speed_arr, 95)) if speed_arr.size else 0.0,
        "max": float(speed_arr.max()) if speed_arr.size else 0.0,
        "tiers": tiers,
    }

    return {
        "config": config_schema.to_dict(config),
        "frames": frames,
        "samples": len(ordered),
        "tiles": stats,
        "speed": speed_stats,
        "receipts": receipts,
    }


def emit_replay_receipt(summary: Dict[str, Any], trace_path: str) -> dict:
    """Emit replay_summary receipt."""
    lit = [tid for tid, s in summary["tiles"].items() if s["visible_frames"] > 0]
    return emit_receipt("replay_summary", {
        "tenant_id": TENANT_ID,
        "trace": trace_path,
        "frames": summary["frames"],
        "samples": summary["samples"],
        "tiles_lit": len(lit),
        "peak_intensity": max((s["peak_intensity"] for s in summary["tiles"].values()), default=0.0),
        "speed_p95": summary["speed"]["p95"],
        "receipts_root": merkle(summary["receipts"]),
    })


# =============================================================================
# Rich Output Helpers
# =============================================================================

def print_success(message: str) -> None:
    """Print success message with green checkmark."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print error message with red X."""
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print warning message with yellow warning sign."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def _intensity_bar(value: float, ceiling: float, width: int = 20) -> str:
    ratio = 0.0 if ceiling <= 0 else max(0.0, min(1.0, value / ceiling))
    filled = int(round(ratio * width))
    return "█" * filled + "░" * (width - filled)


def _resolve_config(config_path: Optional[str], preset: str) -> EngineConfig:
    if config_path:
        return config_schema.load(config_path)
    return PRESETS[preset]


# =============================================================================
# Click CLI
# =============================================================================

@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def cli(verbose: bool) -> None:
    """circuitglow developer subcommands."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format="%(levelname)s: %(message)s")


# --- synth-trace ---

@cli.command("synth-trace")
@click.option("--out", "-o", "out_path", required=True, type=click.Path(dir_okay=False))
@click.option("--seed", default=42, show_default=True, type=int)
@click.option("--duration-ms", default=3000.0, show_default=True, type=float)
@click.option("--rate-hz", default=120.0, show_default=True, type=float)
@click.option("--no-flick", is_flag=True, help="Omit the fast flick")
def synth_trace_cmd(out_path: str, seed: int, duration_ms: float, rate_hz: float,
                    no_flick: bool) -> None:
    """Generate a synthetic pointer trace."""
    samples = generate_trace(seed=seed, duration_ms=duration_ms, rate_hz=rate_hz,
                             flick_at_ms=None if no_flick else duration_ms / 2.0)
    write_trace(samples, out_path)
    print_success(f"Wrote {len(samples)} samples to {out_path}")


# --- replay ---

@cli.command("replay")
@click.argument("trace_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="EngineConfig JSON/YAML file")
@click.option("--preset", type=click.Choice(sorted(PRESETS)), default="DEFAULT", show_default=True)
@click.option("--cols", default=DEFAULT_COLS, show_default=True, type=int)
@click.option("--rows", default=DEFAULT_ROWS, show_default=True, type=int)
@click.option("--fps", default=DEFAULT_FPS, show_default=True, type=float)
@click.option("--receipts", "receipts_path", type=click.Path(dir_okay=False),
              help="Append receipts to this JSONL file")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich")
def replay_cmd(trace_path: str, config_path: Optional[str], preset: str, cols: int,
               rows: int, fps: float, receipts_path: Optional[str], output: str) -> None:
    """Replay a pointer trace against a tile grid."""
    try:
        config = _resolve_config(config_path, preset)
        samples = read_trace(trace_path)
        summary = replay_trace(samples, config=config, cols=cols, rows=rows, fps=fps)
    except (ValueError, OSError) as e:
        if output == "json":
            click.echo(json.dumps({"error": str(e)}))
        else:
            print_error(f"Replay failed: {e}")
        sys.exit(2)

    receipt = emit_replay_receipt(summary, trace_path)
    if receipts_path:
        with open(receipts_path, "a") as fh:
            write_receipt_jsonl(config_schema.emit_config_receipt(config, config_path), fh)
            for r in summary["receipts"]:
                write_receipt_jsonl(r, fh)
            write_receipt_jsonl(receipt, fh)

    if output == "json":
        payload = {k: v for k, v in summary.items() if k != "receipts"}
        payload["receipt"] = receipt
        click.echo(json.dumps(payload, indent=2))
        return

    table = Table(title=f"Replay: {Path(trace_path).name} ({config.name})")
    table.add_column("Tile", style="cyan")
    table.add_column("Paints", justify="right")
    table.add_column("Visible frames", justify="right")
    table.add_column("Peak intensity", justify="right")
    table.add_column("", no_wrap=True)
    for tile_id, s in summary["tiles"].items():
        if s["paints"] == 0:
            continue
        table.add_row(
            tile_id,
            str(s["paints"]),
            str(s["visible_frames"]),
            f"{s['peak_intensity']:.3f}",
            _intensity_bar(s["peak_intensity"], config.intensity_ceiling),
        )
    console.print(table)

    speed = summary["speed"]
    tiers = "  ".join(f"{k}={v}" for k, v in speed["tiers"].items())
    console.print(Panel(
        f"frames:      {summary['frames']}\n"
        f"samples:     {summary['samples']}\n"
        f"speed mean:  {speed['mean']:.3f} px/ms\n"
        f"speed p95:   {speed['p95']:.3f} px/ms\n"
        f"speed max:   {speed['max']:.3f} px/ms\n"
        f"tiers:       {tiers}",
        title="[bold]Pointer[/bold]",
        border_style="green",
    ))
    if receipts_path:
        print_success(f"Receipts appended to {receipts_path}")


# --- validate-config ---

@cli.command("validate-config")
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--strict", is_flag=True, help="Fail instead of self-healing")
@click.option("--fix", "fix_path", type=click.Path(dir_okay=False),
              help="Write the healed config to this path")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich")
def validate_config_cmd(config_path: str, strict: bool, fix_path: Optional[str],
                        output: str) -> None:
    """Validate an engine config file."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            config = config_schema.load(config_path, strict=strict)
        except (ValueError, OSError) as e:
            if output == "json":
                click.echo(json.dumps({"valid": False, "error": str(e)}))
            else:
                print_error(f"Invalid config: {e}")
            sys.exit(1)

    messages = [str(w.message) for w in caught if issubclass(w.category, UserWarning)]
    if fix_path:
        config_schema.save(config, fix_path)

    if output == "json":
        click.echo(json.dumps({
            "valid": True,
            "healed": bool(messages),
            "warnings": messages,
            "config": config_schema.to_dict(config),
            "config_hash": config_schema.config_hash(config),
        }, indent=2))
        return

    for m in messages:
        print_warning(m)
    print_success(f"Config OK: {config.name} ({config_schema.config_hash(config)[:16]})")
    if fix_path:
        print_success(f"Saved healed config to {fix_path}")


# --- schema ---

@cli.command("schema")
def schema_cmd() -> None:
    """Print the EngineConfig JSON Schema."""
    click.echo(json.dumps(config_schema.export_schema(), indent=2))


def main() -> int:
    """Entry point for the Click CLI."""
    try:
        cli(standalone_mode=False)
        return 0
    except click.ClickException as e:
        e.show()
        return 2
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0


if __name__ == "__main__":
    sys.exit(main())
