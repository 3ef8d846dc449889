"""
tests/test_glow_cli.py - Tests for glow_cli.py

Trace generation and I/O, grid replay and the click subcommands.
"""

import json
import sys

import pytest
from click.testing import CliRunner

from glow.types_config import CONFIG_DEFAULT
from glow.types_state import PointerSample
from glow_cli import (
    cli,
    emit_replay_receipt,
    generate_trace,
    grid_bounds,
    main,
    read_trace,
    replay_trace,
    write_trace,
)


def _hover_trace():
    """Pointer resting 10 px above the top edge of tile r0c0."""
    return [PointerSample(x=110.0, y=-10.0, timestamp_ms=float(t)) for t in range(0, 101, 10)]


class TestTraces:
    """Synthetic traces and JSONL trace files."""

    def test_generate_is_deterministic(self):
        assert generate_trace(seed=3) == generate_trace(seed=3)
        assert generate_trace(seed=3) != generate_trace(seed=4)

    def test_generate_is_time_ordered(self):
        samples = generate_trace(seed=1)
        times = [s.timestamp_ms for s in samples]
        assert times == sorted(times), "Trace must be monotone in time"

    def test_generate_contains_flick(self):
        samples = generate_trace(seed=1, flick_px=200.0)
        flicks = [
            (a, b) for a, b in zip(samples, samples[1:])
            if b.timestamp_ms - a.timestamp_ms == pytest.approx(5.0)
            and b.x - a.x == pytest.approx(200.0)
        ]
        assert len(flicks) == 1, f"Expected one 200 px flick, found {len(flicks)}"

    def test_no_flick(self):
        samples = generate_trace(seed=1, flick_at_ms=None, duration_ms=1000.0, rate_hz=100.0)
        assert len(samples) == 100

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "trace.jsonl"
        samples = generate_trace(seed=2, duration_ms=200.0)
        write_trace(samples, str(path))
        assert read_trace(str(path)) == samples

    def test_bad_row_reports_line(self, tmp_path):
        path = tmp_path / "bad.jsonl"
        path.write_text('{"x": 1, "y": 2, "t": 0}\n\n{"x": 1}\n')
        with pytest.raises(ValueError) as exc_info:
            read_trace(str(path))
        assert ":3:" in str(exc_info.value)


class TestReplay:
    """Fixed-rate replay against a tile grid."""

    def test_grid_bounds(self):
        tiles = grid_bounds(2, 2, 100.0, 50.0, 10.0)
        assert set(tiles) == {"r0c0", "r0c1", "r1c0", "r1c1"}
        assert tiles["r0c1"].left == 110.0
        assert tiles["r1c0"].top == 60.0

    def test_hover_lights_one_tile(self):
        summary = replay_trace(_hover_trace(), cols=3, rows=2)
        tiles = summary["tiles"]
        assert tiles["r0c0"]["peak_intensity"] > 0.9, f"Got {tiles['r0c0']['peak_intensity']}"
        assert tiles["r0c0"]["visible_frames"] > 0
        assert tiles["r0c1"]["paints"] == 0, "A tile 134 px away must stay dark"
        assert tiles["r1c2"]["peak_intensity"] == 0.0

    def test_summary_counts(self):
        summary = replay_trace(_hover_trace(), cols=3, rows=2, fps=50.0)
        assert summary["samples"] == 11
        assert summary["frames"] == 36
        assert len(summary["receipts"]) == 6, "One mount receipt per tile"
        assert summary["config"]["name"] == CONFIG_DEFAULT.name

    def test_flick_speed_stats(self):
        summary = replay_trace(generate_trace(seed=5), cols=7, rows=4)
        speed = summary["speed"]
        assert speed["max"] > 30.0, f"The flick should dominate max speed, got {speed['max']}"
        assert speed["tiers"]["EXTREME"] >= 1
        assert speed["n"] == sum(speed["tiers"].values())

    def test_empty_trace(self):
        summary = replay_trace([])
        assert summary["frames"] == 0
        assert summary["speed"]["n"] == 0

    def test_bad_fps(self):
        with pytest.raises(ValueError):
            replay_trace(_hover_trace(), fps=0.0)

    def test_replay_receipt(self):
        summary = replay_trace(_hover_trace(), cols=2, rows=1)
        receipt = emit_replay_receipt(summary, "hover.jsonl")
        assert receipt["receipt_type"] == "replay_summary"
        assert receipt["tiles_lit"] == 1
        assert len(receipt["receipts_root"].split(":")) == 2


class TestCommands:
    """click subcommands via CliRunner."""

    def test_synth_then_replay_json(self, tmp_path):
        runner = CliRunner()
        trace = tmp_path / "trace.jsonl"
        result = runner.invoke(cli, ["synth-trace", "-o", str(trace), "--duration-ms", "500"])
        assert result.exit_code == 0, result.output
        assert trace.exists()

        result = runner.invoke(cli, ["replay", str(trace), "--cols", "3", "--rows", "2",
                                     "-o", "json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["samples"] > 0
        assert payload["receipt"]["receipt_type"] == "replay_summary"

    def test_replay_rich_with_receipts(self, tmp_path):
        runner = CliRunner()
        trace = tmp_path / "trace.jsonl"
        write_trace(_hover_trace(), str(trace))
        receipts = tmp_path / "receipts.jsonl"
        result = runner.invoke(cli, ["replay", str(trace), "--cols", "2", "--rows", "1",
                                     "--receipts", str(receipts)])
        assert result.exit_code == 0, result.output
        assert "r0c0" in result.output
        types = [json.loads(line)["receipt_type"] for line in receipts.read_text().splitlines()]
        assert types[0] == "config_loaded"
        assert types[-1] == "replay_summary"

    def test_replay_bad_trace_exit_2(self, tmp_path):
        trace = tmp_path / "bad.jsonl"
        trace.write_text("not json\n")
        result = CliRunner().invoke(cli, ["replay", str(trace)])
        assert result.exit_code == 2

    def test_validate_config_valid_json(self, tmp_path):
        path = tmp_path / "calm.json"
        path.write_text(json.dumps({"preset": "CALM"}))
        result = CliRunner().invoke(cli, ["validate-config", str(path), "-o", "json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["valid"] is True
        assert payload["healed"] is False
        assert payload["config"]["name"] == "CALM"

    def test_validate_config_strict_fails(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"spring_factor": 2.0}))
        result = CliRunner().invoke(cli, ["validate-config", str(path), "--strict"])
        assert result.exit_code == 1

    def test_validate_config_heals_and_fixes(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("spring_factor: 2.0\n")
        fixed = tmp_path / "fixed.json"
        result = CliRunner().invoke(cli, ["validate-config", str(path), "--fix", str(fixed)])
        assert result.exit_code == 0, result.output
        assert "Config OK" in result.output
        assert json.loads(fixed.read_text())["spring_factor"] == 1.0

    def test_schema(self):
        result = CliRunner().invoke(cli, ["schema"])
        assert result.exit_code == 0
        assert json.loads(result.output)["title"] == "EngineConfig"


class TestMain:

    def test_main_exit_codes(self, tmp_path, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["glow", "schema"])
        assert main() == 0

        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"spring_factor": 2.0}))
        monkeypatch.setattr(sys, "argv", ["glow", "validate-config", str(bad), "--strict"])
        assert main() == 1
