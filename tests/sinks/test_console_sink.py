#!filepath: tests/sinks/test_console_sink.py
import io
from datetime import datetime

import pytest
from rich.console import Console

from ibonarium.core.random_source import ConstantRandom
from ibonarium.core.state import LayerState
from ibonarium.sinks.base import UISink
from ibonarium.sinks.console import ConsoleUISink, entropy_bars, render_stats


def _quiet_console():
    return Console(record=True, width=120, file=io.StringIO())


def test_render_stats_for_defaults():
    stats = render_stats(LayerState.default().freeze())

    assert list(stats) == ["meta", "social", "bio", "geo", "cosmos", "time"]
    assert stats["meta"] == "Stability: 92% | Harmony: 0.88"
    assert stats["social"] == "Anxiety: Low | Connectivity: 0.95"
    assert stats["bio"] == "Growth: 1.20x | Respiration: 0.85"
    assert stats["geo"] == "MagSTRESS: 32.0nT | Turbulence: 0.15"
    assert stats["cosmos"] == "SolarFlux: 145 | Orbit: 0.45"
    assert stats["time"] == "Pulse: 7.83Hz | Entropy: 0.040"


def test_anxiety_label_switches_above_half():
    state = LayerState.default()
    state.set("social", anxiety=0.51)

    assert render_stats(state.freeze())["social"].startswith("Anxiety: High")


def test_entropy_bars_are_capped():
    assert entropy_bars(0.04, ConstantRandom(0.5), count=3) == pytest.approx([32.0] * 3)
    assert entropy_bars(1.0, ConstantRandom(1.0)) == [100.0] * 12


def test_sink_keeps_last_twenty_lines():
    sink = ConsoleUISink(console=_quiet_console(), rng=ConstantRandom(0.0))
    ts = datetime(2026, 1, 1, 9, 5, 7)

    for i in range(25):
        sink.append(ts, f"msg {i}")

    assert isinstance(sink, UISink)
    assert len(sink.lines) == 20
    assert sink.lines[0] == "[09:05:07] msg 5"
    assert sink.lines[-1] == "[09:05:07] msg 24"


def test_update_and_clock():
    sink = ConsoleUISink(console=_quiet_console(), rng=ConstantRandom(0.0))

    sink.update(LayerState.default().freeze())
    sink.display_clock(datetime(2026, 1, 1, 23, 59, 1))

    assert sink.harmony_text == "0.88"
    assert sink.bars == [20.0] * 12
    assert sink.clock_text == "23:59:01"
    assert sink.stats["meta"].startswith("Stability")


def test_print_renders_everything():
    console = _quiet_console()
    sink = ConsoleUISink(console=console, rng=ConstantRandom(0.0))
    sink.append(datetime(2026, 1, 1, 12, 0, 0), "[SYS] Unified Matrix Core active.")
    sink.update(LayerState.default().freeze())

    sink.print()

    text = console.export_text()
    assert "Global harmony" in text
    assert "0.88" in text
    assert "[SYS] Unified Matrix Core active." in text
    assert "Pulse: 7.83Hz" in text
