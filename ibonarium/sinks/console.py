from __future__ import annotations

import threading
from collections import deque
from datetime import datetime
from typing import Deque, Dict, List

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ibonarium.core.random_source import RandomSource, SeededRandom
from ibonarium.core.state import LayerSnapshot

DISPLAY_LINES = 20
ENTROPY_BARS = 12


def render_stats(snapshot: LayerSnapshot) -> Dict[str, str]:
    """Per-layer status lines, top layer first."""
    s = snapshot
    return {
        "meta": f"Stability: {s.meta.stability_index * 100:.0f}% | Harmony: {s.meta.harmony:.2f}",
        "social": (
            f"Anxiety: {'High' if s.social.anxiety > 0.5 else 'Low'} | "
            f"Connectivity: {s.social.connectivity:.2f}"
        ),
        "bio": f"Growth: {s.bio.growth_rate:.2f}x | Respiration: {s.bio.respiration:.2f}",
        "geo": f"MagSTRESS: {s.geo.magnetic_stress:.1f}nT | Turbulence: {s.geo.turbulence:.2f}",
        "cosmos": f"SolarFlux: {s.cosmos.solar_flux:.0f} | Orbit: {s.cosmos.orbital_phase:.2f}",
        "time": f"Pulse: {s.time.pulse:.2f}Hz | Entropy: {s.time.entropy:.3f}",
    }


def entropy_bars(entropy: float, rng: RandomSource, count: int = ENTROPY_BARS) -> List[float]:
    """Bar heights in percent for the entropy chart, capped at 100."""
    return [min(100.0, 20.0 + rng.random() * 60.0 * entropy * 10.0) for _ in range(count)]


class ConsoleUISink:
    """
    UI sink on a rich Console.

    - append()        : keeps the most recent 20 formatted lines
    - display_clock() : cosmetic clock
    - update()        : per-layer stats + global harmony + entropy chart
    - renderable()    : rich Group for rich.live.Live
    """

    def __init__(
            self,
            console: Console | None = None,
            max_lines: int = DISPLAY_LINES,
            rng: RandomSource | None = None,
    ):
        self.console = console or Console()
        self.rng = rng if rng is not None else SeededRandom()
        self._lines: Deque[str] = deque(maxlen=max_lines)
        self._lock = threading.Lock()
        self.clock_text = ""
        self.stats: Dict[str, str] = {}
        self.harmony_text = ""
        self.bars: List[float] = []

    # ---------------- sink contract ----------------
    def append(self, timestamp: datetime, message: str) -> None:
        with self._lock:
            self._lines.append(f"[{timestamp:%H:%M:%S}] {message}")

    def display_clock(self, timestamp: datetime) -> None:
        self.clock_text = f"{timestamp:%H:%M:%S}"

    def update(self, snapshot: LayerSnapshot) -> None:
        stats = render_stats(snapshot)
        bars = entropy_bars(snapshot.time.entropy, self.rng)
        with self._lock:
            self.stats = stats
            self.harmony_text = f"{snapshot.meta.harmony:.2f}"
            self.bars = bars

    def close(self) -> None:
        pass

    # ---------------- views ----------------
    @property
    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def renderable(self) -> Group:
        with self._lock:
            stats = dict(self.stats)
            lines = list(self._lines)
            bars = list(self.bars)
            harmony = self.harmony_text

        table = Table(title=f"IBONARIUM  {self.clock_text}", show_header=False, expand=True)
        table.add_column("layer", style="bold cyan", no_wrap=True)
        table.add_column("status")
        for layer, text in stats.items():
            table.add_row(layer.upper(), text)

        chart = Text("".join(_bar_glyph(h) for h in bars), style="magenta")
        header = Text.assemble(("Global harmony ", "bold"), (harmony or "-", "bold green"), "  ", chart)

        log_panel = Panel("\n".join(lines) or "-", title="terminal", border_style="dim")
        return Group(header, table, log_panel)

    def print(self) -> None:
        self.console.print(self.renderable())


def _bar_glyph(height: float) -> str:
    glyphs = " ▁▂▃▄▅▆▇█"
    index = int(round(height / 100.0 * (len(glyphs) - 1)))
    return glyphs[max(0, min(len(glyphs) - 1, index))]
