#!filepath: ibonarium/observability/instrumentation.py
from __future__ import annotations

import threading
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict

from ibonarium.observability.metrics import MetricRecorder
from ibonarium.observability.timer import Timer
from ibonarium import logs


@dataclass
class Instrumentation:
    """
    Instrumentation（计时 + metrics）

    - timer(name)   : context manager，最近一次耗时写入 timeline[name]
    - metrics       : MetricRecorder
    - report()      : 冷路径，打印 timeline + metrics

    Timer 按线程隔离，多个 cadence 同时计时同名步骤也不会互相覆盖；
    timeline 只保留每个名字最近一次的耗时。
    """

    enabled: bool = True

    def __post_init__(self):
        self._timer = Timer(enabled=self.enabled)
        self.metrics = MetricRecorder(enabled=self.enabled)
        self.timeline: Dict[str, float] = OrderedDict()
        self._lock = threading.Lock()

    def timer(self, name: str, *, record: bool = True):
        inst = self

        @contextmanager
        def _ctx():
            if not inst.enabled:
                yield
                return

            inst._timer.start(name)
            try:
                yield
            finally:
                elapsed = inst._timer.end(name)
                if record:
                    with inst._lock:
                        inst.timeline[name] = elapsed

        return _ctx()

    def report(self) -> None:
        logs.info("[Instrumentation] ===== last timings =====")
        for name, sec in list(self.timeline.items()):
            logs.info(f"[Instrumentation] {name:<30} {sec * 1000:>8.2f}ms")
        for name, value in list(self.metrics.metrics.items()):
            logs.info(f"[Instrumentation] {name:<30} {value}")


# -------------------------------------------------------------
# No-op Instrumentation（禁用 observability）
# -------------------------------------------------------------
class NoOpInstrumentation:
    """Instrumentation disabled 时使用。"""

    def __init__(self):
        self.metrics = MetricRecorder(enabled=False)
        self.timeline: Dict[str, float] = {}

    def timer(self, name: str, *, record: bool = True):
        return _NoOpTimer()

    def report(self) -> None:
        pass


class _NoOpTimer:
    def __enter__(self):
        pass

    def __exit__(self, exc_type, exc, tb):
        pass
