#!filepath: ibonarium/observability/timer.py
import threading
import time
from typing import Dict


class Timer:
    """
    按线程隔离的计时器。

    sync / evolve / clock 三个 cadence 各跑在自己的线程里，同名计时
    (比如两个 adapter 的 request) 互不覆盖，调用方不需要拼线程名。

    - start(name)
    - end(name) → 耗时秒数；disabled 或未 start 过返回 0.0
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._local = threading.local()

    def _starts(self) -> Dict[str, float]:
        starts = getattr(self._local, "starts", None)
        if starts is None:
            starts = self._local.starts = {}
        return starts

    def start(self, name: str) -> None:
        if self.enabled:
            self._starts()[name] = time.perf_counter()

    def end(self, name: str) -> float:
        if not self.enabled:
            return 0.0
        started = self._starts().pop(name, None)
        return 0.0 if started is None else time.perf_counter() - started
