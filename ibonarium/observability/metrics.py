#!filepath: ibonarium/observability/metrics.py
import threading
from dataclasses import dataclass, field
from typing import Any, Dict

from ibonarium import logs


@dataclass
class MetricRecorder:
    """
    - record(name, value)  : gauge，覆盖写
    - increment(name)      : counter（sync 成功/失败次数等）
    """

    enabled: bool = True
    metrics: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self._lock = threading.Lock()

    def record(self, name: str, value: Any):
        if not self.enabled:
            return
        with self._lock:
            self.metrics[name] = value
        logs.debug(f"[Metric] {name} = {value}")

    def increment(self, name: str, by: int = 1) -> int:
        if not self.enabled:
            return 0
        with self._lock:
            value = self.metrics.get(name, 0) + by
            self.metrics[name] = value
        return value
