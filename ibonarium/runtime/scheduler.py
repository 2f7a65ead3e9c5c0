from __future__ import annotations

import threading
import time
from typing import Callable, List

from ibonarium.utils.errors import InvariantViolation
from ibonarium import logs


class PeriodicTask:
    """
    One cadence on its own daemon thread.

    - fixed-rate: the next deadline is start + k*interval, a slow body
      skips the ticks it overran instead of bunching them up
    - ticks of one task never overlap, so they run in wall-clock order
    - the shared stop event is the cancellation token
    """

    def __init__(
            self,
            name: str,
            interval: float,
            action: Callable[[], object],
            stop_event: threading.Event,
            run_immediately: bool = False,
            on_fatal: Callable[[BaseException], None] | None = None,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be > 0 (got {interval})")
        self.name = name
        self.interval = interval
        self.action = action
        self.run_immediately = run_immediately
        self._stop = stop_event
        self._on_fatal = on_fatal
        self._thread: threading.Thread | None = None
        self.runs = 0
        self.errors = 0

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"task {self.name} already started")
        self._thread = threading.Thread(target=self._loop, name=f"ibonarium-{self.name}", daemon=True)
        self._thread.start()

    def join(self, timeout: float | None = None) -> bool:
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    # --------------------------------------------------
    def _loop(self) -> None:
        logs.info(f"[Scheduler] {self.name} started every {self.interval}s")

        if self.run_immediately and not self._stop.is_set():
            self.run_once()

        next_at = time.monotonic() + self.interval
        while not self._stop.wait(max(0.0, next_at - time.monotonic())):
            self.run_once()
            next_at += self.interval
            now = time.monotonic()
            if next_at < now:
                skipped = int((now - next_at) // self.interval) + 1
                next_at += skipped * self.interval

        logs.info(f"[Scheduler] {self.name} stopped after {self.runs} runs")

    def run_once(self) -> None:
        try:
            self.action()
        except InvariantViolation as e:
            logs.exception(f"[Scheduler] {self.name}: invariant violated, stopping")
            self._stop.set()
            if self._on_fatal is not None:
                self._on_fatal(e)
        except Exception:
            self.errors += 1
            logs.exception(f"[Scheduler] {self.name} tick failed")
        finally:
            self.runs += 1


class Scheduler:
    """
    Drives the lab cadences (sync / evolve+notify / clock).

    Cadences are independent; across them "last write wins" on the store.
    stop() sets the token and joins every thread before the caller tears
    down sinks. A fatal InvariantViolation from any task stops all tasks
    and is re-raised by stop() / raise_if_failed().
    """

    def __init__(self, join_timeout: float = 5.0):
        self.join_timeout = join_timeout
        self.tasks: List[PeriodicTask] = []
        self._stop = threading.Event()
        self._failure: BaseException | None = None
        self._started = False

    @property
    def running(self) -> bool:
        return self._started and not self._stop.is_set()

    @property
    def stop_event(self) -> threading.Event:
        return self._stop

    @property
    def failure(self) -> BaseException | None:
        return self._failure

    def every(
            self,
            name: str,
            interval: float,
            action: Callable[[], object],
            run_immediately: bool = False,
    ) -> PeriodicTask:
        if self._started:
            raise RuntimeError("cannot add tasks to a running scheduler")
        task = PeriodicTask(
            name,
            interval,
            action,
            stop_event=self._stop,
            run_immediately=run_immediately,
            on_fatal=self._record_failure,
        )
        self.tasks.append(task)
        return task

    def start(self) -> None:
        if self._started:
            raise RuntimeError("scheduler already started")
        self._started = True
        for task in self.tasks:
            task.start()
        logs.info(f"[Scheduler] started {len(self.tasks)} tasks")

    def stop(self) -> None:
        self._stop.set()
        for task in self.tasks:
            if not task.join(self.join_timeout):
                logs.warning(f"[Scheduler] {task.name} did not stop within {self.join_timeout}s")
        logs.info("[Scheduler] stopped")
        self.raise_if_failed()

    def raise_if_failed(self) -> None:
        if self._failure is not None:
            raise self._failure

    def wait(self, timeout: float | None = None) -> bool:
        """Block until stopped (by stop() or a fatal error); True if stopped."""
        return self._stop.wait(timeout)

    def _record_failure(self, exc: BaseException) -> None:
        if self._failure is None:
            self._failure = exc

    def __enter__(self) -> "Scheduler":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
