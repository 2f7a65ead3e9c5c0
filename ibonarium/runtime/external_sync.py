from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Protocol, Tuple

from ibonarium.core.event_log import EventLog
from ibonarium.core.random_source import RandomSource
from ibonarium.core.readings import GeoReading, SocialReading
from ibonarium.core.state import LayerState
from ibonarium.core.store import StateStore
from ibonarium.engines.sync_merge import SyncMergeEngine
from ibonarium.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)
from ibonarium.utils.errors import StoreClosedError, TransientSyncFailure
from ibonarium import logs


class GeoProvider(Protocol):
    def fetch(self) -> GeoReading:
        ...


class SocialProvider(Protocol):
    def fetch(self) -> SocialReading:
        ...


FAILURE_MESSAGE = "[ERROR] {label} sync failed. Using local resonance buffer."


@dataclass
class SyncReport:
    results: Dict[str, bool] = field(default_factory=dict)
    discarded: bool = False

    @property
    def ok(self) -> bool:
        return bool(self.results) and all(self.results.values())


class ExternalSync:
    """
    Slow-cadence ingestion of external readings.

    For each category (geo, then social):
      - fetch from its provider
      - success -> merge into the store + one "[API] ..." log entry
      - failure -> store untouched + one "[ERROR] ... sync failed" entry,
        then carry on with the next category

    Never raises past sync_once(). Once cancel() has been called, readings
    that arrive afterwards are dropped without touching state or log.
    """

    def __init__(
            self,
            store: StateStore,
            log: EventLog,
            rng: RandomSource,
            geo_provider: GeoProvider | None = None,
            social_provider: SocialProvider | None = None,
            align_cosmos: bool = True,
            inst: Instrumentation | None = None,
    ):
        self.store = store
        self.log = log
        self.rng = rng
        self.align_cosmos = align_cosmos
        self.inst = inst if inst is not None else NoOpInstrumentation()
        self._cancelled = threading.Event()

        self.categories: List[Tuple[str, object, Callable]] = []
        if geo_provider is not None:
            self.categories.append(("geo", geo_provider, self._merge_geo))
        if social_provider is not None:
            self.categories.append(("social", social_provider, self._merge_social))

    # --------------------------------------------------
    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    # --------------------------------------------------
    def sync_once(self) -> SyncReport:
        report = SyncReport()

        for category, provider, merge in self.categories:
            if self.cancelled:
                report.discarded = True
                break
            report.results[category] = self._sync_category(category, provider, merge)

        if report.discarded or self.cancelled:
            report.discarded = True
            logs.info("[ExternalSync] shutdown requested, remaining results discarded")
            return report

        if self.align_cosmos and report.ok:
            try:
                message = self.store.update(lambda s: SyncMergeEngine.align_cosmos(s, self.rng))
            except StoreClosedError:
                self.cancel()
                report.discarded = True
                return report
            self.log.append(message)

        logs.info(f"[ExternalSync] pass done: {report.results}")
        return report

    def _sync_category(self, category: str, provider, merge: Callable) -> bool:
        try:
            reading = provider.fetch()
        except TransientSyncFailure as e:
            return self._fail(category, str(e))
        except Exception as e:
            logs.exception(f"[ExternalSync] unexpected {category} provider error")
            return self._fail(category, repr(e))

        def _merge_unless_cancelled(state: LayerState):
            # checked under the store lock, so cancel() cannot slip in before the merge
            if self.cancelled:
                return None
            return merge(state, reading)

        try:
            message = self.store.update(_merge_unless_cancelled)
        except StoreClosedError:
            self.cancel()
            logs.info(f"[ExternalSync] store closed, {category} reading dropped")
            return False

        if message is None:
            logs.info(f"[ExternalSync] {category} reading arrived after shutdown, dropped")
            return False

        self.log.append(message)
        self.inst.metrics.increment(f"sync_{category}_ok")
        return True

    def _fail(self, category: str, reason: str) -> bool:
        logs.warning(f"[ExternalSync] {category}: {reason}")
        self.inst.metrics.increment(f"sync_{category}_failed")
        if not self.cancelled:
            self.log.append(FAILURE_MESSAGE.format(label=category.capitalize()))
        return False

    # --------------------------------------------------
    def _merge_geo(self, state: LayerState, reading: GeoReading) -> str:
        return SyncMergeEngine.merge_geo(state, reading)

    def _merge_social(self, state: LayerState, reading: SocialReading) -> str:
        return SyncMergeEngine.merge_social(state, reading, self.rng)
