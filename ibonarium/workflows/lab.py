#!filepath: ibonarium/workflows/lab.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List

from ibonarium.adapters.market_adapter import MarketAdapter
from ibonarium.adapters.weather_adapter import WeatherAdapter
from ibonarium.config.app_config import AppConfig
from ibonarium.core.event_log import EventLog, LogEntry
from ibonarium.core.random_source import RandomSource, SeededRandom
from ibonarium.core.state import LayerSnapshot, LayerState
from ibonarium.core.store import StateStore
from ibonarium.observability.instrumentation import Instrumentation
from ibonarium.persistence.kv_store import JsonKeyValueStore, KeyValueStore
from ibonarium.persistence.snapshot_repository import SnapshotRepository
from ibonarium.runtime.evolver import Evolver
from ibonarium.runtime.external_sync import ExternalSync, SyncReport
from ibonarium.runtime.notifier import SinkNotifier
from ibonarium.runtime.scheduler import Scheduler
from ibonarium.sinks.base import NullSink, SnapshotSink, UISink
from ibonarium.sinks.visual import VisualMapper
from ibonarium import logs


class Lab:
    """
    Lab = wiring of store / log / evolver / sync / sinks / scheduler.

    Lifecycle:
        lab = build_lab(cfg)
        lab.start()     # sync once now, then the three cadences
        ...
        lab.stop()      # sync cancelled -> cadences stop -> sinks -> store
    """

    def __init__(
            self,
            config: AppConfig,
            store: StateStore,
            log: EventLog,
            evolver: Evolver,
            sync: ExternalSync,
            ui: UISink,
            render: SnapshotSink,
            repository: SnapshotRepository,
            inst: Instrumentation,
            clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.store = store
        self.log = log
        self.evolver = evolver
        self.sync = sync
        self.ui = ui
        self.render = render
        self.repository = repository
        self.inst = inst
        self._clock = clock
        self.notifier = SinkNotifier([render, ui])
        self.scheduler: Scheduler | None = None
        self._closables: List[Any] = []

        log.subscribe(self._forward_to_ui)

    # --------------------------------------------------
    def _forward_to_ui(self, entry: LogEntry) -> None:
        self.ui.append(entry.timestamp, entry.message)

    def step(self) -> LayerSnapshot:
        """One fast tick: evolve, then notify sinks."""
        snapshot = self.evolver.tick()
        self.notifier.notify(snapshot)
        return snapshot

    def sync_once(self) -> SyncReport:
        return self.sync.sync_once()

    def show_clock(self) -> None:
        self.ui.display_clock(self._clock())

    def snapshot(self) -> LayerSnapshot:
        return self.store.read()

    def save_snapshot(self) -> Dict[str, Any]:
        return self.repository.save(self.store.read())

    # --------------------------------------------------
    def start(self) -> Scheduler:
        if self.scheduler is not None:
            raise RuntimeError("lab already started")

        cfg = self.config.scheduler
        scheduler = Scheduler(join_timeout=cfg.join_timeout)
        scheduler.every("sync", cfg.sync_interval, self.sync_once, run_immediately=True)
        scheduler.every("evolve", cfg.tick_interval, self.step)
        scheduler.every("clock", cfg.clock_interval, self.show_clock, run_immediately=True)

        self.log.append("[SYS] Unified Matrix Core active.")
        self.log.append("[SYS] Monitoring inter-layer influences...")

        scheduler.start()
        self.scheduler = scheduler
        return scheduler

    def stop(self) -> None:
        # cancel before joining: a request finishing during the join is dropped
        self.sync.cancel()
        try:
            if self.scheduler is not None:
                self.scheduler.stop()
        finally:
            for closable in self._closables:
                closable.close()
            for sink in (self.render, self.ui):
                close = getattr(sink, "close", None)
                if close is not None:
                    close()
            self.store.close()
            self.inst.report()
            logs.info("[Lab] stopped")

    def add_closable(self, obj: Any) -> None:
        self._closables.append(obj)


def build_lab(
        config: AppConfig | None = None,
        *,
        rng: RandomSource | None = None,
        ui: UISink | None = None,
        render: SnapshotSink | None = None,
        geo_provider=None,
        social_provider=None,
        kv_store: KeyValueStore | None = None,
        initial: LayerState | None = None,
        offline: bool = False,
) -> Lab:
    """
    Factory：按配置组装 Lab。

    - providers 不传时按 ProviderConfig 创建 http adapters（offline=True 时不创建）
    - rng 不传时使用 SeededRandom(config.evolver.seed)
    """
    config = config or AppConfig.default()
    rng = rng if rng is not None else SeededRandom(config.evolver.seed)
    inst = Instrumentation(enabled=True)

    store = StateStore(initial)
    log = EventLog()

    closables = []
    if not offline:
        if geo_provider is None and config.sync.enable_geo:
            geo_provider = WeatherAdapter(config.provider, inst=inst)
            closables.append(geo_provider)
        if social_provider is None and config.sync.enable_social:
            social_provider = MarketAdapter(config.provider, inst=inst)
            closables.append(social_provider)

    evolver = Evolver(store, log, rng, params=config.evolver.to_params(), inst=inst)
    sync = ExternalSync(
        store,
        log,
        rng,
        geo_provider=geo_provider if config.sync.enable_geo else None,
        social_provider=social_provider if config.sync.enable_social else None,
        align_cosmos=config.sync.align_cosmos,
        inst=inst,
    )
    repository = SnapshotRepository(
        kv_store if kv_store is not None else JsonKeyValueStore(config.persistence.path),
        key=config.persistence.key,
    )

    lab = Lab(
        config=config,
        store=store,
        log=log,
        evolver=evolver,
        sync=sync,
        ui=ui if ui is not None else NullSink(),
        render=render if render is not None else VisualMapper(),
        repository=repository,
        inst=inst,
    )
    for closable in closables:
        lab.add_closable(closable)
    return lab
