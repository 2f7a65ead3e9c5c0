from __future__ import annotations

from ibonarium.core.random_source import RandomSource
from ibonarium.core.readings import GeoReading, SocialReading
from ibonarium.core.state import LayerState, SOLAR_FLUX_RANGE
from ibonarium.engines.coupling import clamp


class SyncMergeEngine:
    """
    Engine 层（纯逻辑）：
    - 不做任何 I/O
    - 只负责：external reading -> LayerState 字段映射
    - 每个 merge 返回要写入 EventLog 的消息
    """

    TURBULENCE_SCALE = 50.0
    VOLATILITY_SCALE = 10.0

    # --------------------------------------------------
    @staticmethod
    def volatility_to_anxiety(change_percent: float) -> float:
        return min(1.0, abs(change_percent) / SyncMergeEngine.VOLATILITY_SCALE)

    # --------------------------------------------------
    @staticmethod
    def merge_geo(state: LayerState, reading: GeoReading) -> str:
        state.set(
            "geo",
            thermal_gradient=reading.temperature,
            turbulence=reading.wind_speed / SyncMergeEngine.TURBULENCE_SCALE,
        )
        return f"[API] Geo-data synced: Temp {reading.temperature}°C"

    # --------------------------------------------------
    @staticmethod
    def merge_social(state: LayerState, reading: SocialReading, rng: RandomSource) -> str:
        anxiety = SyncMergeEngine.volatility_to_anxiety(reading.price_change_percent)
        state.set(
            "social",
            anxiety=anxiety,
            connectivity=0.8 + rng.random() * 0.2,
        )
        return (
            "[API] Social-sync: Market volatility reflects anxiety at "
            f"{anxiety * 100:.1f}%"
        )

    # --------------------------------------------------
    @staticmethod
    def align_cosmos(state: LayerState, rng: RandomSource) -> str:
        """Simulated space weather; no keyless feed is reliable enough."""
        state.set("cosmos", solar_flux=clamp(140.0 + rng.random() * 20.0, *SOLAR_FLUX_RANGE))
        return "[API] Cosmos-layer aligned with solar cycle 25."
