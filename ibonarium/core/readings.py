from __future__ import annotations
from dataclasses import dataclass
# ibonarium/core/readings.py


# -------------------------
# External readings (transient, consumed once by ExternalSync)
# -------------------------
@dataclass(frozen=True)
class GeoReading:
    temperature: float    # °C
    wind_speed: float     # km/h


@dataclass(frozen=True)
class SocialReading:
    price_change_percent: float   # signed 24h change
