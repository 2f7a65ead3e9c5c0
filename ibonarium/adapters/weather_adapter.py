from __future__ import annotations

from typing import Any, Dict

from ibonarium.adapters.base_adapter import HttpProviderAdapter, finite
from ibonarium.core.readings import GeoReading


class WeatherAdapter(HttpProviderAdapter):
    """
    Geo provider: open-meteo current weather at the lab coordinates.

    payload:
        {"current": {"temperature_2m": 3.1, "wind_speed_10m": 14.2, ...}}
    """

    category = "geo"

    def url(self) -> str:
        return self.config.weather_url

    def params(self) -> Dict[str, Any]:
        return {
            "latitude": self.config.latitude,
            "longitude": self.config.longitude,
            "current": "temperature_2m,wind_speed_10m",
        }

    def parse(self, payload: Any) -> GeoReading:
        current = payload["current"]
        return GeoReading(
            temperature=finite(current["temperature_2m"], "temperature_2m"),
            wind_speed=finite(current["wind_speed_10m"], "wind_speed_10m"),
        )
