from __future__ import annotations

from typing import Any, Dict

from ibonarium.adapters.base_adapter import HttpProviderAdapter, finite
from ibonarium.core.readings import SocialReading


class MarketAdapter(HttpProviderAdapter):
    """
    Social provider: 24h price change of one coin, a proxy for digital anxiety.

    payload:
        {"bitcoin": {"usd": 64000.0, "usd_24h_change": -3.2}}
    """

    category = "social"

    def url(self) -> str:
        return self.config.market_url

    def params(self) -> Dict[str, Any]:
        return {
            "ids": self.config.market_coin,
            "vs_currencies": self.config.market_currency,
            "include_24hr_change": "true",
        }

    def parse(self, payload: Any) -> SocialReading:
        quote = payload[self.config.market_coin]
        key = f"{self.config.market_currency}_24h_change"
        return SocialReading(price_change_percent=finite(quote[key], key))
