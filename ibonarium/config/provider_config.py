#!filepath: ibonarium/config/provider_config.py
from pydantic import BaseModel, Field


class ProviderConfig(BaseModel):
    """
    Third-party feeds.

    geo    : open-meteo current weather (Kyiv as lab HQ)
    social : coingecko 24h BTC change, used as a volatility proxy
    """

    weather_url: str = "https://api.open-meteo.com/v1/forecast"
    latitude: float = 50.45
    longitude: float = 30.52

    market_url: str = "https://api.coingecko.com/api/v3/simple/price"
    market_coin: str = "bitcoin"
    market_currency: str = "usd"

    timeout: float = Field(default=10.0, gt=0)
    retry_attempts: int = Field(default=2, ge=1)
    retry_delay: float = Field(default=0.5, ge=0)
    user_agent: str = "Ibonarium/0.1 (layer coupling lab)"
