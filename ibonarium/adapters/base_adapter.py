from __future__ import annotations

import math
from typing import Any, Dict

import httpx

from ibonarium.config.provider_config import ProviderConfig
from ibonarium.observability.instrumentation import Instrumentation
from ibonarium.utils.errors import TransientSyncFailure
from ibonarium.utils.retry import Retry
from ibonarium import logs


class BaseAdapter:
    """
    Adapter 的通用接口。

    - 持有 Instrumentation（可选）
    - 提供 timer() 方便在内部对关键区域计时
    """

    def __init__(self, inst: Instrumentation | None = None):
        self.inst = inst

    def timer(self, name: str = ''):
        if not name:
            name = self.__class__.__name__
        if self.inst is None:
            return _NoOpTimer()
        return self.inst.timer(name)


class _NoOpTimer:
    """inst 为 None，则计时器为 no-op。"""
    def __enter__(self): pass
    def __exit__(self, exc_type, exc, tb): pass


class HttpProviderAdapter(BaseAdapter):
    """
    External provider over HTTP (httpx).

    - fetch() -> typed reading, or raises TransientSyncFailure
    - transport errors / timeouts are retried (ProviderConfig.retry_*)
    - HTTP status errors and malformed payloads are not retried

    Subclasses define: category, url(), params(), parse(payload).
    """

    category: str = ""

    def __init__(
            self,
            config: ProviderConfig,
            client: httpx.Client | None = None,
            inst: Instrumentation | None = None,
    ):
        super().__init__(inst)
        self.config = config
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=config.timeout,
            follow_redirects=True,
            headers={"User-Agent": config.user_agent},
        )

    # --------------------------------------------------
    def url(self) -> str:
        raise NotImplementedError

    def params(self) -> Dict[str, Any]:
        return {}

    def parse(self, payload: Any):
        raise NotImplementedError

    # --------------------------------------------------
    def fetch(self):
        try:
            payload = Retry.run(
                self._get_json,
                exceptions=(httpx.TransportError,),
                max_attempts=self.config.retry_attempts,
                delay=self.config.retry_delay,
            )
        except httpx.HTTPError as e:
            raise TransientSyncFailure(self.category, f"{type(e).__name__}: {e}") from e

        try:
            return self.parse(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise TransientSyncFailure(self.category, f"malformed payload: {e!r}") from e

    def _get_json(self) -> Any:
        with self.timer(f"{self.category}_request"):
            response = self.client.get(self.url(), params=self.params())
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise TransientSyncFailure(self.category, "response is not JSON") from e

    # --------------------------------------------------
    def close(self) -> None:
        if self._owns_client:
            self.client.close()
            logs.debug(f"[{self.__class__.__name__}] http client closed")


def finite(value: Any, name: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{name} is not finite: {value!r}")
    return number
