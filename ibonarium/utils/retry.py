#!filepath: ibonarium/utils/retry.py
import random
import time
from typing import Callable, Tuple, Type

from ibonarium import logs


class Retry:
    """
    同步重试（指数退避 + ±20% jitter）。

    provider 的重试次数来自 ProviderConfig，adapter 在请求时调用 Retry.run()。
    最后一次仍失败时原异常向上抛，由调用方决定如何归类。
    """

    @staticmethod
    def backoff_delay(attempt: int, delay: float, backoff: float, jitter: bool) -> float:
        """第 attempt 次失败后的等待秒数（attempt 从 1 开始）"""
        wait = delay * (backoff ** (attempt - 1))
        if jitter:
            wait *= random.uniform(0.8, 1.2)
        return wait

    @staticmethod
    def run(
        func: Callable,
        *args,
        exceptions: Tuple[Type[Exception], ...] = (Exception,),
        max_attempts: int = 3,
        delay: float = 1.0,
        backoff: float = 2.0,
        jitter: bool = True,
        **kwargs,
    ):
        name = getattr(func, "__qualname__", repr(func))

        for attempt in range(1, max_attempts + 1):
            try:
                return func(*args, **kwargs)
            except exceptions as e:
                if attempt >= max_attempts:
                    logs.error(f"[Retry] {name} gave up after {attempt} attempts: {e}")
                    raise
                wait = Retry.backoff_delay(attempt, delay, backoff, jitter)
                logs.warning(f"[Retry] {name} attempt {attempt}/{max_attempts} failed ({e}), sleep {wait:.2f}s")
                time.sleep(wait)

