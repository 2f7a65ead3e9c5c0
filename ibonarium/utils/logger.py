#!filepath: ibonarium/utils/logger.py
import os
import sys
from functools import wraps
from time import perf_counter
from typing import Callable

from loguru import logger

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {thread.name} | {message}"
CONSOLE_FORMAT = "{level} | {message}"


class Logging:
    """
    运维日志（loguru 封装）

    - 文件：{dir}/YYYY-MM-DD.log，按 rotation 切割，retention 过期清理
    - stderr：只打 console_level 以上，避免把 rich console UI 刷乱
    - 每行带线程名，三个 cadence（sync / evolve / clock）可以区分

    注意：EventLog 是给 UI 看的领域事件，不走这里。
    """

    _announced = False

    def __init__(
        self,
        log_dir: str = "logs",
        rotation: str = "1 day",
        retention: str = "30 days",
        log_level: str = "INFO",
        console_level: str = "WARNING",
    ):
        self.log_dir = log_dir
        self.rotation = rotation
        self.retention = retention
        self.level = log_level
        self.console_level = console_level

        self._install_sinks()

    @classmethod
    def from_config(cls, cfg) -> "Logging":
        """cfg: ibonarium.config.log_config.LogConfig"""
        return cls(
            log_dir=cfg.dir,
            rotation=cfg.rotation,
            retention=cfg.retention,
            log_level=cfg.level,
            console_level=cfg.console_level,
        )

    def _install_sinks(self) -> None:
        # 替换掉之前所有 sink（包括 import 时的默认配置）
        os.makedirs(self.log_dir, exist_ok=True)
        logger.remove()

        logger.add(
            os.path.join(self.log_dir, "{time:YYYY-MM-DD}.log"),
            level=self.level,
            format=FILE_FORMAT,
            rotation=self.rotation,
            retention=self.retention,
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )
        logger.add(sys.stderr, level=self.console_level, format=CONSOLE_FORMAT)

        if not Logging._announced:
            logger.info("----------- ibonarium logger ready -----------")
            Logging._announced = True

    # depth=1：记录调用方的位置，而不是这个 wrapper
    def debug(self, msg: str, *args, **kwargs):
        logger.opt(depth=1).debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        logger.opt(depth=1).info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        logger.opt(depth=1).warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        logger.opt(depth=1).error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        logger.opt(depth=1, exception=True).error(msg, *args, **kwargs)

    def catch(self, msg: str = "Exception occurred", log_time: bool = True) -> Callable:
        """
        装饰器：异常记录 traceback 后原样抛出；正常返回时记录耗时。
        """

        def decorator(func: Callable):
            @wraps(func)
            def wrapper(*args, **kwargs):
                started = perf_counter()
                try:
                    result = func(*args, **kwargs)
                except Exception:
                    logger.opt(exception=True).error(f"[ERROR] {func.__name__}: {msg}")
                    raise
                if log_time:
                    logger.info(f"[TIME] {func.__name__} took {perf_counter() - started:.4f}s")
                return result

            return wrapper

        return decorator


# 默认全局 logs（cli 启动时按 LogConfig 重新配置）
logs = Logging()
