#!filepath: ibonarium/config/app_config.py
import os

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .log_config import LogConfig
from .scheduler_config import SchedulerConfig
from .evolver_config import EvolverConfig
from .provider_config import ProviderConfig
from .sync_config import SyncConfig
from .persistence_config import PersistenceConfig
from ibonarium.utils.errors import UserInputError


def package_root() -> str:
    """
    返回包目录（基于当前文件位置推导）:
    ibonarium/config/app_config.py → ibonarium/config → ibonarium
    """
    return os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


def default_config_path() -> str:
    return os.path.join(package_root(), "config", "base.yml")


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    evolver: EvolverConfig = Field(default_factory=EvolverConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)

    @classmethod
    def default(cls) -> "AppConfig":
        return cls()

    @classmethod
    def load(cls, path: str | None = None, env_file: str | None = None) -> "AppConfig":
        """
        加载 YAML 配置 + .env
        - 默认使用 ibonarium/config/base.yml
        - .env 默认从当前工作目录查找
        - IBONARIUM_SEED / IBONARIUM_SNAPSHOT_PATH 覆盖 YAML

        文件缺失、YAML 语法错误、字段校验失败、env 覆盖值非法
        统一抛 UserInputError（CLI 以 exit code 2 退出，不打 traceback）
        """
        load_dotenv(env_file or os.path.join(os.getcwd(), ".env"))

        if path is None:
            path = default_config_path()

        if not os.path.exists(path):
            raise UserInputError(f"config file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise UserInputError(f"config file {path} is not valid YAML: {e}") from e

        if not isinstance(raw, dict):
            raise UserInputError(f"config file {path} must hold a mapping at top level")

        seed = os.getenv("IBONARIUM_SEED")
        if seed:
            try:
                seed_value = int(seed)
            except ValueError as e:
                raise UserInputError(f"IBONARIUM_SEED must be an integer (got {seed!r})") from e
            raw["evolver"] = {**(raw.get("evolver") or {}), "seed": seed_value}

        snapshot_path = os.getenv("IBONARIUM_SNAPSHOT_PATH")
        if snapshot_path:
            raw["persistence"] = {**(raw.get("persistence") or {}), "path": snapshot_path}

        try:
            return cls(**raw)
        except ValidationError as e:
            raise UserInputError(f"invalid config in {path}:\n{e}") from e
