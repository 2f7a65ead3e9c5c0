#!filepath: ibonarium/config/scheduler_config.py
from pydantic import BaseModel, Field


class SchedulerConfig(BaseModel):
    """Cadences in seconds."""

    sync_interval: float = Field(default=30.0, gt=0)
    tick_interval: float = Field(default=0.1, gt=0)
    clock_interval: float = Field(default=1.0, gt=0)
    # stop() 等待每个线程退出的上限
    join_timeout: float = Field(default=5.0, ge=0)
