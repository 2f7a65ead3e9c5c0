#!filepath: ibonarium/config/sync_config.py
from pydantic import BaseModel


class SyncConfig(BaseModel):
    enable_geo: bool = True
    enable_social: bool = True
    # 所有 feed 成功后，把 solarFlux 对齐到模拟的太阳周期
    align_cosmos: bool = True
