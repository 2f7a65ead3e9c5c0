#!filepath: ibonarium/config/persistence_config.py
from pydantic import BaseModel


class PersistenceConfig(BaseModel):
    path: str = "data/ibonarium_store.json"
    key: str = "ibonarium_snapshot"
