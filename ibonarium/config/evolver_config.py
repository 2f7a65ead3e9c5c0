#!filepath: ibonarium/config/evolver_config.py
from pydantic import BaseModel, Field

from ibonarium.engines.coupling import CouplingParams


class EvolverConfig(BaseModel):
    seed: int | None = None
    flare_probability: float = Field(default=0.01, ge=0, le=1)
    anxiety_alert_probability: float = Field(default=0.02, ge=0, le=1)
    anxiety_alert_threshold: float = 0.6

    def to_params(self) -> CouplingParams:
        return CouplingParams(
            flare_probability=self.flare_probability,
            anxiety_alert_probability=self.anxiety_alert_probability,
            anxiety_alert_threshold=self.anxiety_alert_threshold,
        )
