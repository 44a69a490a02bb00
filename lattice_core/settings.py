"""
Noise Settings
Validated, immutable parameters for building a NoiseSampler.
"""

import math
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from lattice_core.modular.sampling import DEFAULT_SIGMA, DEFAULT_TAIL_FACTOR, NoiseSampler


class NoiseSettings(BaseModel):
    """
    sigma: standard deviation of the discretized Gaussian error
    seed: fixed seed for reproducible runs (None: OS entropy)
    tail_factor: bounded errors are clipped to tail_factor·sigma
    """

    sigma: float = Field(DEFAULT_SIGMA, ge=0, description="Gaussian standard deviation")
    seed: Optional[int] = Field(None, ge=0, description="Generator seed")
    tail_factor: float = Field(DEFAULT_TAIL_FACTOR, gt=0, description="Clipping bound in sigmas")

    model_config = {"frozen": True}

    @field_validator("sigma", "tail_factor")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("must be finite")
        return v

    @property
    def bound(self) -> int:
        return int(self.tail_factor * self.sigma)

    def build_sampler(self) -> NoiseSampler:
        return NoiseSampler.from_settings(self)
