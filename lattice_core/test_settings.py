"""Tests for NoiseSettings validation and sampler construction."""

import pytest
from pydantic import ValidationError

from lattice_core.modular import DEFAULT_SIGMA, NoiseSampler
from lattice_core.settings import NoiseSettings


def test_defaults():
    settings = NoiseSettings()
    assert settings.sigma == DEFAULT_SIGMA
    assert settings.seed is None
    assert settings.bound == int(6 * DEFAULT_SIGMA)


def test_frozen():
    settings = NoiseSettings(sigma=2.0)
    with pytest.raises(ValidationError):
        settings.sigma = 3.0


@pytest.mark.parametrize("kwargs", [
    {"sigma": -1.0},
    {"sigma": float("inf")},
    {"seed": -3},
    {"tail_factor": 0},
    {"tail_factor": float("nan")},
])
def test_invalid_settings(kwargs):
    with pytest.raises(ValidationError):
        NoiseSettings(**kwargs)


def test_build_sampler():
    sampler = NoiseSettings(sigma=1.5, seed=7, tail_factor=4).build_sampler()
    assert isinstance(sampler, NoiseSampler)
    assert sampler.sigma == 1.5
    assert sampler.tail_factor == 4
    errors = sampler.sample_bounded_errors(size=2000)
    assert max(abs(e) for e in errors) <= 6


def test_seeded_settings_reproduce():
    settings = NoiseSettings(seed=11)
    a = NoiseSampler.from_settings(settings)
    b = NoiseSampler.from_settings(settings)
    assert a.discretized_gaussian_errors(size=20) == b.discretized_gaussian_errors(size=20)
