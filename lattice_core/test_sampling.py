"""
Tests for NoiseSampler: range, uniformity, Gaussian moments, seeding
"""

import threading

import numpy as np
import pytest

from lattice_core.modular import (InvalidArgumentError, ModularMatrix,
                                  NoiseSampler, default_sampler,
                                  reseed_default_sampler,
                                  sample_discretized_gaussian_error,
                                  uniform_residue)
from lattice_core.modular.sampling import round_half_away


class FixedNormal:
    """Generator stand-in returning a fixed continuous sample."""

    def __init__(self, value):
        self.value = value

    def normal(self, loc, scale, size=None):
        if size is None:
            return self.value
        return np.full(size, self.value)


@pytest.fixture
def sampler():
    return NoiseSampler(seed=1234)


# --- UNIFORM ---

def test_uniform_q1_always_zero(sampler):
    for _ in range(1000):
        assert sampler.uniform_residue(1) == 0


@pytest.mark.parametrize("q", [2, 3, 10, 100, 2 ** 40])
def test_uniform_in_range(sampler, q):
    for _ in range(1000):
        v = sampler.uniform_residue(q)
        assert 0 <= v < q


def test_uniform_statistical_uniformity(sampler):
    q, n = 10, 100000
    counts = np.bincount(sampler.uniform_residues(q, n), minlength=q)
    expected = n / q
    tol = expected * 0.1  # ±10%
    assert np.all(np.abs(counts - expected) < tol)


@pytest.mark.parametrize("q", [0, -5, "0"])
def test_uniform_rejects_empty_range(sampler, q):
    with pytest.raises(InvalidArgumentError):
        sampler.uniform_residue(q)


def test_uniform_accepts_decimal_string(sampler):
    assert 0 <= sampler.uniform_residue("17") < 17


def test_uniform_wide_bound(sampler):
    q = 2 ** 100 + 7
    values = [sampler.uniform_residue(q) for _ in range(500)]
    assert all(0 <= v < q for v in values)
    # Roughly half the draws land in the upper half of the range
    upper = sum(v >= q // 2 for v in values)
    assert 150 < upper < 350


def test_uniform_bound_at_native_limit(sampler):
    q = 2 ** 63
    assert all(0 <= v < q for v in sampler.uniform_residues(q, 100))


# --- GAUSSIAN ---

def test_sigma_zero_is_zero(sampler):
    for _ in range(1000):
        assert sampler.sample_discretized_gaussian_error(0) == 0
    assert sampler.discretized_gaussian_errors(0.0, 5) == [0] * 5


def test_gaussian_moments(sampler):
    sigma, n = 2.0, 100000
    samples = np.array(sampler.discretized_gaussian_errors(sigma, n))
    assert abs(samples.mean()) < 0.1
    # rounding adds about 1/12 to the variance of the continuous sample
    assert abs(samples.var() - sigma ** 2) < 0.3


def test_gaussian_single_samples_are_ints(sampler):
    values = [sampler.sample_discretized_gaussian_error(3.2) for _ in range(2000)]
    assert all(isinstance(v, int) for v in values)
    assert abs(np.mean(values)) < 0.5


@pytest.mark.parametrize("sigma", [-1.0, float("nan"), float("inf"), "3", None, True])
def test_invalid_sigma(sigma):
    with pytest.raises(InvalidArgumentError):
        NoiseSampler(seed=1, sigma=sigma)


def test_invalid_sigma_per_call(sampler):
    with pytest.raises(InvalidArgumentError):
        sampler.sample_discretized_gaussian_error(-0.5)


def test_ties_round_away_from_zero():
    assert round_half_away(np.array([0.5, -0.5, 1.5, 2.5, -2.5, 0.49])).tolist() == \
        [1.0, -1.0, 2.0, 3.0, -3.0, 0.0]
    assert round_half_away(0.49999999999999994) == 0
    assert round_half_away(-0.49999999999999994) == 0
    assert NoiseSampler(FixedNormal(0.49999999999999994)).sample_discretized_gaussian_error(1.0) == 0
    assert NoiseSampler(FixedNormal(2.5)).sample_discretized_gaussian_error(1.0) == 3
    assert NoiseSampler(FixedNormal(-2.5)).sample_discretized_gaussian_error(1.0) == -3
    assert NoiseSampler(FixedNormal(-0.4)).discretized_gaussian_errors(1.0, 2) == [0, 0]


def test_bounded_errors(sampler):
    errors = sampler.sample_bounded_errors(sigma=5.0, size=5000, bound=3)
    assert min(errors) >= -3 and max(errors) <= 3
    assert -3 in errors and 3 in errors


def test_bounded_errors_default_bound():
    sampler = NoiseSampler(FixedNormal(100.0), sigma=2.0, tail_factor=6)
    assert sampler.sample_bounded_errors(size=3) == [12, 12, 12]


# --- SEEDING / INJECTION ---

def test_seeded_samplers_reproduce():
    a, b = NoiseSampler(seed=99), NoiseSampler(seed=99)
    assert a.uniform_residues(1000, 50) == b.uniform_residues(1000, 50)
    assert a.discretized_gaussian_errors(3.2, 50) == b.discretized_gaussian_errors(3.2, 50)


def test_injected_generator_is_used():
    gen = np.random.default_rng(5)
    expected = np.random.default_rng(5).integers(0, 1000, size=10).tolist()
    assert NoiseSampler(gen).uniform_residues(1000, 10) == expected


def test_generator_and_seed_are_exclusive():
    with pytest.raises(InvalidArgumentError):
        NoiseSampler(np.random.default_rng(1), seed=1)


def test_default_sampler_is_shared():
    assert default_sampler() is default_sampler()


def test_reseed_default_sampler():
    reseed_default_sampler(2024)
    first = [uniform_residue(1000) for _ in range(20)]
    reseed_default_sampler(2024)
    second = [uniform_residue(1000) for _ in range(20)]
    assert first == second
    assert sample_discretized_gaussian_error(0) == 0
    assert uniform_residue(1) == 0
    reseed_default_sampler()


def test_threads_share_sampler(sampler):
    results = []

    def worker():
        values = [sampler.uniform_residue(50) for _ in range(500)]
        results.append(values)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(results) == 4
    assert all(0 <= v < 50 for values in results for v in values)


# --- MATRICES ---

def test_uniform_matrix(sampler):
    m = sampler.uniform_matrix(3, 4, "97")
    assert isinstance(m, ModularMatrix)
    assert m.shape == (3, 4)
    assert m.modulus == "97"
    assert all(0 <= v < 97 for row in m.to_rows() for v in row)


def test_error_matrix_is_small_mod_q(sampler):
    q = 7681
    e = sampler.error_matrix(4, 4, str(q), sigma=1.0)
    for row in e.to_rows():
        for v in row:
            centered = v - q if v > q // 2 else v
            assert abs(centered) <= 10


def test_lwe_sample_shape(sampler):
    """b = A·s + e over Z_q"""
    q = "3329"
    a = sampler.uniform_matrix(5, 3, q)
    s = sampler.uniform_matrix(3, 1, q)
    e = sampler.error_matrix(5, 1, q)
    b = a @ s + e
    assert b.shape == (5, 1)
    assert b - e == a @ s
