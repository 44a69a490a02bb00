"""
Noise Sampling
Uniform residues in [0, q) and discretized Gaussian errors, the random terms
a lattice scheme (LWE samples A·s + e) is built from.

Concurrency: each NoiseSampler owns one numpy Generator and serializes every
draw behind a lock, so a sampler may be shared between threads. The process
default sampler is built lazily, exactly once, from OS entropy.
"""

import logging
import math
import threading

import numpy as np

from .errors import InvalidArgumentError
from .matrix import ModularMatrix
from .modint import parse_decimal

logger = logging.getLogger(__name__)

DEFAULT_SIGMA = 3.2
DEFAULT_TAIL_FACTOR = 6

# Bounds below this are drawn natively by Generator.integers (int64)
_NATIVE_BOUND = 1 << 63


def round_half_away(x):
    """Nearest integer, ties away from zero (like C's llround)."""
    # np.floor(abs(x) + 0.5) misrounds 0.49999999999999994 up to 1
    x = np.asarray(x, dtype=float)
    trunc = np.trunc(x)
    return np.where(np.abs(x - trunc) == 0.5, trunc + np.sign(x), np.rint(x))


def _check_sigma(sigma):
    if isinstance(sigma, bool) or not isinstance(sigma, (int, float, np.integer, np.floating)):
        raise InvalidArgumentError(f"Sigma must be a number, got {sigma!r}")
    if not math.isfinite(sigma) or sigma < 0:
        raise InvalidArgumentError(f"Sigma must be finite and non-negative, got {sigma}")
    return float(sigma)


class NoiseSampler:
    """
    Sampler around an explicitly passed numpy Generator.
    Without a generator one is created from `seed` (None: OS entropy).
    """

    def __init__(self, generator=None, seed=None, sigma=DEFAULT_SIGMA,
                 tail_factor=DEFAULT_TAIL_FACTOR):
        if generator is not None and seed is not None:
            raise InvalidArgumentError("Pass either a generator or a seed, not both")
        if generator is None:
            generator = np.random.default_rng(seed)
        self._generator = generator
        self._lock = threading.Lock()
        self.sigma = _check_sigma(sigma)
        self.tail_factor = tail_factor
        logger.debug("NoiseSampler ready: sigma=%s, tail=%s·sigma, seed=%s",
                     self.sigma, tail_factor, "entropy" if seed is None else seed)

    @classmethod
    def from_settings(cls, settings):
        return cls(seed=settings.seed, sigma=settings.sigma, tail_factor=settings.tail_factor)

    @property
    def generator(self):
        return self._generator

    # --- UNIFORM ---
    def _check_bound(self, q):
        q = parse_decimal(q, "bound")
        if q < 1:
            raise InvalidArgumentError(f"Uniform bound must be >= 1, got {q}")
        return q

    def _wide_residue(self, q):
        # Rejection sampling on q.bit_length() random bits: accepts with p > 1/2
        bits = q.bit_length()
        nbytes = (bits + 7) // 8
        excess = nbytes * 8 - bits
        while True:
            candidate = int.from_bytes(self._generator.bytes(nbytes), "big") >> excess
            if candidate < q:
                return candidate

    def uniform_residue(self, q):
        """Integer drawn uniformly from [0, q)."""
        q = self._check_bound(q)
        with self._lock:
            if q < _NATIVE_BOUND:
                return int(self._generator.integers(0, q))
            return self._wide_residue(q)

    def uniform_residues(self, q, size):
        q = self._check_bound(q)
        with self._lock:
            if q < _NATIVE_BOUND:
                return [int(v) for v in self._generator.integers(0, q, size=size)]
            return [self._wide_residue(q) for _ in range(size)]

    # --- GAUSSIAN ---
    def sample_discretized_gaussian_error(self, sigma=None):
        """round(N(0, sigma^2)), ties away from zero. sigma == 0 always gives 0."""
        sigma = self.sigma if sigma is None else _check_sigma(sigma)
        if sigma == 0:
            return 0
        with self._lock:
            sample = self._generator.normal(0.0, sigma)
        return int(round_half_away(sample))

    def discretized_gaussian_errors(self, sigma=None, size=1):
        sigma = self.sigma if sigma is None else _check_sigma(sigma)
        if sigma == 0:
            return [0] * size
        with self._lock:
            samples = self._generator.normal(0.0, sigma, size)
        return [int(v) for v in round_half_away(samples)]

    def sample_bounded_errors(self, sigma=None, size=1, bound=None):
        """Gaussian errors clipped to [-bound, bound] (default bound: tail_factor·sigma)."""
        sigma = self.sigma if sigma is None else _check_sigma(sigma)
        if bound is None:
            bound = int(self.tail_factor * sigma)
        if bound < 0:
            raise InvalidArgumentError(f"Bound must be non-negative, got {bound}")
        errors = self.discretized_gaussian_errors(sigma, size)
        return [int(v) for v in np.clip(errors, -bound, bound)]

    # --- MATRICES ---
    def uniform_matrix(self, rows, cols, modulus, backend=None):
        """rows x cols matrix with entries uniform in Z_q (the public A of an LWE sample)."""
        m = ModularMatrix(rows, cols, modulus, backend)
        values = self.uniform_residues(m.modulus, rows * cols)
        return ModularMatrix.from_external(m.backend.from_rows(values, rows, cols),
                                           m.modulus, m.backend)

    def error_matrix(self, rows, cols, modulus, sigma=None, backend=None):
        """rows x cols matrix of discretized Gaussian errors reduced mod q."""
        m = ModularMatrix(rows, cols, modulus, backend)
        values = self.discretized_gaussian_errors(sigma, rows * cols)
        return ModularMatrix.from_external(m.backend.from_rows(values, rows, cols),
                                           m.modulus, m.backend)


_default_sampler = None
_default_lock = threading.Lock()


def default_sampler():
    """Process wide sampler, seeded from OS entropy on first use."""
    global _default_sampler
    with _default_lock:
        if _default_sampler is None:
            _default_sampler = NoiseSampler()
        return _default_sampler


def reseed_default_sampler(seed=None):
    """Replace the process wide sampler. seed=None draws fresh OS entropy."""
    global _default_sampler
    with _default_lock:
        _default_sampler = NoiseSampler(seed=seed)
        return _default_sampler


def uniform_residue(q):
    return default_sampler().uniform_residue(q)


def sample_discretized_gaussian_error(sigma=None):
    return default_sampler().sample_discretized_gaussian_error(sigma)
