"""
Exact Integer Matrix Backend
The linear algebra engine ModularMatrix delegates to. A backend works on
unreduced integers and knows nothing about moduli; any class implementing
IntegerMatrixBackend can be handed to a ModularMatrix.
"""

import logging
from abc import ABC, abstractmethod

import numpy as np

from .errors import DimensionMismatchError, InvalidArgumentError

logger = logging.getLogger(__name__)


class IntegerMatrixBackend(ABC):
    """Capability: dense matrices of exact (arbitrary precision) integers."""

    @abstractmethod
    def from_rows(self, values, rows, cols):
        """Build an external matrix from a row-major iterable of ints."""

    @abstractmethod
    def dimensions(self, external):
        """Return (rows, cols) of an external matrix."""

    @abstractmethod
    def entries(self, external):
        """Yield the entries of an external matrix as Python ints, row-major."""

    @abstractmethod
    def add(self, a, b):
        pass

    @abstractmethod
    def subtract(self, a, b):
        pass

    @abstractmethod
    def multiply(self, a, b):
        """Matrix product a·b."""

    @abstractmethod
    def hadamard(self, a, b):
        """Elementwise product a ∘ b."""

    @abstractmethod
    def scale(self, a, scalar):
        pass

    def describe(self):
        return {'backend': type(self).__name__}


class NumpyIntegerBackend(IntegerMatrixBackend):
    """
    2-D numpy arrays of dtype=object holding Python ints.
    Object dtype keeps every product and sum exact: int64 would overflow
    as soon as entries approach 2^32.
    """

    def from_rows(self, values, rows, cols):
        if rows < 0 or cols < 0:
            raise InvalidArgumentError(f"Negative dimensions: {rows}x{cols}")
        flat = np.empty(rows * cols, dtype=object)
        # Element-wise so numpy never infers a fixed-width dtype on the way in
        for k, v in enumerate(values):
            flat[k] = int(v)
        return flat.reshape(rows, cols)

    def dimensions(self, external):
        arr = np.asarray(external)
        if arr.ndim != 2:
            raise InvalidArgumentError(f"Expected a 2-D matrix, got {arr.ndim} dimensions")
        return arr.shape[0], arr.shape[1]

    def entries(self, external):
        arr = np.asarray(external)
        for v in arr.ravel():
            if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
                raise InvalidArgumentError(f"Non-integer matrix entry: {v!r}")
            yield int(v)

    def _check_same_shape(self, a, b):
        if a.shape != b.shape:
            raise DimensionMismatchError(f"Shape mismatch: {a.shape} vs {b.shape}")

    def _exact(self, a):
        # Integer arrays of fixed width are widened before any arithmetic
        return np.asarray(a).astype(object)

    def add(self, a, b):
        a, b = self._exact(a), self._exact(b)
        self._check_same_shape(a, b)
        return a + b

    def subtract(self, a, b):
        a, b = self._exact(a), self._exact(b)
        self._check_same_shape(a, b)
        return a - b

    def multiply(self, a, b):
        a, b = self._exact(a), self._exact(b)
        if a.shape[1] != b.shape[0]:
            raise DimensionMismatchError(
                f"Dimension mismatch: A is {a.shape[0]}x{a.shape[1]}, B has {b.shape[0]} rows")
        m, n = a.shape[0], b.shape[1]
        if a.shape[1] == 0:
            # Empty inner dimension: every entry is an empty sum
            return self.from_rows([0] * (m * n), m, n)
        return np.dot(a, b)

    def hadamard(self, a, b):
        a, b = self._exact(a), self._exact(b)
        self._check_same_shape(a, b)
        return a * b

    def scale(self, a, scalar):
        return self._exact(a) * int(scalar)

    def describe(self):
        return {
            'backend': 'numpy object-dtype',
            'numpy': np.__version__,
            'exact': True,
        }


_default_backend = None


def get_default_backend():
    """Shared NumpyIntegerBackend used when a matrix is built without one."""
    global _default_backend
    if _default_backend is None:
        _default_backend = NumpyIntegerBackend()
        logger.debug("Integer matrix backend: %s", _default_backend.describe())
    return _default_backend
