"""
Modular Matrix
Dense row-major matrix of ModularInteger entries sharing one modulus.
Arithmetic lifts both operands to the backend's exact integer form, lets the
backend do the work, then reduces the result back into [0, modulus).
"""

import logging

from .backend import get_default_backend
from .errors import (DimensionMismatchError, IndexOutOfRangeError,
                     InvalidArgumentError, ModulusMismatchError)
from .modint import ModularInteger

logger = logging.getLogger(__name__)


class ModularMatrix:
    def __init__(self, rows=0, cols=0, modulus="1", backend=None):
        if rows < 0 or cols < 0:
            raise InvalidArgumentError(f"Negative dimensions: {rows}x{cols}")
        zero = ModularInteger("0", modulus)
        self._rows = rows
        self._cols = cols
        self._modulus = zero.modulus
        self._backend = backend if backend is not None else get_default_backend()
        # Entries are immutable, so one zero instance can fill every slot
        self._data = [zero] * (rows * cols)  # access using i*cols + j

    # --- CONSTRUCTORS ---
    @classmethod
    def identity(cls, n, modulus, backend=None):
        out = cls(n, n, modulus, backend)
        one = ModularInteger.one(out._modulus)
        for i in range(n):
            out._data[i * n + i] = one
        return out

    @classmethod
    def from_rows(cls, rows, modulus, backend=None):
        """Build from a list of equally long rows of ints, numerals or ModularIntegers."""
        rows = [list(r) for r in rows]
        cols = len(rows[0]) if rows else 0
        for r in rows:
            if len(r) != cols:
                raise DimensionMismatchError(f"Ragged rows: expected {cols} columns, got {len(r)}")
        out = cls(len(rows), cols, modulus, backend)
        for i, r in enumerate(rows):
            for j, v in enumerate(r):
                out[i, j] = v
        return out

    @classmethod
    def from_external(cls, external, modulus, backend=None):
        """Lower an external integer matrix, reducing every entry modulo `modulus`."""
        backend = backend if backend is not None else get_default_backend()
        rows, cols = backend.dimensions(external)
        out = cls(rows, cols, modulus, backend)
        mod = out._modulus
        out._data = [ModularInteger._from_residue(v % mod, mod)
                     for v in backend.entries(external)]
        return out

    def copy(self):
        out = ModularMatrix.__new__(ModularMatrix)
        out._rows = self._rows
        out._cols = self._cols
        out._modulus = self._modulus
        out._backend = self._backend
        out._data = list(self._data)
        return out

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        # Entries are immutable, a fresh list is enough
        return self.copy()

    # --- DIMENSIONS ---
    @property
    def rows(self):
        return self._rows

    @property
    def cols(self):
        return self._cols

    @property
    def shape(self):
        return self._rows, self._cols

    @property
    def modulus(self):
        return str(self._modulus)

    @property
    def backend(self):
        return self._backend

    @property
    def is_vector(self):
        return self._rows == 1 or self._cols == 1

    # --- ELEMENT ACCESS ---
    def _offset(self, i, j):
        if not 0 <= i < self._rows:
            raise IndexOutOfRangeError(f"Matrix row index out of bounds: {i} (rows={self._rows})")
        if not 0 <= j < self._cols:
            raise IndexOutOfRangeError(f"Matrix column index out of bounds: {j} (cols={self._cols})")
        return i * self._cols + j

    def at(self, i, j):
        return self._data[self._offset(i, j)]

    def __getitem__(self, key):
        i, j = key
        return self.at(i, j)

    def __setitem__(self, key, value):
        i, j = key
        offset = self._offset(i, j)
        if isinstance(value, ModularInteger):
            if value.modulus != self._modulus:
                raise ModulusMismatchError(
                    f"Entry modulus {value.modulus} does not match matrix modulus {self._modulus}")
        else:
            value = ModularInteger(value, self._modulus)
        self._data[offset] = value

    def to_rows(self):
        return [[self._data[i * self._cols + j].value for j in range(self._cols)]
                for i in range(self._rows)]

    # --- BACKEND CONVERSIONS ---
    def to_external(self):
        """Unreduced integer copy in the backend's matrix type (no modulus attached)."""
        return self._backend.from_rows((e.value for e in self._data), self._rows, self._cols)

    def _lower(self, external):
        return ModularMatrix.from_external(external, self._modulus, self._backend)

    # --- CHECKS ---
    def _require_same_shape(self, other, op):
        if self.shape != other.shape:
            raise DimensionMismatchError(
                f"Cannot {op} {self._rows}x{self._cols} and {other._rows}x{other._cols} matrices")

    def _require_same_modulus(self, other):
        if self._modulus != other._modulus:
            raise ModulusMismatchError(f"Moduli do not match: {self._modulus} vs {other._modulus}")

    def _scalar(self, c):
        if isinstance(c, ModularInteger):
            if c.modulus != self._modulus:
                raise ModulusMismatchError(
                    f"Scalar modulus {c.modulus} does not match matrix modulus {self._modulus}")
            return c
        return ModularInteger(c, self._modulus)

    # --- ARITHMETIC ---
    def __add__(self, other):
        if not isinstance(other, ModularMatrix):
            return NotImplemented
        self._require_same_shape(other, "add")
        self._require_same_modulus(other)
        logger.debug("add %dx%d mod %d", self._rows, self._cols, self._modulus)
        return self._lower(self._backend.add(self.to_external(), other.to_external()))

    def __sub__(self, other):
        if not isinstance(other, ModularMatrix):
            return NotImplemented
        self._require_same_shape(other, "subtract")
        self._require_same_modulus(other)
        logger.debug("subtract %dx%d mod %d", self._rows, self._cols, self._modulus)
        return self._lower(self._backend.subtract(self.to_external(), other.to_external()))

    def __matmul__(self, other):
        if not isinstance(other, ModularMatrix):
            return NotImplemented
        if self._cols != other._rows:
            raise DimensionMismatchError(
                f"Dimension mismatch: A is {self._rows}x{self._cols}, B has {other._rows} rows")
        self._require_same_modulus(other)
        logger.debug("multiply %dx%d by %dx%d mod %d",
                     self._rows, self._cols, other._rows, other._cols, self._modulus)
        return self._lower(self._backend.multiply(self.to_external(), other.to_external()))

    def scalar_multiply(self, c):
        c = self._scalar(c)
        return self._lower(self._backend.scale(self.to_external(), c.value))

    def __mul__(self, other):
        if isinstance(other, ModularMatrix):
            # Ambiguous between matrix and elementwise product: use @ or hadamard()
            return NotImplemented
        if isinstance(other, (ModularInteger, int, str)):
            return self.scalar_multiply(other)
        return NotImplemented

    def __rmul__(self, other):
        return self.__mul__(other)

    def hadamard(self, other):
        self._require_same_shape(other, "multiply elementwise")
        self._require_same_modulus(other)
        return self._lower(self._backend.hadamard(self.to_external(), other.to_external()))

    def transpose(self):
        out = ModularMatrix(self._cols, self._rows, self._modulus, self._backend)
        for i in range(self._rows):
            for j in range(self._cols):
                out._data[j * self._rows + i] = self._data[i * self._cols + j]
        return out

    @property
    def T(self):
        return self.transpose()

    # --- VECTORS ---
    def _vector_length(self):
        if not self.is_vector:
            raise DimensionMismatchError(
                f"Expected a single row or column, got {self._rows}x{self._cols}")
        return len(self._data)

    def _as_column(self):
        return self._backend.from_rows((e.value for e in self._data), len(self._data), 1)

    def _as_row(self):
        return self._backend.from_rows((e.value for e in self._data), 1, len(self._data))

    def dot(self, other):
        """<u, v> = sum u_i·v_i mod q, for row or column vectors of equal length."""
        n = self._vector_length()
        if other._vector_length() != n:
            raise DimensionMismatchError(f"Vector length mismatch: {n} vs {len(other._data)}")
        self._require_same_modulus(other)
        product = self._backend.multiply(self._as_row(), other._as_column())
        (total,) = self._backend.entries(product)
        return ModularInteger._from_residue(total % self._modulus, self._modulus)

    def outer(self, other):
        """u ⊗ v: m-length u and n-length v give an m x n matrix."""
        self._vector_length()
        other._vector_length()
        self._require_same_modulus(other)
        return self._lower(self._backend.multiply(self._as_column(), other._as_row()))

    # --- COMPARISON ---
    def __eq__(self, other):
        if not isinstance(other, ModularMatrix):
            return NotImplemented
        return (self.shape == other.shape and self._modulus == other._modulus
                and self._data == other._data)

    __hash__ = None

    def __repr__(self):
        return f"ModularMatrix({self._rows}x{self._cols} mod {self._modulus}, {self.to_rows()})"


def identity(n, modulus, backend=None):
    return ModularMatrix.identity(n, modulus, backend)


def dot(u, v):
    return u.dot(v)


def outer(u, v):
    return u.outer(v)
