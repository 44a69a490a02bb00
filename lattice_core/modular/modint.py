"""
Modular Integer
An integer held modulo a positive modulus. Moduli that fit an unsigned 64-bit
word keep their residue as a numpy.uint64 (narrow), larger moduli keep it as
an arbitrary precision Python int (wide).
"""

import re
from enum import Enum

import numpy as np

from .errors import InvalidArgumentError, MismatchedModulusError

UINT64_MAX = (1 << 64) - 1

_DECIMAL = re.compile(r"-?[0-9]+")


class Representation(str, Enum):
    NARROW = "narrow"
    WIDE = "wide"


def representation_for(modulus):
    """Width tag for a positive modulus"""
    if modulus <= UINT64_MAX:
        return Representation.NARROW
    return Representation.WIDE


def parse_decimal(text, what="value"):
    """
    Parse a base-10 numeral with an optional leading '-'.
    Python ints (and numpy integers) are rendered to decimal first.
    """
    if isinstance(text, bool):
        raise InvalidArgumentError(f"Invalid {what}: {text!r}")
    if isinstance(text, (int, np.integer)):
        text = str(int(text))
    if not isinstance(text, str) or not _DECIMAL.fullmatch(text):
        raise InvalidArgumentError(f"Invalid {what} string: {text!r}")
    return int(text, 10)


class ModularInteger:
    """Residue in [0, modulus). Immutable: every operation returns a new instance."""

    __slots__ = ('_modulus', '_residue', '_representation')

    def __init__(self, value="0", modulus="1"):
        mod = parse_decimal(modulus, "modulus")
        val = parse_decimal(value, "value")
        if mod == 0:
            raise InvalidArgumentError("Modulus cannot be zero")
        if mod < 0:
            raise InvalidArgumentError(f"Modulus must be positive, got {mod}")
        self._set(val % mod, mod)

    def _set(self, residue, mod):
        self._modulus = mod
        self._representation = representation_for(mod)
        if self._representation is Representation.NARROW:
            self._residue = np.uint64(residue)
        else:
            self._residue = residue

    @classmethod
    def _from_residue(cls, residue, mod):
        # residue must already be reduced into [0, mod)
        out = cls.__new__(cls)
        out._set(residue, mod)
        return out

    @classmethod
    def zero(cls, modulus):
        return cls("0", modulus)

    @classmethod
    def one(cls, modulus):
        return cls("1", modulus)

    # --- ATTRIBUTES ---
    @property
    def value(self):
        return int(self._residue)

    @property
    def modulus(self):
        return self._modulus

    @property
    def representation(self):
        return self._representation

    @property
    def is_wide(self):
        return self._representation is Representation.WIDE

    # --- ARITHMETIC ---
    def _coerce(self, other):
        if isinstance(other, ModularInteger):
            if other._representation is not self._representation:
                raise MismatchedModulusError(
                    f"Modulus sizes do not match: {self._representation.value} vs "
                    f"{other._representation.value}")
            if other._modulus != self._modulus:
                raise MismatchedModulusError(
                    f"Moduli do not match: {self._modulus} vs {other._modulus}")
            return other
        if isinstance(other, (int, np.integer)) and not isinstance(other, bool):
            return ModularInteger(other, self._modulus)
        return None

    def _operands(self, other):
        # Widen uint64 residues to Python ints so no intermediate ever wraps
        return int(self._residue), int(other._residue)

    def __add__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        a, b = self._operands(other)
        return ModularInteger._from_residue((a + b) % self._modulus, self._modulus)

    def __sub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        a, b = self._operands(other)
        if self._representation is Representation.NARROW:
            diff = (a + self._modulus - b) % self._modulus
        else:
            diff = (a - b) % self._modulus
        return ModularInteger._from_residue(diff, self._modulus)

    def __mul__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        a, b = self._operands(other)
        return ModularInteger._from_residue((a * b) % self._modulus, self._modulus)

    def __radd__(self, other):
        if isinstance(other, (int, np.integer)) and not isinstance(other, bool):
            return self + other
        return NotImplemented

    def __rsub__(self, other):
        if isinstance(other, (int, np.integer)) and not isinstance(other, bool):
            return ModularInteger(other, self._modulus) - self
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, (int, np.integer)) and not isinstance(other, bool):
            return self * other
        return NotImplemented

    def __neg__(self):
        return ModularInteger._from_residue(
            (self._modulus - int(self._residue)) % self._modulus, self._modulus)

    # --- CONVERSIONS ---
    def to_decimal_string(self):
        return str(int(self._residue))

    def __str__(self):
        return self.to_decimal_string()

    def __int__(self):
        return int(self._residue)

    def __repr__(self):
        return f"ModularInteger({self.to_decimal_string()} mod {self._modulus})"

    def __eq__(self, other):
        if isinstance(other, ModularInteger):
            return self._modulus == other._modulus and int(self._residue) == int(other._residue)
        # No int equality: hash((value, modulus)) could not agree with hash(int)
        return NotImplemented

    def __hash__(self):
        return hash((int(self._residue), self._modulus))

    def __bool__(self):
        return int(self._residue) != 0
