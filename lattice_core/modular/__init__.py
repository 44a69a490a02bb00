"""
Modular arithmetic for lattice schemes: residues, matrices, noise sampling.
"""

from .errors import (DimensionMismatchError, IndexOutOfRangeError,
                     InvalidArgumentError, MismatchedModulusError,
                     ModularArithmeticError, ModulusMismatchError)
from .modint import UINT64_MAX, ModularInteger, Representation
from .backend import IntegerMatrixBackend, NumpyIntegerBackend, get_default_backend
from .matrix import ModularMatrix, dot, identity, outer
from .sampling import (DEFAULT_SIGMA, DEFAULT_TAIL_FACTOR, NoiseSampler,
                       default_sampler, reseed_default_sampler,
                       sample_discretized_gaussian_error, uniform_residue)

__all__ = [
    "DimensionMismatchError",
    "IndexOutOfRangeError",
    "InvalidArgumentError",
    "MismatchedModulusError",
    "ModularArithmeticError",
    "ModulusMismatchError",
    "UINT64_MAX",
    "ModularInteger",
    "Representation",
    "IntegerMatrixBackend",
    "NumpyIntegerBackend",
    "get_default_backend",
    "ModularMatrix",
    "dot",
    "identity",
    "outer",
    "DEFAULT_SIGMA",
    "DEFAULT_TAIL_FACTOR",
    "NoiseSampler",
    "default_sampler",
    "reseed_default_sampler",
    "sample_discretized_gaussian_error",
    "uniform_residue",
]
