"""
Error Types
Exceptions raised by modular integers, modular matrices and the noise sampler.
"""


class ModularArithmeticError(Exception):
    """Base class for every error raised by lattice_core.modular"""


class InvalidArgumentError(ModularArithmeticError, ValueError):
    """Malformed numeral string, zero or negative modulus, bad sampler bound"""


class MismatchedModulusError(ModularArithmeticError, ValueError):
    """Two modular integers cannot be combined (different width or modulus)"""


class DimensionMismatchError(ModularArithmeticError, ValueError):
    pass


class ModulusMismatchError(ModularArithmeticError, ValueError):
    """Matrix operands carry different moduli"""


class IndexOutOfRangeError(ModularArithmeticError, IndexError):
    pass
