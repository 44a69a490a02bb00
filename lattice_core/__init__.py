"""
lattice_core - algebraic substrate for lattice-based cryptography
"""

__version__ = "1.0.0"
