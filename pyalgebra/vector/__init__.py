"""
One-dimensional vectors.

Public API:
    Vector: Immutable vector with dot, cross, magnitude, normalize and norms
"""

from pyalgebra.vector.vector import Vector, as_vector

__all__ = ["Vector", "as_vector"]
