"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pyalgebra.matrix import Matrix


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def spd_matrix(rng):
    """Well-conditioned symmetric positive definite 5x5 matrix."""
    a = rng.standard_normal((5, 5))
    return Matrix(a @ a.T + 5 * np.eye(5))


@pytest.fixture
def diagonally_dominant_system():
    """Strictly diagonally dominant system, so Jacobi and Gauss-Seidel converge."""
    A = Matrix([
        [10.0, -1.0, 2.0, 0.0],
        [-1.0, 11.0, -1.0, 3.0],
        [2.0, -1.0, 10.0, -1.0],
        [0.0, 3.0, -1.0, 8.0],
    ])
    b = [6.0, 25.0, -11.0, 15.0]
    return A, b
