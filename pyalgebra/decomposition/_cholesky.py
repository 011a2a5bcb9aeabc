"""
Cholesky factorization A = L L^T (Cholesky-Banachiewicz, row by row).
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import NotPositiveDefiniteError, ValidationError


def cholesky(a: NDArray[Any], symmetry_tol: float = 1e-10) -> NDArray[Any]:
    """
    Lower-triangular Cholesky factor.
    
    Raises:
        ValidationError: If a is not symmetric
        NotPositiveDefiniteError: If a pivot is not strictly positive
    """
    n = a.shape[0]
    scale = max(1.0, float(np.max(np.abs(a)))) if a.size else 1.0
    if not np.allclose(a, a.T, rtol=0.0, atol=symmetry_tol * scale):
        raise ValidationError("Cholesky: matrix is not symmetric")
    
    L = np.zeros((n, n), dtype=np.float64)
    for i in range(n):
        for j in range(i + 1):
            s = float(np.dot(L[i, :j], L[j, :j]))
            if i == j:
                pivot = a[i, i] - s
                if pivot <= 0.0:
                    raise NotPositiveDefiniteError(
                        f"Cholesky: non-positive pivot {pivot:.3g} at row {i}",
                        matrix_name='A',
                        min_eigenvalue=float(np.min(np.linalg.eigvalsh(a))),
                    )
                L[i, i] = np.sqrt(pivot)
            else:
                L[i, j] = (a[i, j] - s) / L[j, j]
    return L
