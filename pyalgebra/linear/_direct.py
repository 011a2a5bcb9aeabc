"""
Direct solvers for A x = b.

Each routine takes a square (or, for least squares and ridge, tall)
coefficient array and a right-hand side of shape (n, k), and returns the
solution with shape (n, k). Cramer and Bareiss work in exact Fraction
arithmetic when the inputs are integer or rational.
"""

from fractions import Fraction
from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular

from pyalgebra.core.exceptions import SingularMatrixError
from pyalgebra.core.tolerances import SINGULAR_TOL
from pyalgebra.decomposition import _lu, _qr
from pyalgebra.matrix import _elimination


def _singular(method: str, column: int | None = None, n: int | None = None) -> SingularMatrixError:
    where = f" (zero pivot in column {column})" if column is not None else ""
    return SingularMatrixError(
        f"{method}: coefficient matrix is singular{where}",
        matrix_name='A',
        rank=column,
        expected_rank=n,
    )


def _back_substitute(U: NDArray[Any], y: NDArray[Any]) -> NDArray[Any]:
    """Back substitution that also works on object (Fraction) arrays."""
    n = U.shape[0]
    x = np.zeros_like(y)
    for i in range(n - 1, -1, -1):
        x[i] = (y[i] - U[i, i + 1:] @ x[i + 1:]) / U[i, i]
    return x


def cramer(a: NDArray[Any], b: NDArray[Any]) -> NDArray[Any]:
    """
    Cramer's rule: x_i = det(A_i) / det(A).
    
    One determinant per unknown and per right-hand side, so the cost grows
    as O(k n^4). Only sensible for small systems.
    """
    exact = _elimination.is_exact(a) and _elimination.is_exact(b)
    det = _elimination.bareiss_determinant if exact else _elimination.pivoted_determinant
    d = det(a)
    if d == 0 or (not exact and abs(d) <= SINGULAR_TOL):
        raise SingularMatrixError(
            "cramer: determinant is zero", matrix_name='A', expected_rank=a.shape[0],
        )
    n, k = b.shape
    x = np.empty((n, k), dtype=object if exact else np.result_type(a, b, np.float64))
    for j in range(k):
        for i in range(n):
            ai = np.array(a, copy=True, dtype=object if exact else x.dtype)
            ai[:, i] = b[:, j]
            x[i, j] = Fraction(det(ai)) / Fraction(d) if exact else det(ai) / d
    return x


def inverse(a: NDArray[Any], b: NDArray[Any]) -> NDArray[Any]:
    """x = A^-1 b with the inverse from Gauss-Jordan elimination."""
    return _elimination.gauss_jordan_inverse(a, 'A') @ b


def gauss_elimination(a: NDArray[Any], b: NDArray[Any]) -> NDArray[Any]:
    """Forward elimination with partial pivoting, then back substitution."""
    n = a.shape[0]
    U = np.array(a, dtype=np.result_type(a, b, np.float64))
    y = np.array(b, dtype=U.dtype)
    floor = SINGULAR_TOL * max(float(np.max(np.abs(U))) if U.size else 0.0, 1.0)
    
    for k in range(n):
        p = k + int(np.argmax(np.abs(U[k:, k])))
        if abs(U[p, k]) <= floor:
            raise _singular('gauss_elimination', k, n)
        if p != k:
            U[[k, p]] = U[[p, k]]
            y[[k, p]] = y[[p, k]]
        factors = U[k + 1:, k] / U[k, k]
        U[k + 1:, k:] -= np.outer(factors, U[k, k:])
        y[k + 1:] -= np.outer(factors, y[k])
    
    return solve_triangular(U, y, lower=False)


def gauss_jordan(a: NDArray[Any], b: NDArray[Any]) -> NDArray[Any]:
    """Reduce [A | b] until A becomes the identity; the right block is x."""
    n = a.shape[0]
    aug = np.hstack([a, b]).astype(np.result_type(a, b, np.float64))
    floor = SINGULAR_TOL * max(float(np.max(np.abs(a))) if a.size else 0.0, 1.0)
    
    for k in range(n):
        p = k + int(np.argmax(np.abs(aug[k:, k])))
        if abs(aug[p, k]) <= floor:
            raise _singular('gauss_jordan', k, n)
        if p != k:
            aug[[k, p]] = aug[[p, k]]
        aug[k] /= aug[k, k]
        for i in range(n):
            if i != k:
                aug[i] -= aug[i, k] * aug[k]
    
    return aug[:, n:]


def bareiss(a: NDArray[Any], b: NDArray[Any]) -> NDArray[Any]:
    """
    Fraction-free elimination on the augmented matrix [A | b].
    
    Every division in the elimination is exact, so integer systems stay
    integer until the final back substitution.
    """
    n = a.shape[0]
    exact = _elimination.is_exact(a) and _elimination.is_exact(b)
    aug = np.hstack([a, b])
    aug = _elimination.to_fraction_array(aug) if exact else aug.astype(np.float64)
    floor = 0.0 if exact else SINGULAR_TOL * max(float(np.max(np.abs(a))) if a.size else 0.0, 1.0)
    prev = 1
    
    for k in range(n):
        if abs(aug[k, k]) <= floor:
            swap = next((i for i in range(k + 1, n) if abs(aug[i, k]) > floor), None)
            if swap is None:
                raise _singular('bareiss', k, n)
            aug[[k, swap]] = aug[[swap, k]]
        for i in range(k + 1, n):
            for j in range(k + 1, aug.shape[1]):
                aug[i, j] = (aug[k, k] * aug[i, j] - aug[i, k] * aug[k, j]) / prev
            aug[i, k] = 0
        prev = aug[k, k]
    
    return _back_substitute(aug[:, :n], aug[:, n:])


def least_squares(a: NDArray[Any], b: NDArray[Any]) -> tuple[NDArray[Any], bool]:
    """
    Normal equations A^T A x = A^T b solved by Gauss elimination.
    
    Returns:
        (x, used_svd) where used_svd is True when A^T A was singular and the
        minimum-norm pseudo-inverse solution was returned instead
    """
    ata = a.T @ a
    atb = a.T @ b
    try:
        return gauss_elimination(ata, atb), False
    except SingularMatrixError:
        return np.linalg.pinv(a) @ b, True


def gram_schmidt(a: NDArray[Any], b: NDArray[Any]) -> NDArray[Any]:
    """Orthogonalize A into Q, form R = Q^T A, then solve R x = Q^T b."""
    Q, R = _qr.gram_schmidt(a)
    return solve_triangular(R, Q.T @ b, lower=False)


def lu(a: NDArray[Any], b: NDArray[Any]) -> NDArray[Any]:
    """Partial-pivot LU, then forward and back substitution."""
    L, U, P, _ = _lu.partial_pivot(a)
    y = solve_triangular(L, P @ b, lower=True, unit_diagonal=True)
    return solve_triangular(U, y, lower=False)


def ridge(a: NDArray[Any], b: NDArray[Any], alpha: float) -> NDArray[Any]:
    """Regularized least squares (A^T A + alpha I)^-1 A^T b."""
    n = a.shape[1]
    return gauss_elimination(a.T @ a + alpha * np.eye(n), a.T @ b)
