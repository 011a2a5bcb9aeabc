"""
LU factorization variants.

Each routine takes a square float (or complex) array and returns
(L, U, P, Q) with P @ A @ Q == L @ U. P and Q are None for variants
that do not permute; Q is only produced by complete pivoting.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import NumericalError, SingularMatrixError
from pyalgebra.core.tolerances import SINGULAR_TOL


LUFactors = tuple[NDArray[Any], NDArray[Any], NDArray[Any] | None, NDArray[Any] | None]


def _singular(column: int, n: int) -> SingularMatrixError:
    return SingularMatrixError(
        f"LU: zero pivot in column {column}, matrix is singular",
        matrix_name='A',
        rank=column,
        expected_rank=n,
    )


def _unpivoted_breakdown(a: NDArray[Any], column: int, variant: str) -> NumericalError:
    """Zero pivot without row exchanges: singular only if A is rank deficient."""
    n = a.shape[0]
    rank = int(np.linalg.matrix_rank(a))
    if rank < n:
        return SingularMatrixError(
            f"LU: zero pivot in column {column}, matrix is singular (rank {rank} < {n})",
            matrix_name='A',
            rank=rank,
            expected_rank=n,
        )
    return NumericalError(
        f"LU ({variant}): zero pivot in column {column} without pivoting; "
        f"use 'partial_pivot'"
    )


def _pivot_floor(a: NDArray[Any]) -> float:
    scale = float(np.max(np.abs(a))) if a.size else 0.0
    return SINGULAR_TOL * max(scale, 1.0)


def doolittle(a: NDArray[Any]) -> LUFactors:
    """Unit lower-triangular L, no pivoting."""
    n = a.shape[0]
    floor = _pivot_floor(a)
    L = np.eye(n, dtype=a.dtype)
    U = np.zeros_like(a)
    for k in range(n):
        U[k, k:] = a[k, k:] - L[k, :k] @ U[:k, k:]
        if abs(U[k, k]) <= floor:
            raise _unpivoted_breakdown(a, k, 'doolittle')
        L[k + 1:, k] = (a[k + 1:, k] - L[k + 1:, :k] @ U[:k, k]) / U[k, k]
    return L, U, None, None


def crout(a: NDArray[Any]) -> LUFactors:
    """Unit upper-triangular U, no pivoting."""
    n = a.shape[0]
    floor = _pivot_floor(a)
    L = np.zeros_like(a)
    U = np.eye(n, dtype=a.dtype)
    for j in range(n):
        L[j:, j] = a[j:, j] - L[j:, :j] @ U[:j, j]
        if abs(L[j, j]) <= floor:
            raise _unpivoted_breakdown(a, j, 'crout')
        U[j, j + 1:] = (a[j, j + 1:] - L[j, :j] @ U[:j, j + 1:]) / L[j, j]
    return L, U, None, None


def partial_pivot(a: NDArray[Any]) -> LUFactors:
    """
    Doolittle with row pivoting.
    
    At step k the row with the largest |a_ik|, i >= k, is swapped into
    place; on a tie the first such row wins. The multipliers already
    stored in L travel with their rows.
    """
    n = a.shape[0]
    floor = _pivot_floor(a)
    A = a.copy()
    L = np.eye(n, dtype=a.dtype)
    perm = np.arange(n)
    for k in range(n):
        p = k + int(np.argmax(np.abs(A[k:, k])))
        if abs(A[p, k]) <= floor:
            raise _singular(k, n)
        if p != k:
            A[[k, p]] = A[[p, k]]
            L[[k, p], :k] = L[[p, k], :k]
            perm[[k, p]] = perm[[p, k]]
        for i in range(k + 1, n):
            factor = A[i, k] / A[k, k]
            L[i, k] = factor
            A[i, k:] -= factor * A[k, k:]
    U = np.triu(A)
    P = np.eye(n, dtype=np.float64)[perm]
    return L, U, P, None


def gauss(a: NDArray[Any]) -> LUFactors:
    """
    Gaussian elimination with row pivoting, multipliers kept in place.
    
    Produces the same factors as partial_pivot; the multipliers are
    written below the diagonal of the working array and split out at
    the end.
    """
    n = a.shape[0]
    floor = _pivot_floor(a)
    A = a.copy()
    perm = np.arange(n)
    for k in range(n):
        p = k + int(np.argmax(np.abs(A[k:, k])))
        if abs(A[p, k]) <= floor:
            raise _singular(k, n)
        if p != k:
            A[[k, p]] = A[[p, k]]
            perm[[k, p]] = perm[[p, k]]
        A[k + 1:, k] /= A[k, k]
        A[k + 1:, k + 1:] -= np.outer(A[k + 1:, k], A[k, k + 1:])
    L = np.tril(A, -1) + np.eye(n, dtype=a.dtype)
    U = np.triu(A)
    P = np.eye(n, dtype=np.float64)[perm]
    return L, U, P, None


def complete_pivot(a: NDArray[Any]) -> LUFactors:
    """
    Doolittle with row and column pivoting.
    
    The largest |a_ij| of the trailing block is moved to (k, k); row
    swaps are recorded in P, column swaps in Q, so P @ A @ Q == L @ U.
    """
    n = a.shape[0]
    floor = _pivot_floor(a)
    A = a.copy()
    L = np.eye(n, dtype=a.dtype)
    row_perm = np.arange(n)
    col_perm = np.arange(n)
    for k in range(n):
        block = np.abs(A[k:, k:])
        flat = int(np.argmax(block))
        p, q = k + flat // block.shape[1], k + flat % block.shape[1]
        if abs(A[p, q]) <= floor:
            raise _singular(k, n)
        if p != k:
            A[[k, p]] = A[[p, k]]
            L[[k, p], :k] = L[[p, k], :k]
            row_perm[[k, p]] = row_perm[[p, k]]
        if q != k:
            A[:, [k, q]] = A[:, [q, k]]
            col_perm[[k, q]] = col_perm[[q, k]]
        for i in range(k + 1, n):
            factor = A[i, k] / A[k, k]
            L[i, k] = factor
            A[i, k:] -= factor * A[k, k:]
    U = np.triu(A)
    P = np.eye(n, dtype=np.float64)[row_perm]
    Q = np.eye(n, dtype=np.float64)[:, col_perm]
    return L, U, P, Q


VARIANTS = {
    'doolittle': doolittle,
    'crout': crout,
    'partial_pivot': partial_pivot,
    'gauss': gauss,
    'complete_pivot': complete_pivot,
}
