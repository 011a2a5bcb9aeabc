"""
Decomposition dispatch.

This module provides decompose() (public API) and the per-family entry
points it routes to.
"""

from typing import Any, Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.exceptions import ValidationError
from pyalgebra.core.numeric import NumberKind
from pyalgebra.core.tolerances import DEFAULT_MAX_ITER, DEFAULT_TOL
from pyalgebra.core.validation import check_finite, check_square
from pyalgebra.decomposition import _cholesky, _divide_conquer, _eigen, _lu, _qr
from pyalgebra.decomposition.solution import (
    CholeskyDecomposition,
    Eigen,
    EigenDecomposition,
    LQDecomposition,
    LUDecomposition,
    QRDecomposition,
    SchurDecomposition,
    SVDDecomposition,
)
from pyalgebra.matrix import Column, Diagonal, Matrix, as_matrix


LUMethod = Literal['doolittle', 'crout', 'partial_pivot', 'gauss', 'complete_pivot']
QRMethod = Literal['gram_schmidt', 'householder']
EigenMethod = Literal['qr_algorithm', 'divide_and_conquer']

DecompositionMethod = Literal[
    'doolittle', 'crout', 'partial_pivot', 'gauss', 'complete_pivot',
    'gram_schmidt', 'householder', 'lq', 'cholesky', 'svd',
    'qr_algorithm', 'divide_and_conquer', 'schur',
]


def _real_array(A: Matrix, name: str = 'A') -> NDArray[np.floating[Any]]:
    if A.kind is NumberKind.COMPLEX:
        raise ValidationError(f"{name}: complex matrices are not supported by this decomposition")
    array = np.asarray(A, dtype=np.float64)
    check_finite(array, name)
    return array


def _wrap(array: NDArray[Any] | None) -> Matrix | None:
    return None if array is None else Matrix(array)


def lu(A: ArrayLike | Matrix, method: LUMethod = 'partial_pivot') -> LUDecomposition:
    """
    LU factorization.
    
    Args:
        A: Square matrix
        method: 'doolittle', 'crout', 'partial_pivot', 'gauss' or 'complete_pivot'
        
    Raises:
        DimensionError: If A is not square
        SingularMatrixError: If a pivot is zero
    """
    A = as_matrix(A, 'A')
    check_square(A.shape, 'LU')
    if method not in _lu.VARIANTS:
        raise ValueError(f"Unknown LU method: {method!r}")
    array = np.asarray(A, dtype=np.complex128 if A.kind is NumberKind.COMPLEX else np.float64)
    L, U, P, Q = _lu.VARIANTS[method](array)
    return LUDecomposition(L=Matrix(L), U=Matrix(U), P=_wrap(P), Q=_wrap(Q), method=method)


def qr(A: ArrayLike | Matrix, method: QRMethod = 'householder') -> QRDecomposition:
    """
    QR factorization.
    
    Householder is the numerically stable default; Gram-Schmidt needs
    rows >= columns and linearly independent columns.
    """
    A = as_matrix(A, 'A')
    array = _real_array(A)
    if method == 'householder':
        Q, R = _qr.householder(array)
    elif method == 'gram_schmidt':
        Q, R = _qr.gram_schmidt(array)
    else:
        raise ValueError(f"Unknown QR method: {method!r}")
    return QRDecomposition(Q=Matrix(Q), R=Matrix(R), method=method)


def lq(A: ArrayLike | Matrix) -> LQDecomposition:
    A = as_matrix(A, 'A')
    L, Q = _qr.lq(_real_array(A))
    return LQDecomposition(L=Matrix(L), Q=Matrix(Q))


def cholesky(A: ArrayLike | Matrix) -> CholeskyDecomposition:
    """
    Raises:
        DimensionError: If A is not square
        ValidationError: If A is not symmetric
        NotPositiveDefiniteError: If A is not positive definite
    """
    A = as_matrix(A, 'A')
    check_square(A.shape, 'Cholesky')
    return CholeskyDecomposition(L=Matrix(_cholesky.cholesky(_real_array(A))))


def svd(A: ArrayLike | Matrix) -> SVDDecomposition:
    A = as_matrix(A, 'A')
    U, s, Vt = np.linalg.svd(_real_array(A), full_matrices=False)
    return SVDDecomposition(U=Matrix(U), S=Diagonal(s), V=Matrix(Vt.T))


def eigen(
    A: ArrayLike | Matrix,
    method: EigenMethod = 'qr_algorithm',
    *,
    tol: float = DEFAULT_TOL,
    max_iter: int = DEFAULT_MAX_ITER,
) -> EigenDecomposition:
    """
    Eigen decomposition.
    
    Args:
        A: Square matrix
        method: 'qr_algorithm' (any matrix with real, distinct-magnitude
            eigenvalues) or 'divide_and_conquer' (symmetric only)
        tol: Subdiagonal threshold for QR iteration
        max_iter: Iteration cap for QR iteration
        
    Raises:
        ConvergenceError: QR iteration did not converge
        ValidationError: divide_and_conquer on a non-symmetric matrix
    """
    A = as_matrix(A, 'A')
    check_square(A.shape, 'eigen')
    array = _real_array(A)
    
    if method == 'divide_and_conquer':
        values, vectors = _divide_conquer.divide_and_conquer(array)
        return EigenDecomposition(D=Diagonal(values), V=Matrix(vectors), method=method)
    if method != 'qr_algorithm':
        raise ValueError(f"Unknown eigen method: {method!r}")
    
    T, Q, iterations = _eigen.qr_iteration(array, tol, max_iter)
    values = np.diagonal(T).copy()
    if np.allclose(array, array.T):
        vectors = Q
    else:
        vectors = Q @ _eigen.triangular_eigenvectors(T)
    return EigenDecomposition(
        D=Diagonal(values), V=Matrix(vectors), method=method, iterations=iterations,
    )


def schur(
    A: ArrayLike | Matrix,
    *,
    tol: float = DEFAULT_TOL,
    max_iter: int = DEFAULT_MAX_ITER,
) -> SchurDecomposition:
    A = as_matrix(A, 'A')
    check_square(A.shape, 'Schur')
    T, Q, iterations = _eigen.qr_iteration(_real_array(A), tol, max_iter)
    return SchurDecomposition(Q=Matrix(Q), T=Matrix(np.triu(T)), iterations=iterations)


def divide_and_conquer(A: ArrayLike | Matrix) -> Eigen:
    """
    Eigenpairs of a symmetric matrix by divide and conquer.
    
    Example:
        >>> eig = divide_and_conquer([[2, 1], [1, 2]])
        >>> sorted(eig.values)
        [1.0, 3.0]
    """
    A = as_matrix(A, 'A')
    check_square(A.shape, 'divide_and_conquer')
    values, vectors = _divide_conquer.divide_and_conquer(_real_array(A))
    return Eigen(
        values=tuple(float(v) for v in values),
        vectors=tuple(Column(vectors[:, j]) for j in range(vectors.shape[1])),
    )


def decompose(A: ArrayLike | Matrix, method: DecompositionMethod, **kwargs: Any) -> Any:
    """
    Factor A with the named method.
    
    Args:
        A: Matrix or 2D array-like
        method: One of the LU variants ('doolittle', 'crout', 'partial_pivot',
            'gauss', 'complete_pivot'), QR variants ('gram_schmidt',
            'householder'), 'lq', 'cholesky', 'svd', eigen solvers
            ('qr_algorithm', 'divide_and_conquer') or 'schur'
        **kwargs: Passed through (tol, max_iter for iterative methods)
        
    Returns:
        The matching *Decomposition result
    """
    if method in _lu.VARIANTS:
        return lu(A, method)
    if method in ('gram_schmidt', 'householder'):
        return qr(A, method)
    if method == 'lq':
        return lq(A)
    if method == 'cholesky':
        return cholesky(A)
    if method == 'svd':
        return svd(A)
    if method in ('qr_algorithm', 'divide_and_conquer'):
        return eigen(A, method, **kwargs)
    if method == 'schur':
        return schur(A, **kwargs)
    raise ValueError(f"Unknown decomposition method: {method!r}")
