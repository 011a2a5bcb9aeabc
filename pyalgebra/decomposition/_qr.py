"""
QR factorization: classical Gram-Schmidt and Householder reflections.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import DimensionError, SingularMatrixError
from pyalgebra.core.tolerances import SINGULAR_TOL


def gram_schmidt(a: NDArray[Any]) -> tuple[NDArray[Any], NDArray[Any]]:
    """
    Reduced QR by classical Gram-Schmidt.
    
    Returns Q (m x n, orthonormal columns) and R (n x n, upper triangular).
    
    Raises:
        DimensionError: If m < n
        SingularMatrixError: If the columns are linearly dependent
    """
    m, n = a.shape
    if m < n:
        raise DimensionError(
            f"Gram-Schmidt QR needs rows >= columns, got {m}x{n}"
        )
    Q = np.zeros((m, n), dtype=a.dtype)
    R = np.zeros((n, n), dtype=a.dtype)
    for k in range(n):
        u = a[:, k].copy()
        for i in range(k):
            R[i, k] = np.vdot(Q[:, i], a[:, k])
            u = u - R[i, k] * Q[:, i]
        norm = np.linalg.norm(u)
        if norm <= SINGULAR_TOL * max(1.0, np.linalg.norm(a[:, k])):
            raise SingularMatrixError(
                f"Gram-Schmidt QR: column {k} is linearly dependent on earlier columns",
                matrix_name='A',
                rank=k,
                expected_rank=n,
            )
        R[k, k] = norm
        Q[:, k] = u / norm
    return Q, R


def householder_vector(x: NDArray[Any]) -> tuple[NDArray[Any], float]:
    """
    Reflector v, beta with (I - beta v v^T) x = alpha e1.
    
    beta is 0 when x is already a multiple of e1.
    """
    v = np.array(x, dtype=np.float64)
    sigma = float(np.dot(v[1:], v[1:]))
    if sigma == 0.0:
        return v * 0.0, 0.0
    norm = np.sqrt(v[0] ** 2 + sigma)
    v[0] += np.copysign(norm, v[0])
    beta = 2.0 / float(np.dot(v, v))
    return v, beta


def householder(a: NDArray[Any]) -> tuple[NDArray[Any], NDArray[Any]]:
    """
    Full QR by Householder reflections.
    
    Returns Q (m x m, orthogonal) and R (m x n, upper trapezoidal).
    """
    m, n = a.shape
    R = np.array(a, dtype=np.float64)
    Q = np.eye(m)
    for k in range(min(m - 1, n)):
        v, beta = householder_vector(R[k:, k])
        if beta == 0.0:
            continue
        R[k:, :] -= beta * np.outer(v, v @ R[k:, :])
        Q[:, k:] -= beta * np.outer(Q[:, k:] @ v, v)
    return Q, np.triu(R)


def lq(a: NDArray[Any]) -> tuple[NDArray[Any], NDArray[Any]]:
    """
    LQ from the Householder QR of the transpose.
    
    Returns L (m x n, lower trapezoidal) and Q (n x n, orthogonal) with
    A == L @ Q.
    """
    Q_t, R_t = householder(a.T)
    return R_t.T, Q_t.T
