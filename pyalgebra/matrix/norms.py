"""
Norm and distance family shared by matrices and vectors.

Norms are selected by a Norm tag. Each tag is defined for matrices,
vectors, or both; asking for one on the wrong kind of operand raises
UnsupportedOperationError instead of returning a placeholder.

    Norm          matrix                      vector
    ----          ------                      ------
    FROBENIUS     sqrt(sum |a_ij|^2)          Euclidean length
    MANHATTAN     max absolute column sum     sum |v_i|
    CHEBYSHEV     max absolute row sum        max |v_i|
    SPECTRAL      largest singular value      -
    TRACE         sum of singular values      -
    HAMMING       -                           count of nonzero entries
    COSINE        -                           v.v / |v|
    MAHALANOBIS   -                           sqrt(v' S^-1 v)
"""

from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.exceptions import (
    DimensionError,
    SingularMatrixError,
    UnsupportedOperationError,
    ValidationError,
)


class Norm(Enum):
    FROBENIUS = 'frobenius'
    MANHATTAN = 'manhattan'
    CHEBYSHEV = 'chebyshev'
    COSINE = 'cosine'
    HAMMING = 'hamming'
    MAHALANOBIS = 'mahalanobis'
    SPECTRAL = 'spectral'
    TRACE = 'trace'


MATRIX_NORMS = frozenset({
    Norm.FROBENIUS, Norm.MANHATTAN, Norm.CHEBYSHEV, Norm.SPECTRAL, Norm.TRACE,
})

VECTOR_NORMS = frozenset({
    Norm.FROBENIUS, Norm.MANHATTAN, Norm.CHEBYSHEV, Norm.HAMMING,
    Norm.COSINE, Norm.MAHALANOBIS,
})


def _as_float(array: NDArray[Any]) -> NDArray[Any]:
    # Fractions live in object arrays; norms are always floating point
    if array.dtype == object:
        return array.astype(np.float64)
    return array


def _coerce_norm(norm: Norm | str) -> Norm:
    if isinstance(norm, Norm):
        return norm
    try:
        return Norm(norm)
    except ValueError:
        valid = ", ".join(n.value for n in Norm)
        raise ValidationError(f"Unknown norm: {norm!r}. Valid: {valid}") from None


def matrix_norm(array: NDArray[Any], norm: Norm | str = Norm.FROBENIUS) -> float:
    """
    Norm of a 2D array.
    
    Raises:
        UnsupportedOperationError: For HAMMING, COSINE, MAHALANOBIS
    """
    norm = _coerce_norm(norm)
    if norm not in MATRIX_NORMS:
        raise UnsupportedOperationError(
            f"{norm.value} norm is defined for vectors only",
            operation=f"norm[{norm.value}]",
            operand='matrix',
        )
    a = _as_float(array)
    if a.size == 0:
        return 0.0
    
    if norm is Norm.FROBENIUS:
        return float(np.sqrt(np.sum(np.abs(a) ** 2)))
    if norm is Norm.MANHATTAN:
        return float(np.max(np.sum(np.abs(a), axis=0)))
    if norm is Norm.CHEBYSHEV:
        return float(np.max(np.sum(np.abs(a), axis=1)))
    
    singular_values = np.linalg.svd(a, compute_uv=False)
    if norm is Norm.SPECTRAL:
        return float(singular_values[0])
    return float(np.sum(singular_values))


def vector_norm(
    array: NDArray[Any],
    norm: Norm | str = Norm.FROBENIUS,
    covariance: ArrayLike | None = None,
    inverse_covariance: ArrayLike | None = None,
) -> float:
    """
    Norm of a 1D array.
    
    Args:
        array: The vector
        norm: Which norm
        covariance: Required for MAHALANOBIS unless inverse_covariance is given
        inverse_covariance: Precomputed inverse of covariance
        
    Raises:
        UnsupportedOperationError: For SPECTRAL, TRACE
        ValidationError: MAHALANOBIS without a covariance
    """
    norm = _coerce_norm(norm)
    if norm not in VECTOR_NORMS:
        raise UnsupportedOperationError(
            f"{norm.value} norm is defined for matrices only",
            operation=f"norm[{norm.value}]",
            operand='vector',
        )
    v = _as_float(array)
    
    if norm is Norm.FROBENIUS:
        return float(np.sqrt(np.sum(np.abs(v) ** 2)))
    if norm is Norm.MANHATTAN:
        return float(np.sum(np.abs(v)))
    if norm is Norm.CHEBYSHEV:
        return float(np.max(np.abs(v))) if v.size else 0.0
    if norm is Norm.HAMMING:
        return float(np.count_nonzero(v))
    if norm is Norm.COSINE:
        magnitude = float(np.sqrt(np.sum(np.abs(v) ** 2)))
        if magnitude == 0.0:
            return 0.0
        return float(np.real(np.vdot(v, v))) / magnitude
    
    inv = _inverse_covariance(v.shape[0], covariance, inverse_covariance)
    return float(np.sqrt(np.real(v @ inv @ v)))


def vector_distance(
    a: NDArray[Any],
    b: NDArray[Any],
    norm: Norm | str = Norm.FROBENIUS,
    covariance: ArrayLike | None = None,
    inverse_covariance: ArrayLike | None = None,
) -> float:
    """
    Distance between two equal-length vectors.
    
    HAMMING counts differing positions and COSINE is 1 - cos(angle);
    every other norm is the norm of a - b.
    """
    norm = _coerce_norm(norm)
    if a.shape != b.shape:
        raise DimensionError(
            f"distance: vectors must have the same length, got {a.shape[0]} and {b.shape[0]}"
        )
    if norm is Norm.HAMMING:
        return float(np.count_nonzero(a != b))
    if norm is Norm.COSINE:
        fa, fb = _as_float(a), _as_float(b)
        denom = np.linalg.norm(fa) * np.linalg.norm(fb)
        if denom == 0:
            raise ValidationError("distance: cosine distance undefined for a zero vector")
        return float(1.0 - np.real(np.vdot(fa, fb)) / denom)
    return vector_norm(
        _as_float(a) - _as_float(b), norm,
        covariance=covariance, inverse_covariance=inverse_covariance,
    )


def matrix_distance(a: NDArray[Any], b: NDArray[Any], norm: Norm | str = Norm.FROBENIUS) -> float:
    """Norm of a - b for equally shaped matrices."""
    if a.shape != b.shape:
        raise DimensionError(
            f"distance: shape mismatch {a.shape} vs {b.shape}"
        )
    return matrix_norm(_as_float(a) - _as_float(b), norm)


def _inverse_covariance(
    n: int,
    covariance: ArrayLike | None,
    inverse_covariance: ArrayLike | None,
) -> NDArray[np.floating[Any]]:
    if inverse_covariance is not None:
        inv = np.asarray(inverse_covariance, dtype=np.float64)
    elif covariance is not None:
        cov = np.asarray(covariance, dtype=np.float64)
        if cov.shape != (n, n):
            raise DimensionError(
                f"covariance: expected shape {(n, n)}, got {cov.shape}"
            )
        try:
            inv = np.linalg.inv(cov)
        except np.linalg.LinAlgError as e:
            raise SingularMatrixError(
                f"covariance is singular: {e}", matrix_name='covariance'
            ) from e
    else:
        raise ValidationError(
            "mahalanobis norm requires covariance or inverse_covariance"
        )
    if inv.shape != (n, n):
        raise DimensionError(
            f"inverse_covariance: expected shape {(n, n)}, got {inv.shape}"
        )
    return inv
