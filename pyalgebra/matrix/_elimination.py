"""
Row-reduction kernels on raw arrays.

Exact kinds (integer, rational) are reduced with Fraction arithmetic so
determinants and inverses stay exact; floating kinds use partial pivoting
and treat pivots below SINGULAR_TOL as zero.
"""

from fractions import Fraction
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import SingularMatrixError
from pyalgebra.core.numeric import NumberKind, kind_of_array, normalize_scalar
from pyalgebra.core.tolerances import SINGULAR_TOL


def is_exact(array: NDArray[Any]) -> bool:
    return kind_of_array(array) <= NumberKind.RATIONAL


def to_fraction_array(array: NDArray[Any]) -> NDArray[Any]:
    out = np.empty(array.shape, dtype=object)
    for idx, v in np.ndenumerate(array):
        out[idx] = Fraction(v) if not isinstance(v, Fraction) else v
    return out


def working_copy(array: NDArray[Any]) -> tuple[NDArray[Any], float]:
    """Copy suitable for in-place elimination, and the zero threshold."""
    if is_exact(array):
        return to_fraction_array(array), 0.0
    if np.iscomplexobj(array):
        return np.array(array, dtype=np.complex128), SINGULAR_TOL
    return np.array(array, dtype=np.float64), SINGULAR_TOL


def bareiss_determinant(array: NDArray[Any]) -> Any:
    """
    Fraction-free determinant (Bareiss algorithm).
    
    Every intermediate division is exact, so integer input gives an
    integer result.
    """
    m = to_fraction_array(array)
    n = m.shape[0]
    if n == 0:
        return 1
    sign = 1
    prev = Fraction(1)
    for k in range(n - 1):
        if m[k, k] == 0:
            swap = next((i for i in range(k + 1, n) if m[i, k] != 0), None)
            if swap is None:
                return 0
            m[[k, swap]] = m[[swap, k]]
            sign = -sign
        for i in range(k + 1, n):
            for j in range(k + 1, n):
                m[i, j] = (m[i, j] * m[k, k] - m[i, k] * m[k, j]) / prev
        prev = m[k, k]
    return normalize_scalar(sign * m[n - 1, n - 1])


def pivoted_determinant(array: NDArray[Any]) -> Any:
    """Determinant as the signed product of partial-pivot LU pivots."""
    m, _ = working_copy(array)
    n = m.shape[0]
    det = m.dtype.type(1) if m.dtype != object else Fraction(1)
    for k in range(n):
        p = k + int(np.argmax(np.abs(m[k:, k])))
        if m[p, k] == 0:
            return normalize_scalar(det * 0)
        if p != k:
            m[[k, p]] = m[[p, k]]
            det = -det
        det = det * m[k, k]
        factors = m[k + 1:, k] / m[k, k]
        m[k + 1:, k:] -= np.outer(factors, m[k, k:])
    return normalize_scalar(det)


def gauss_jordan_inverse(array: NDArray[Any], name: str = 'matrix') -> NDArray[Any]:
    """
    Inverse by Gauss-Jordan elimination on [A | I].
    
    Raises:
        SingularMatrixError: If a pivot column has no usable entry
    """
    m, tol = working_copy(array)
    n = m.shape[0]
    identity = np.eye(n, dtype=m.dtype) if m.dtype != object else to_fraction_array(np.eye(n, dtype=np.int64))
    aug = np.concatenate([m, identity], axis=1)
    
    for k in range(n):
        p = k + int(np.argmax([abs(v) for v in aug[k:, k]]))
        if abs(aug[p, k]) <= tol:
            raise SingularMatrixError(
                f"{name}: singular, no nonzero pivot in column {k}",
                matrix_name=name,
                rank=k,
                expected_rank=n,
            )
        if p != k:
            aug[[k, p]] = aug[[p, k]]
        aug[k] = aug[k] / aug[k, k]
        for i in range(n):
            if i != k and aug[i, k] != 0:
                aug[i] = aug[i] - aug[i, k] * aug[k]
    return aug[:, n:]


def reduced_row_echelon(array: NDArray[Any]) -> tuple[NDArray[Any], list[int]]:
    """
    Reduced row echelon form and the pivot column indices.
    """
    m, tol = working_copy(array)
    rows, cols = m.shape
    pivots: list[int] = []
    r = 0
    for c in range(cols):
        if r >= rows:
            break
        p = r + int(np.argmax([abs(v) for v in m[r:, c]]))
        if abs(m[p, c]) <= tol:
            if m.dtype != object:
                m[r:, c] = 0
            continue
        if p != r:
            m[[r, p]] = m[[p, r]]
        m[r] = m[r] / m[r, c]
        for i in range(rows):
            if i != r and m[i, c] != 0:
                m[i] = m[i] - m[i, c] * m[r]
        pivots.append(c)
        r += 1
    return m, pivots


def null_space_basis(array: NDArray[Any]) -> NDArray[Any]:
    """
    Columns spanning the null space, one per free variable.
    
    Returns an n x k array (k may be 0).
    """
    rref, pivots = reduced_row_echelon(array)
    cols = array.shape[1]
    free = [c for c in range(cols) if c not in pivots]
    exact = rref.dtype == object
    basis = np.zeros((cols, len(free)), dtype=rref.dtype)
    for k, f in enumerate(free):
        basis[f, k] = Fraction(1) if exact else 1
        for i, p in enumerate(pivots):
            basis[p, k] = -rref[i, f]
    return basis
