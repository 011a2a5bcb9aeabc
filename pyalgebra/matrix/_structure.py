"""
Structure predicates on raw arrays.

Every check takes a float64 (or complex128) array and an absolute
tolerance; entries with magnitude at or below tol count as zero.
properties() runs the whole catalogue and names what holds.
"""

from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray


def _square(a: NDArray[Any]) -> bool:
    return a.ndim == 2 and a.shape[0] == a.shape[1]


def _zero(a: NDArray[Any], tol: float) -> bool:
    return bool(np.all(np.abs(a) <= tol))


def _close(a: NDArray[Any], b: NDArray[Any], tol: float) -> bool:
    return a.shape == b.shape and _zero(a - b, tol)


def _identity(a: NDArray[Any], tol: float) -> bool:
    return _square(a) and _close(a, np.eye(a.shape[0]), tol)


# ═══════════════════════════════════════════════════════════════════════
# Shape and band structure
# ═══════════════════════════════════════════════════════════════════════


def is_zero(a: NDArray[Any], tol: float) -> bool:
    return _zero(a, tol)


def is_scalar(a: NDArray[Any], tol: float) -> bool:
    """Diagonal with every diagonal entry equal."""
    if not _square(a) or a.size == 0:
        return False
    return _close(a, a[0, 0] * np.eye(a.shape[0]), tol)


def is_banded(a: NDArray[Any], lower: int, upper: int, tol: float) -> bool:
    """Zero outside the band lower below and upper above the diagonal."""
    outside = np.triu(a, upper + 1) + np.tril(a, -lower - 1)
    return _zero(outside, tol)


def is_skew_symmetric(a: NDArray[Any], tol: float) -> bool:
    return _square(a) and _close(a, -a.T, tol)


def is_hermitian(a: NDArray[Any], tol: float) -> bool:
    return _square(a) and _close(a, a.conj().T, tol)


def is_toeplitz(a: NDArray[Any], tol: float) -> bool:
    """Constant along every diagonal."""
    return _close(a[:-1, :-1], a[1:, 1:], tol)


def is_hankel(a: NDArray[Any], tol: float) -> bool:
    """Constant along every anti-diagonal."""
    return _close(a[1:, :-1], a[:-1, 1:], tol)


def is_circulant(a: NDArray[Any], tol: float) -> bool:
    """Each row is the previous one rotated right by one place."""
    if not _square(a):
        return False
    return _close(a[1:], np.roll(a[:-1], 1, axis=1), tol)


def is_vandermonde(a: NDArray[Any], tol: float) -> bool:
    """a[i, j] == x_i ** j with x_i = a[i, 1]."""
    rows, columns = a.shape
    if rows == 0 or columns < 2:
        return False
    nodes = a[:, 1]
    expected = nodes[:, None] ** np.arange(columns)[None, :]
    return _close(a, expected, tol)


def is_permutation(a: NDArray[Any], tol: float) -> bool:
    """Exactly one entry equal to 1 in every row and column, zeros elsewhere."""
    if not _square(a):
        return False
    ones = np.abs(a - 1) <= tol
    zeros = np.abs(a) <= tol
    if not np.all(ones | zeros):
        return False
    return bool(np.all(ones.sum(axis=0) == 1) and np.all(ones.sum(axis=1) == 1))


def is_sparse(a: NDArray[Any], threshold: float) -> bool:
    """Fewer than threshold of the entries are nonzero."""
    if a.size == 0:
        return False
    return np.count_nonzero(a) / a.size < threshold


def is_diagonally_dominant(a: NDArray[Any], strict: bool) -> bool:
    """|a_ii| >= (or > when strict) the sum of |a_ij| over j != i, for every row."""
    if not _square(a):
        return False
    magnitude = np.abs(a)
    diag = np.diagonal(magnitude)
    off = magnitude.sum(axis=1) - diag
    return bool(np.all(diag > off) if strict else np.all(diag >= off))


# ═══════════════════════════════════════════════════════════════════════
# Products and powers
# ═══════════════════════════════════════════════════════════════════════


def is_orthogonal(a: NDArray[Any], tol: float) -> bool:
    """A A^H == I (orthogonal for real input, unitary for complex)."""
    return _identity(a @ a.conj().T, tol) if _square(a) else False


def is_involutory(a: NDArray[Any], tol: float) -> bool:
    return _identity(a @ a, tol) if _square(a) else False


def is_idempotent(a: NDArray[Any], tol: float) -> bool:
    return _close(a @ a, a, tol) if _square(a) else False


def is_nilpotent(a: NDArray[Any], tol: float) -> bool:
    """A^n == 0; the index of a nilpotent n x n matrix never exceeds n."""
    if not _square(a):
        return False
    return _zero(np.linalg.matrix_power(a, a.shape[0]), tol)


def period(a: NDArray[Any], tol: float, max_period: int) -> int | None:
    """Smallest k in [1, max_period] with A^k == I, or None."""
    if not _square(a) or a.size == 0:
        return None
    # A^k == I needs every eigenvalue on the unit circle
    if not np.allclose(np.abs(np.linalg.eigvals(a)), 1.0, atol=1e-8):
        return None
    power = np.eye(a.shape[0], dtype=a.dtype)
    for k in range(1, max_period + 1):
        power = power @ a
        if _identity(power, tol):
            return k
    return None


# ═══════════════════════════════════════════════════════════════════════
# Spectral
# ═══════════════════════════════════════════════════════════════════════


def definiteness(a: NDArray[Any], tol: float) -> int:
    """1 for positive definite, -1 for negative definite, 0 otherwise."""
    if not is_hermitian(a, tol) or a.size == 0:
        return 0
    values = np.linalg.eigvalsh(a)
    if np.all(values > 0):
        return 1
    if np.all(values < 0):
        return -1
    return 0


def has_dominant_eigenvalue(a: NDArray[Any], tol: float) -> bool:
    """The largest |lambda| exceeds the next largest by more than tol."""
    if not _square(a) or a.shape[0] == 0:
        return False
    magnitudes = np.sort(np.abs(np.linalg.eigvals(a)))[::-1]
    return magnitudes.size == 1 or bool(magnitudes[0] - magnitudes[1] > tol)


def is_derogatory(a: NDArray[Any], tol: float) -> bool:
    """Some eigenvalue has more than one independent eigenvector."""
    if not _square(a) or a.shape[0] < 2:
        return False
    n = a.shape[0]
    values = np.linalg.eigvals(a)
    seen: list[complex] = []
    for value in values:
        if any(abs(value - s) <= max(tol, 1e-8 * max(1.0, abs(s))) for s in seen):
            continue
        seen.append(value)
        shifted = a - value * np.eye(n)
        if n - np.linalg.matrix_rank(shifted, tol=max(tol, 1e-8)) > 1:
            return True
    return False


# ═══════════════════════════════════════════════════════════════════════
# Catalogue
# ═══════════════════════════════════════════════════════════════════════


def properties(
    a: NDArray[Any],
    tol: float,
    rank: Callable[[], int],
) -> list[str]:
    """
    Names of every structural property that holds, in catalogue order.
    
    Shape names (square, horizontal, vertical) always appear; band and
    spectral checks only run on non-empty square input.
    """
    rows, columns = a.shape
    square = rows == columns
    checks: list[tuple[str, bool]] = [
        ('square', square),
        ('zero', is_zero(a, tol)),
        ('row', rows == 1),
        ('column', columns == 1),
        ('horizontal', rows < columns),
        ('vertical', rows > columns),
    ]
    if a.size:
        full_rank = rank() == min(rows, columns)
        checks += [
            ('full_rank', full_rank),
            ('toeplitz', is_toeplitz(a, tol)),
            ('hankel', is_hankel(a, tol)),
            ('vandermonde', is_vandermonde(a, tol)),
            ('sparse', is_sparse(a, 0.5)),
        ]
    if square and a.size:
        upper = is_banded(a, 0, columns, tol)
        lower = is_banded(a, rows, 0, tol)
        sign = definiteness(a, tol)
        checks += [
            ('diagonal', upper and lower),
            ('identity', _identity(a, tol)),
            ('scalar', is_scalar(a, tol)),
            ('upper_triangular', upper),
            ('lower_triangular', lower),
            ('tridiagonal', is_banded(a, 1, 1, tol)),
            ('symmetric', _close(a, a.T, tol)),
            ('skew_symmetric', is_skew_symmetric(a, tol)),
            ('hermitian', is_hermitian(a, tol)),
            ('orthogonal', is_orthogonal(a, tol)),
            ('singular', not full_rank),
            ('nonsingular', full_rank),
            ('circulant', is_circulant(a, tol)),
            ('permutation', is_permutation(a, tol)),
            ('nilpotent', is_nilpotent(a, tol)),
            ('involutory', is_involutory(a, tol)),
            ('idempotent', is_idempotent(a, tol)),
            ('periodic', full_rank and period(a, tol, 100) is not None),
            ('positive_definite', sign == 1),
            ('negative_definite', sign == -1),
            ('derogatory', is_derogatory(a, tol)),
            ('dominant_eigenvalue', has_dominant_eigenvalue(a, tol)),
            ('diagonally_dominant', is_diagonally_dominant(a, strict=False)),
            ('strictly_diagonally_dominant', is_diagonally_dominant(a, strict=True)),
        ]
    return [name for name, holds in checks if holds]
