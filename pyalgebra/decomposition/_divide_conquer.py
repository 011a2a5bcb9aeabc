"""
Divide-and-conquer eigensolver for symmetric matrices.

    1. Householder tridiagonalization: A = Q T Q^T.
    2. find_pivot picks the split row k from the last row of T.
    3. T = diag(T1, T2) + beta v v^T with beta = T[k+1, k] and
       v = e_k + e_{k+1}; T1 and T2 are solved recursively, in closed
       form once they are 1x1 or 2x2.
    4. The halves are merged by solving the secular equation of
       D + beta z z^T, z = (Q1 (+) Q2)^T v.
    5. Eigenvectors are carried back through both transforms and the
       eigenvalues of the halves are concatenated in merge order.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import ValidationError
from pyalgebra.core.tolerances import EPSILON_64
from pyalgebra.decomposition._qr import householder_vector


_BISECTION_STEPS = 200


def tridiagonalize(a: NDArray[Any]) -> tuple[NDArray[Any], NDArray[Any]]:
    """
    Householder similarity reduction of a symmetric matrix.
    
    Returns (T, Q) with T tridiagonal and A = Q T Q^T.
    """
    n = a.shape[0]
    T = np.array(a, dtype=np.float64)
    Q = np.eye(n)
    for k in range(n - 2):
        v, beta = householder_vector(T[k + 1:, k])
        if beta == 0.0:
            continue
        H = np.eye(n)
        H[k + 1:, k + 1:] -= beta * np.outer(v, v)
        T = H @ T @ H
        Q = Q @ H
    # Clear rounding noise outside the band
    band = np.abs(np.subtract.outer(np.arange(n), np.arange(n))) <= 1
    T = np.where(band, (T + T.T) / 2.0, 0.0)
    return T, Q


def find_pivot(T: NDArray[Any]) -> int:
    """
    Split index taken from the last row of T.
    
    Starts at n-2 and scans i = n-3 down to 0, moving to i only when
    |T[n-1, i]| is strictly smaller than the best so far. Ties keep the
    index scanned first (the higher one).
    """
    n = T.shape[0]
    pivot = n - 2
    min_value = abs(float(T[n - 1, n - 2]))
    for i in range(n - 3, -1, -1):
        value = abs(float(T[n - 1, i]))
        if value < min_value:
            min_value = value
            pivot = i
    return pivot


def solve_small(T: NDArray[Any]) -> tuple[NDArray[Any], NDArray[Any]]:
    """
    Closed-form eigenpairs of a 1x1 or 2x2 block.
    
    For [[a, b], [c, d]] the eigenvalues are (tr +/- sqrt(tr^2 - 4 det)) / 2,
    larger first; each eigenvector is proportional to [-b / (a - lam), 1].
    Vectors are returned normalized, one per column.
    """
    n = T.shape[0]
    if n == 1:
        return np.array([float(T[0, 0])]), np.eye(1)
    if n != 2:
        raise ValidationError(f"closed form needs a 1x1 or 2x2 block, got {n}x{n}")
    
    a, b = float(T[0, 0]), float(T[0, 1])
    c, d = float(T[1, 0]), float(T[1, 1])
    trace = a + d
    determinant = a * d - b * c
    discriminant = max(trace * trace - 4.0 * determinant, 0.0)
    root = np.sqrt(discriminant)
    values = np.array([(trace + root) / 2.0, (trace - root) / 2.0])
    
    vectors = np.zeros((2, 2))
    scale = max(abs(a), abs(b), abs(c), abs(d), 1.0)
    for k, lam in enumerate(values):
        if abs(b) > EPSILON_64 * scale:
            # [b, lam - a] is [-b / (a - lam), 1] scaled by (lam - a)
            v = np.array([b, lam - a])
        elif abs(c) > EPSILON_64 * scale:
            v = np.array([lam - d, c])
        elif a == d:
            v = np.eye(2)[k]
        else:
            # Diagonal block: pair lam with the nearer diagonal entry
            v = np.eye(2)[0] if abs(lam - a) <= abs(lam - d) else np.eye(2)[1]
        vectors[:, k] = v / np.linalg.norm(v)
    return values, vectors


def _secular_roots(d: NDArray[Any], z: NDArray[Any], rho: float) -> NDArray[Any]:
    """
    Roots of 1 + rho * sum z_i^2 / (d_i - lam) for rho > 0, d ascending.
    
    Root i lies in (d_i, d_{i+1}); the last one in (d_m, d_m + rho |z|^2).
    """
    m = d.size
    z2 = z * z
    upper = d[-1] + rho * float(np.sum(z2))
    roots = np.empty(m)
    for i in range(m):
        lo = d[i]
        hi = d[i + 1] if i + 1 < m else upper
        for _ in range(_BISECTION_STEPS):
            mid = 0.5 * (lo + hi)
            if mid <= lo or mid >= hi:
                break
            f = 1.0 + rho * float(np.sum(z2 / (d - mid)))
            if f < 0.0:
                lo = mid
            else:
                hi = mid
        roots[i] = 0.5 * (lo + hi)
    return roots


def rank_one_update(
    d: NDArray[Any],
    z: NDArray[Any],
    rho: float,
) -> tuple[NDArray[Any], NDArray[Any]]:
    """
    Eigenpairs of diag(d) + rho z z^T.
    
    Components with negligible z_i, and all but one of a group of equal
    d_i (after a Givens rotation), deflate: their eigenvalue is d_i and
    their eigenvector stays a unit vector. The rest solve the secular
    equation.
    """
    n = d.size
    if rho == 0.0 or n == 0:
        return d.copy(), np.eye(n)
    if rho < 0.0:
        values, vectors = rank_one_update(-d, z, -rho)
        return -values, vectors
    
    order = np.argsort(d, kind='stable')
    d_sorted = d[order]
    z_sorted = z[order].astype(np.float64)
    G = np.eye(n)
    
    scale = max(float(np.max(np.abs(d_sorted))), abs(rho) * float(np.dot(z, z)), 1.0)
    tol = 8.0 * EPSILON_64 * scale
    
    # Equal poles: rotate so only the last of the group keeps weight
    for i in range(n - 1):
        if abs(d_sorted[i + 1] - d_sorted[i]) <= tol and abs(z_sorted[i]) > 0.0:
            r = np.hypot(z_sorted[i], z_sorted[i + 1])
            c, s = z_sorted[i + 1] / r, z_sorted[i] / r
            rot = np.array([[c, s], [-s, c]])
            G[:, [i, i + 1]] = G[:, [i, i + 1]] @ rot
            z_sorted[i], z_sorted[i + 1] = 0.0, r
    
    live = np.abs(z_sorted) * np.sqrt(rho) > tol
    values = d_sorted.copy()
    U = np.eye(n)
    if np.any(live):
        idx = np.flatnonzero(live)
        dl, zl = d_sorted[idx], z_sorted[idx]
        roots = _secular_roots(dl, zl, rho)
        block = np.empty((idx.size, idx.size))
        for k, lam in enumerate(roots):
            diff = dl - lam
            diff[diff == 0.0] = EPSILON_64 * scale
            u = zl / diff
            block[:, k] = u / np.linalg.norm(u)
        values[idx] = roots
        U[np.ix_(idx, idx)] = block
    
    vectors = np.zeros((n, n))
    vectors[order, :] = G @ U
    return values, vectors


def solve_tridiagonal(T: NDArray[Any]) -> tuple[NDArray[Any], NDArray[Any]]:
    """Eigenpairs of a symmetric tridiagonal matrix, vectors as columns."""
    n = T.shape[0]
    if n <= 2:
        return solve_small(T)
    
    k = find_pivot(T)
    beta = float(T[k + 1, k])
    T1 = T[:k + 1, :k + 1].copy()
    T2 = T[k + 1:, k + 1:].copy()
    T1[k, k] -= beta
    T2[0, 0] -= beta
    
    d1, Q1 = solve_tridiagonal(T1)
    d2, Q2 = solve_tridiagonal(T2)
    
    Q = np.zeros((n, n))
    Q[:k + 1, :k + 1] = Q1
    Q[k + 1:, k + 1:] = Q2
    d = np.concatenate([d1, d2])
    z = np.concatenate([Q1[k, :], Q2[0, :]])
    
    values, U = rank_one_update(d, z, beta)
    return values, Q @ U


def divide_and_conquer(a: NDArray[Any]) -> tuple[NDArray[Any], NDArray[Any]]:
    """
    Eigenvalues and eigenvectors (columns) of a symmetric matrix.
    
    Raises:
        ValidationError: If a is not symmetric
    """
    scale = max(1.0, float(np.max(np.abs(a)))) if a.size else 1.0
    if not np.allclose(a, a.T, rtol=0.0, atol=1e-10 * scale):
        raise ValidationError("divide-and-conquer eigensolver requires a symmetric matrix")
    T, Q = tridiagonalize(a)
    values, vectors = solve_tridiagonal(T)
    return values, Q @ vectors
