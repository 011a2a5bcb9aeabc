"""
Decomposition result types.

Every decomposition is a frozen dataclass of Matrix factors with:
    check_matrix  the product of the factors (should reproduce A)
    verify(A)     whether check_matrix matches A within a tolerance tier
    solve(b)      solution of A x = b using the factors
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import solve_triangular

from pyalgebra.core.exceptions import DimensionError, SingularMatrixError
from pyalgebra.core.tolerances import (
    DEFAULT,
    EIGEN_VERIFY_TOL,
    SINGULAR_TOL,
    SINGULAR_VALUE_FLOOR,
    ToleranceTier,
    select_tolerance,
)
from pyalgebra.matrix import Column, Diagonal, Matrix


def _rhs(b: ArrayLike | Matrix, rows: int) -> NDArray[Any]:
    """Right-hand side as a rows x k float array."""
    array = np.asarray(b, dtype=np.float64)
    if array.ndim == 1:
        array = array.reshape(-1, 1)
    if array.shape[0] != rows:
        raise DimensionError(
            f"solve: right-hand side has {array.shape[0]} rows, expected {rows}"
        )
    return array


def _check_triangular_diagonal(R: NDArray[Any], name: str) -> None:
    diag = np.abs(np.diagonal(R))
    floor = SINGULAR_TOL * max(1.0, float(np.max(diag)) if diag.size else 1.0)
    bad = np.flatnonzero(diag <= floor)
    if bad.size:
        raise SingularMatrixError(
            f"{name}: zero on the diagonal at index {int(bad[0])}, system is singular",
            matrix_name=name,
            rank=int(np.sum(diag > floor)),
            expected_rank=diag.size,
        )


@dataclass(frozen=True)
class LUDecomposition:
    """
    P A Q = L U.
    
    P is None when no rows were swapped by the method, Q is None unless
    complete pivoting was used.
    """
    L: Matrix
    U: Matrix
    P: Matrix | None = None
    Q: Matrix | None = None
    method: str = 'partial_pivot'
    
    @property
    def n(self) -> int:
        return self.L.row_count
    
    @property
    def check_matrix(self) -> Matrix:
        """A reconstructed as P^T L U Q^T."""
        product = self.L @ self.U
        if self.P is not None:
            product = self.P.transpose() @ product
        if self.Q is not None:
            product = product @ self.Q.transpose()
        return product
    
    def verify(self, A: Matrix, tier: ToleranceTier = DEFAULT) -> bool:
        return self.check_matrix.is_almost_equal(A, tier)
    
    @property
    def pivot_sign(self) -> int:
        """Sign of the combined row and column permutations."""
        sign = 1
        for perm in (self.P, self.Q):
            if perm is not None:
                sign *= int(round(np.linalg.det(np.asarray(perm, dtype=np.float64))))
        return sign
    
    def determinant(self) -> Any:
        diag = np.diagonal(np.asarray(self.L)) * np.diagonal(np.asarray(self.U))
        return (self.pivot_sign * np.prod(diag)).item()
    
    def is_nonsingular(self) -> bool:
        diag = np.abs(np.diagonal(np.asarray(self.U, dtype=np.float64)))
        diag_l = np.abs(np.diagonal(np.asarray(self.L, dtype=np.float64)))
        return bool(np.all(diag > SINGULAR_TOL) and np.all(diag_l > SINGULAR_TOL))
    
    def solve(self, b: ArrayLike | Matrix) -> Matrix:
        """Forward substitution on L, back substitution on U."""
        rhs = _rhs(b, self.n)
        if self.P is not None:
            rhs = np.asarray(self.P, dtype=np.float64) @ rhs
        y = solve_triangular(np.asarray(self.L, dtype=np.float64), rhs, lower=True)
        x = solve_triangular(np.asarray(self.U, dtype=np.float64), y, lower=False)
        if self.Q is not None:
            x = np.asarray(self.Q, dtype=np.float64) @ x
        return Matrix(x)


@dataclass(frozen=True)
class QRDecomposition:
    """A = Q R; Gram-Schmidt gives the reduced form, Householder the full one."""
    Q: Matrix
    R: Matrix
    method: str = 'householder'
    
    @property
    def check_matrix(self) -> Matrix:
        return self.Q @ self.R
    
    def verify(self, A: Matrix, tier: ToleranceTier = DEFAULT) -> bool:
        return self.check_matrix.is_almost_equal(A, tier)
    
    def solve(self, b: ArrayLike | Matrix) -> Matrix:
        """
        Least-squares solution of A x = b (exact when A is square).
        
        Raises:
            SingularMatrixError: If A does not have full column rank
        """
        Q = np.asarray(self.Q, dtype=np.float64)
        R = np.asarray(self.R, dtype=np.float64)
        n = R.shape[1]
        rhs = _rhs(b, Q.shape[0])
        R_top = R[:n, :n]
        _check_triangular_diagonal(R_top, 'R')
        qtb = (Q.T @ rhs)[:n]
        return Matrix(solve_triangular(R_top, qtb, lower=False))


@dataclass(frozen=True)
class LQDecomposition:
    """A = L Q with L lower trapezoidal and Q orthogonal."""
    L: Matrix
    Q: Matrix
    
    @property
    def check_matrix(self) -> Matrix:
        return self.L @ self.Q
    
    def verify(self, A: Matrix, tier: ToleranceTier = DEFAULT) -> bool:
        return self.check_matrix.is_almost_equal(A, tier)
    
    def solve(self, b: ArrayLike | Matrix) -> Matrix:
        """Minimum-norm solution of A x = b for rows <= columns."""
        L = np.asarray(self.L, dtype=np.float64)
        Q = np.asarray(self.Q, dtype=np.float64)
        m, n = L.shape
        if m > n:
            raise DimensionError(
                f"LQ solve needs rows <= columns, got {m}x{n}"
            )
        rhs = _rhs(b, m)
        L_left = L[:, :m]
        _check_triangular_diagonal(L_left, 'L')
        y = solve_triangular(L_left, rhs, lower=True)
        return Matrix(Q.T[:, :m] @ y)


@dataclass(frozen=True)
class CholeskyDecomposition:
    """A = L L^T for symmetric positive definite A."""
    L: Matrix
    
    @property
    def check_matrix(self) -> Matrix:
        return self.L @ self.L.transpose()
    
    def verify(self, A: Matrix, tier: ToleranceTier = DEFAULT) -> bool:
        return self.check_matrix.is_almost_equal(A, tier)
    
    def solve(self, b: ArrayLike | Matrix) -> Matrix:
        L = np.asarray(self.L, dtype=np.float64)
        rhs = _rhs(b, L.shape[0])
        y = solve_triangular(L, rhs, lower=True)
        return Matrix(solve_triangular(L.T, y, lower=False))


@dataclass(frozen=True)
class SVDDecomposition:
    """
    A = U diag(S) V^T (economy size).
    
    Attributes:
        U: m x k, orthonormal columns
        S: k x k Diagonal of singular values, descending
        V: n x k, orthonormal columns
    """
    U: Matrix
    S: Diagonal
    V: Matrix
    
    @property
    def singular_values(self) -> tuple[float, ...]:
        return tuple(float(s) for s in self.S.as_list)
    
    @property
    def check_matrix(self) -> Matrix:
        return self.U @ self.S @ self.V.transpose()
    
    def verify(self, A: Matrix, tier: ToleranceTier = DEFAULT) -> bool:
        return self.check_matrix.is_almost_equal(A, tier)
    
    def condition_number(self) -> float:
        """sigma_max / sigma_min; inf once sigma_min falls under the relative floor."""
        s = np.array(self.singular_values)
        if s.size == 0 or s.min() <= SINGULAR_VALUE_FLOOR * s.max():
            return float('inf')
        return float(s.max() / s.min())
    
    def rank(self, tol: float | None = None) -> int:
        s = np.array(self.singular_values)
        if s.size == 0:
            return 0
        if tol is None:
            tol = s.max() * max(self.U.row_count, self.V.row_count) * np.finfo(np.float64).eps
        return int(np.sum(s > tol))
    
    def solve(self, b: ArrayLike | Matrix) -> Matrix:
        """Pseudo-inverse solution; handles rank-deficient A."""
        U = np.asarray(self.U, dtype=np.float64)
        V = np.asarray(self.V, dtype=np.float64)
        s = np.array(self.singular_values)
        rhs = _rhs(b, U.shape[0])
        k = self.rank()
        inv = np.zeros_like(s)
        inv[:k] = 1.0 / s[:k]
        return Matrix(V @ (inv[:, None] * (U.T @ rhs)))


@dataclass(frozen=True)
class Eigen:
    """
    Eigenvalues paired with their eigenvectors.
    
    vectors[i] is an n x 1 Column for values[i].
    """
    values: tuple[Any, ...]
    vectors: tuple[Column, ...]
    
    def __post_init__(self):
        if len(self.values) != len(self.vectors):
            raise DimensionError(
                f"Eigen: {len(self.values)} values but {len(self.vectors)} vectors"
            )
    
    def __len__(self) -> int:
        return len(self.values)
    
    @property
    def vector_matrix(self) -> Matrix:
        """Eigenvectors side by side (the matrix S)."""
        return Matrix.from_columns(self.vectors)
    
    def reconstruct(self) -> Matrix:
        """S diag(values) S^-1."""
        S = self.vector_matrix
        return S @ Matrix.from_diagonal(list(self.values)) @ S.inverse()
    
    def verify(self, A: Matrix, tol: float = EIGEN_VERIFY_TOL) -> bool:
        """True when |A v - lambda v|_inf < tol for every pair."""
        a = np.asarray(A, dtype=np.float64)
        for lam, vec in zip(self.values, self.vectors):
            v = np.asarray(vec, dtype=np.float64).ravel()
            if np.max(np.abs(a @ v - lam * v)) >= tol:
                return False
        return True


@dataclass(frozen=True)
class EigenDecomposition:
    """A V = V D; the columns of V are eigenvectors."""
    D: Diagonal
    V: Matrix
    method: str = 'qr_algorithm'
    iterations: int | None = None
    
    @property
    def values(self) -> tuple[float, ...]:
        return tuple(self.D.as_list)
    
    @property
    def eigen(self) -> Eigen:
        return Eigen(
            values=self.values,
            vectors=tuple(self.V.column(j) for j in range(self.V.column_count)),
        )
    
    @property
    def check_matrix(self) -> Matrix:
        return self.V @ self.D @ self.V.inverse()
    
    def verify(self, A: Matrix, tol: float = EIGEN_VERIFY_TOL) -> bool:
        return self.eigen.verify(A, tol)
    
    def solve(self, b: ArrayLike | Matrix) -> Matrix:
        """x = V D^-1 V^-1 b."""
        values = np.array(self.values, dtype=np.float64)
        if np.any(np.abs(values) <= SINGULAR_TOL):
            raise SingularMatrixError(
                "eigen solve: zero eigenvalue, matrix is singular",
                matrix_name='A',
            )
        V = np.asarray(self.V, dtype=np.float64)
        rhs = _rhs(b, V.shape[0])
        return Matrix(V @ (np.linalg.solve(V, rhs) / values[:, None]))


@dataclass(frozen=True)
class SchurDecomposition:
    """A = Q T Q^T with Q orthogonal and T upper triangular."""
    Q: Matrix
    T: Matrix
    iterations: int | None = None
    
    @property
    def check_matrix(self) -> Matrix:
        return self.Q @ self.T @ self.Q.transpose()
    
    def verify(self, A: Matrix, tier: ToleranceTier | None = None) -> bool:
        """Compare Q T Q^T with A; QR iteration results default to the loose tier."""
        if tier is None:
            tier = select_tolerance(iterative=True)
        return self.check_matrix.is_almost_equal(A, tier)
    
    def solve(self, b: ArrayLike | Matrix) -> Matrix:
        Q = np.asarray(self.Q, dtype=np.float64)
        T = np.asarray(self.T, dtype=np.float64)
        rhs = _rhs(b, Q.shape[0])
        _check_triangular_diagonal(T, 'T')
        return Matrix(Q @ solve_triangular(T, Q.T @ rhs, lower=False))
