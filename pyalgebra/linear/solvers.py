"""
Linear system dispatch.

This module provides solve() (public API) for A x = b over every
LinearSystemMethod, and solve_decomposed() which routes through a
decomposition.
"""

import warnings
from enum import Enum
from typing import Any, Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.exceptions import DimensionError, NotPositiveDefiniteError, ValidationError
from pyalgebra.core.numeric import NumberKind
from pyalgebra.core.result import Result
from pyalgebra.core.timing import SolveTimer
from pyalgebra.core.tolerances import (
    CONDITION_WARN_THRESHOLD,
    DEFAULT_ALPHA,
    DEFAULT_MAX_ITER,
    DEFAULT_OMEGA,
    DEFAULT_TOL,
    ILL_CONDITIONED_THRESHOLD,
    select_tolerance,
)
from pyalgebra.core.validation import check_finite, check_positive, check_square
from pyalgebra.decomposition import solvers as decomposition
from pyalgebra.linear import _direct, _iterative
from pyalgebra.linear.solution import LinearParams, LinearSystemSolution
from pyalgebra.matrix import Column, Matrix, as_matrix


class LinearSystemMethod(Enum):
    CRAMER = 'cramer'
    INVERSE = 'inverse'
    GAUSS_ELIMINATION = 'gauss_elimination'
    GAUSS_JORDAN = 'gauss_jordan'
    BAREISS = 'bareiss'
    LEAST_SQUARES = 'least_squares'
    GRAM_SCHMIDT = 'gram_schmidt'
    LU = 'lu'
    RIDGE = 'ridge'
    JACOBI = 'jacobi'
    GAUSS_SEIDEL = 'gauss_seidel'
    SOR = 'sor'
    CONJUGATE_GRADIENT = 'conjugate_gradient'
    
    @property
    def is_iterative(self) -> bool:
        return self in _ITERATIVE


_ITERATIVE = frozenset({
    LinearSystemMethod.JACOBI,
    LinearSystemMethod.GAUSS_SEIDEL,
    LinearSystemMethod.SOR,
    LinearSystemMethod.CONJUGATE_GRADIENT,
})

# Methods that accept rectangular (overdetermined) A
_RECTANGULAR = frozenset({
    LinearSystemMethod.LEAST_SQUARES,
    LinearSystemMethod.RIDGE,
    LinearSystemMethod.GRAM_SCHMIDT,
})

# Methods that keep integer/rational input exact until the end
_EXACT = frozenset({
    LinearSystemMethod.CRAMER,
    LinearSystemMethod.BAREISS,
})

DecomposedMethod = Literal['auto', 'lu', 'qr', 'cholesky', 'svd']


def _coerce_method(method: LinearSystemMethod | str) -> LinearSystemMethod:
    if isinstance(method, LinearSystemMethod):
        return method
    try:
        return LinearSystemMethod(method)
    except ValueError:
        valid = ", ".join(m.value for m in LinearSystemMethod)
        raise ValueError(f"Unknown method: {method!r}. Valid: {valid}") from None


def _prepare(A: ArrayLike | Matrix, b: Any) -> tuple[Matrix, NDArray[Any], bool]:
    """Validate the system; returns (A, b as rows x k, b_was_vector)."""
    A = as_matrix(A, 'A')
    rhs = np.asarray(b)
    was_vector = rhs.ndim == 1
    if was_vector:
        rhs = rhs.reshape(-1, 1)
    if rhs.ndim != 2:
        raise DimensionError(f"b: expected a vector or a 2-D array, got {rhs.ndim} dimensions")
    if rhs.shape[0] != A.row_count:
        raise DimensionError(
            f"b has {rhs.shape[0]} rows but A has {A.row_count}; "
            f"A is {A.row_count}x{A.column_count}"
        )
    if A.kind is NumberKind.COMPLEX or np.iscomplexobj(rhs):
        raise ValidationError("solve: complex systems are not supported")
    return A, rhs, was_vector


def _warn(messages: list[str], message: str) -> None:
    warnings.warn(message, RuntimeWarning, stacklevel=3)
    messages.append(message)


def _condition_check(A: Matrix, messages: list[str]) -> float:
    cond = A.condition_number()
    if np.isfinite(cond) and cond > CONDITION_WARN_THRESHOLD:
        _warn(
            messages,
            f"Ill-conditioned coefficient matrix (condition number {cond:.3g} > "
            f"{CONDITION_WARN_THRESHOLD:.0e}); the solution may be inaccurate",
        )
    return cond


def _tolerance_tier(info: dict[str, Any], iterative: bool) -> None:
    cond = info.get('condition_number')
    ill = cond is not None and not cond <= ILL_CONDITIONED_THRESHOLD
    info['tolerance'] = select_tolerance(iterative=iterative, is_ill_conditioned=ill)


def _as_solution(x: NDArray[Any], was_vector: bool) -> Matrix:
    x = np.asarray(x, dtype=np.float64)
    if was_vector:
        return Column(x.ravel(), is_double=True)
    return Matrix(x, is_double=True)


def solve(
    A: ArrayLike | Matrix,
    b: Any,
    method: LinearSystemMethod | str = LinearSystemMethod.GAUSS_ELIMINATION,
    *,
    tol: float = DEFAULT_TOL,
    max_iter: int = DEFAULT_MAX_ITER,
    omega: float = DEFAULT_OMEGA,
    alpha: float = DEFAULT_ALPHA,
    check_condition: bool = True,
) -> LinearSystemSolution:
    """
    Solve A x = b.
    
    Args:
        A: Coefficient matrix. Square except for least_squares, ridge and
            gram_schmidt, which accept rows >= columns
        b: Right-hand side vector, or a matrix with one column per system
        method: LinearSystemMethod or its string value
        tol: Convergence tolerance for iterative methods
        max_iter: Iteration cap for iterative methods
        omega: SOR relaxation factor, 0 < omega < 2
        alpha: Ridge penalty
        check_condition: Warn when cond(A) exceeds 1e12
        
    Returns:
        LinearSystemSolution. A vector b gives a Column solution, a matrix b
        a Matrix. Iterative methods that reach max_iter return the last
        iterate with converged=False and a RuntimeWarning.
        
    Raises:
        DimensionError: Shape mismatch between A and b, or non-square A
        SingularMatrixError: Direct method hit a zero pivot or determinant
        NumericalError: Zero diagonal entry (Jacobi, Gauss-Seidel, SOR), or
            a non positive-definite matrix in conjugate gradient
        ValueError: Unknown method
        
    Examples:
        >>> sol = solve([[4, 1], [2, 3]], [1, 2])
        >>> [round(v, 12) for v in sol.x.flatten()]
        [0.1, 0.6]
        >>> solve([[4, 1], [2, 3]], [1, 2], 'jacobi', tol=1e-12).converged
        True
    """
    method = _coerce_method(method)
    
    # === Input Validation ===
    A, rhs, was_vector = _prepare(A, b)
    if method not in _RECTANGULAR:
        check_square(A.shape, 'A')
    elif A.row_count < A.column_count:
        raise DimensionError(
            f"{method.value}: needs rows >= columns, got {A.row_count}x{A.column_count}"
        )
    if method.is_iterative:
        check_positive(tol, 'tol')
        check_positive(max_iter, 'max_iter')
    if method is LinearSystemMethod.SOR and not 0.0 < omega < 2.0:
        raise ValidationError(f"omega: SOR needs 0 < omega < 2, got {omega}")
    if method is LinearSystemMethod.RIDGE and alpha < 0:
        raise ValidationError(f"alpha: must be non-negative, got {alpha}")
    
    timer = SolveTimer()
    messages: list[str] = []
    info: dict[str, Any] = {'method': method.value}
    
    a_float = np.asarray(A, dtype=np.float64)
    b_float = rhs.astype(np.float64)
    check_finite(a_float, 'A')
    check_finite(b_float, 'b')
    
    if check_condition:
        with timer.phase('condition'):
            info['condition_number'] = _condition_check(A, messages)
    _tolerance_tier(info, method.is_iterative)
    
    # === Solve ===
    with timer.phase('solve'):
        if method in _EXACT:
            solver = _direct.cramer if method is LinearSystemMethod.CRAMER else _direct.bareiss
            x = solver(A.to_numpy(), rhs)
        elif method is LinearSystemMethod.LEAST_SQUARES:
            x, used_svd = _direct.least_squares(a_float, b_float)
            info['used_svd'] = used_svd
            if used_svd:
                _warn(messages, "A^T A is singular; returned the minimum-norm SVD solution")
        elif method is LinearSystemMethod.RIDGE:
            x = _direct.ridge(a_float, b_float, alpha)
            info['alpha'] = alpha
        elif method.is_iterative:
            if method is LinearSystemMethod.SOR:
                outcome = _iterative.sor(a_float, b_float, tol, max_iter, omega)
                info['omega'] = omega
            else:
                outcome = _iterative.SOLVERS[method.value](a_float, b_float, tol, max_iter)
            x = outcome.x
            info.update(
                converged=outcome.converged,
                iterations=outcome.iterations,
                final_change=outcome.final_change,
                tol=tol,
                max_iter=max_iter,
            )
            if not outcome.converged:
                _warn(
                    messages,
                    f"{method.value} did not converge in {max_iter} iterations "
                    f"(last change {outcome.final_change:.3g}, tol {tol:.3g})",
                )
        else:
            x = getattr(_direct, method.value)(a_float, b_float)
    
    x = np.asarray(x, dtype=np.float64)
    residual = float(np.linalg.norm(a_float @ x - b_float))
    timing = timer.finish()
    
    result = Result(
        params=LinearParams(solution=_as_solution(x, was_vector), residual_norm=residual),
        info=info,
        timing=timing,
        backend_name=f"{'iterative' if method.is_iterative else 'direct'}_{method.value}",
        warnings=tuple(messages),
    )
    return LinearSystemSolution(_result=result)


def solve_decomposed(
    A: ArrayLike | Matrix,
    b: Any,
    method: DecomposedMethod = 'auto',
    *,
    check_condition: bool = True,
) -> LinearSystemSolution:
    """
    Solve A x = b through a decomposition.
    
    'auto' uses Cholesky when A is symmetric and QR (Householder) otherwise;
    a symmetric matrix that is not positive definite also falls back to QR.
    
    Args:
        A: Coefficient matrix (rows >= columns for 'qr' and 'svd')
        b: Right-hand side
        method: 'auto', 'lu', 'qr', 'cholesky' or 'svd'
        check_condition: Warn when cond(A) exceeds 1e12
    """
    if method not in ('auto', 'lu', 'qr', 'cholesky', 'svd'):
        raise ValueError(f"Unknown method: {method!r}")
    
    A, rhs, was_vector = _prepare(A, b)
    if method in ('auto', 'lu', 'cholesky'):
        check_square(A.shape, 'A')
    
    timer = SolveTimer()
    messages: list[str] = []
    info: dict[str, Any] = {'method': method}
    b_float = rhs.astype(np.float64)
    
    if check_condition:
        with timer.phase('condition'):
            info['condition_number'] = _condition_check(A, messages)
    _tolerance_tier(info, iterative=False)
    
    chosen = method
    with timer.phase('decompose'):
        if method == 'auto':
            chosen = 'cholesky' if A.is_symmetric(tol=1e-10) else 'qr'
            if chosen == 'cholesky':
                try:
                    factors = decomposition.cholesky(A)
                except NotPositiveDefiniteError:
                    chosen = 'qr'
            if chosen == 'qr':
                factors = decomposition.qr(A)
        else:
            factors = decomposition.decompose(
                A, {'lu': 'partial_pivot', 'qr': 'householder'}.get(method, method)
            )
    info['decomposition'] = chosen
    
    with timer.phase('substitute'):
        x = np.asarray(factors.solve(b_float), dtype=np.float64)
    
    residual = float(np.linalg.norm(np.asarray(A, dtype=np.float64) @ x - b_float))
    timing = timer.finish()
    
    result = Result(
        params=LinearParams(solution=_as_solution(x, was_vector), residual_norm=residual),
        info=info,
        timing=timing,
        backend_name=f"decomposition_{chosen}",
        warnings=tuple(messages),
    )
    return LinearSystemSolution(_result=result)
