"""
Linear system solvers.

Public API:
    solve(A, b, method) -> LinearSystemSolution
    solve_decomposed(A, b, method='auto') -> LinearSystemSolution
    LinearSystemMethod: Direct and iterative method selector
"""

from pyalgebra.linear.solvers import LinearSystemMethod, solve, solve_decomposed
from pyalgebra.linear.solution import LinearParams, LinearSystemSolution

__all__ = [
    "solve",
    "solve_decomposed",
    "LinearSystemMethod",
    "LinearSystemSolution",
    "LinearParams",
]
