"""
Linear system solution types.

Contains the parameter payload and user-facing solution wrapper.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from pyalgebra.core.exceptions import ConvergenceError
from pyalgebra.core.result import Result
from pyalgebra.core.tolerances import ToleranceTier
from pyalgebra.matrix import Matrix


@dataclass(frozen=True)
class LinearParams:
    """
    Parameter payload for A x = b.
    
    This is the immutable data computed by the solvers.
    """
    solution: Matrix
    residual_norm: float


@dataclass
class LinearSystemSolution:
    """
    User-facing result of solve().
    
    Iterative methods that hit their iteration cap still return the last
    iterate, but converged is False and a warning is recorded; call
    raise_if_not_converged() to turn that into a ConvergenceError.
    """
    _result: Result[LinearParams]
    
    @property
    def x(self) -> Matrix:
        return self._result.params.solution
    
    solution = x
    
    @property
    def residual_norm(self) -> float:
        """|A x - b|_2 (Frobenius for several right-hand sides)."""
        return self._result.params.residual_norm
    
    @property
    def method(self) -> str:
        return self._result.info['method']
    
    @property
    def converged(self) -> bool:
        return self._result.info.get('converged', True)
    
    @property
    def iterations(self) -> int | None:
        return self._result.info.get('iterations')
    
    @property
    def final_change(self) -> float | None:
        return self._result.info.get('final_change')
    
    @property
    def tolerance(self) -> ToleranceTier:
        """Comparison tier for this solve: LOOSE for iterative or ill-conditioned systems."""
        return self._result.info['tolerance']
    
    @property
    def info(self) -> dict[str, Any]:
        return self._result.info
    
    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing
    
    @property
    def backend_name(self) -> str:
        return self._result.backend_name
    
    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings
    
    def has_warning(self, substring: str) -> bool:
        return self._result.has_warning(substring)
    
    def verify(self, A: ArrayLike | Matrix, b: ArrayLike) -> bool:
        """True when A x matches b within self.tolerance."""
        x = np.asarray(self.x, dtype=np.float64)
        ax = np.asarray(A, dtype=np.float64) @ x
        rhs = np.asarray(b, dtype=np.float64).reshape(ax.shape)
        tier = self.tolerance
        return bool(np.allclose(ax, rhs, rtol=tier.rtol, atol=tier.atol))
    
    def raise_if_not_converged(self) -> None:
        """
        Raises:
            ConvergenceError: If an iterative method stopped at max_iter
        """
        if not self.converged:
            raise ConvergenceError(
                f"{self.method}: no convergence after {self.iterations} iterations "
                f"(last relative change {self.final_change:.3g})",
                iterations=self.iterations or 0,
                final_change=self.final_change,
                reason='max_iterations',
                threshold=self._result.info.get('tol'),
            )
    
    def summary(self) -> str:
        lines = [
            f"Method:        {self.method}",
            f"Residual norm: {self.residual_norm:.6g}",
        ]
        if self.iterations is not None:
            lines.append(f"Iterations:    {self.iterations}")
            lines.append(f"Converged:     {self.converged}")
        for w in self.warnings:
            lines.append(f"Warning:       {w}")
        return "\n".join(lines)
    
    def __repr__(self) -> str:
        return f"LinearSystemSolution(method={self.method!r}, x={self.x.flatten()!r})"
