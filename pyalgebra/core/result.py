"""
Generic result container for PyAlgebra computations.

The Result class provides a standardized envelope that solver results use.
This enables shared tooling for timing, diagnostics and reproducibility
while allowing each solver family to define its own parameter structure.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (method, converged, iterations)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for numerical computations.
    
    Type Parameters:
        P: The solver-specific parameter payload type
        
    Attributes:
        params: Solver-specific payload (solution vector, residual, ...)
        info: Structured metadata (method, convergence, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the routine that produced this result
        warnings: Non-fatal issues encountered during computation
        
    Examples:
        >>> # Direct method (no convergence notion)
        >>> Result(
        ...     params=LinearParams(solution=x, residual_norm=0.0),
        ...     info={'method': 'gauss_elimination'},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='direct_gauss_elimination'
        ... )
        
        >>> # Iterative method
        >>> Result(
        ...     params=LinearParams(solution=x, residual_norm=1e-11),
        ...     info={'method': 'jacobi', 'converged': True, 'iterations': 23},
        ...     timing={'total_seconds': 0.002, 'iterate': 0.0018},
        ...     backend_name='iterative_jacobi'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    
    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
