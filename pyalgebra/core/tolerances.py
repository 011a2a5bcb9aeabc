"""
Tolerances and default solver settings.

Every solver takes its tolerance and iteration cap as keyword arguments;
the defaults live here so they are stated once. ToleranceTier pairs are
used for approximate matrix comparison and by the test suite.
"""

from dataclasses import dataclass

import numpy as np


# Machine epsilon for float64
EPSILON_64: float = float(np.finfo(np.float64).eps)  # ~2.22e-16

# Iterative solvers and QR-iteration eigen/Schur solvers
DEFAULT_TOL: float = 1e-10
DEFAULT_MAX_ITER: int = 1000

# Successive over-relaxation factor
DEFAULT_OMEGA: float = 1.0

# Ridge regression penalty
DEFAULT_ALPHA: float = 0.1

# Pivot magnitude treated as zero during elimination
SINGULAR_TOL: float = 1e-12

# Entries at or below this magnitude count as zero in structure checks
STRUCTURE_TOL: float = 1e-10

# Singular values at or below this fraction of the largest count as zero
SINGULAR_VALUE_FLOOR: float = 1e-15

# Solves warn above this condition number
CONDITION_WARN_THRESHOLD: float = 1e12

# Above this condition number results are compared with the LOOSE tier
ILL_CONDITIONED_THRESHOLD: float = 1e4

# A·v ≈ λ·v check, Chebyshev norm
EIGEN_VERIFY_TOL: float = 1e-6

# Step used by numeric one-sided limits
LIMIT_STEP: float = 1e-4


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Direct methods on well-conditioned input
DEFAULT = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='default',
    description='Double precision, direct methods',
)

# Iterative methods or ill-conditioned input
LOOSE = ToleranceTier(
    rtol=1e-5,
    atol=1e-6,
    name='loose',
    description='Iterative methods or ill-conditioned input (cond > 1e4)',
)


def select_tolerance(
    iterative: bool = False,
    is_ill_conditioned: bool = False,
) -> ToleranceTier:
    """Select the tolerance tier for comparing a solver's output."""
    if iterative or is_ill_conditioned:
        return LOOSE
    return DEFAULT
