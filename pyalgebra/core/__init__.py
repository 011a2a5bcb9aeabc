"""
Core infrastructure for PyAlgebra.

This module provides shared abstractions and utilities used by every
subpackage (matrix, vector, decomposition, linear, expression).

Key components:
    exceptions: Exception hierarchy
    result: Generic Result[P] envelope
    validation: Input validators
    numeric: Element kinds and promotion rules
    tolerances: Default tolerances and iteration caps
    timing: Section timer
"""

from pyalgebra.core.result import Result
from pyalgebra.core.numeric import NumberKind, kind_of, promote
from pyalgebra.core.exceptions import (
    PyAlgebraError,
    ValidationError,
    DimensionError,
    IndexOutOfRangeError,
    ParseError,
    NumericalError,
    SingularMatrixError,
    NotPositiveDefiniteError,
    ConvergenceError,
    UnsupportedOperationError,
)

__all__ = [
    # Result
    "Result",
    # Numeric model
    "NumberKind",
    "kind_of",
    "promote",
    # Exceptions
    "PyAlgebraError",
    "ValidationError",
    "DimensionError",
    "IndexOutOfRangeError",
    "ParseError",
    "NumericalError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
    "ConvergenceError",
    "UnsupportedOperationError",
]
