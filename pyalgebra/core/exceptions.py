"""
Exception hierarchy for PyAlgebra.

All exceptions inherit from PyAlgebraError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyAlgebraError(Exception):
    """Base exception for all PyAlgebra errors."""
    pass


class ValidationError(PyAlgebraError):
    """
    Input validation failed.
    
    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Matrix or vector dimensions are incorrect or inconsistent.
    
    Raised on ragged rows, flattened data whose length does not equal
    rows x columns, elementwise operations on unequal shapes, and
    products whose inner dimensions disagree.
    """
    pass


class IndexOutOfRangeError(ValidationError, IndexError):
    """
    Row, column or element index outside the valid range.
    
    Attributes:
        index: The offending index
        size: Length of the indexed axis
        axis: 'row', 'column' or 'element'
    """
    
    def __init__(
        self,
        message: str,
        index: int | None = None,
        size: int | None = None,
        axis: str | None = None
    ):
        super().__init__(message)
        self.index = index
        self.size = size
        self.axis = axis


class ParseError(ValidationError):
    """
    Malformed textual formula or serialized matrix.
    
    Attributes:
        source: The full input that failed to parse
        position: Character offset where parsing stopped, if known
        fragment: The offending substring
    """
    
    def __init__(
        self,
        message: str,
        source: str | None = None,
        position: int | None = None,
        fragment: str | None = None
    ):
        super().__init__(message)
        self.source = source
        self.position = position
        self.fragment = fragment


class NumericalError(PyAlgebraError):
    """
    Numerical computation failed.
    
    Base class for errors arising from numerical issues during computation,
    e.g. normalizing a zero vector or a zero pivot during elimination.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.
    
    Raised when a matrix operation requires invertibility but the matrix
    is singular or numerically rank-deficient.
    
    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically min(n, p))
    """
    
    def __init__(
        self, 
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class NotPositiveDefiniteError(NumericalError):
    """
    Matrix is not positive definite.
    
    Raised when Cholesky decomposition (or a solver built on it) meets a
    non-positive pivot.
    
    Attributes:
        matrix_name: Name/description of the problematic matrix
        min_eigenvalue: Minimum eigenvalue, if computed
    """
    
    def __init__(
        self, 
        message: str,
        matrix_name: str | None = None,
        min_eigenvalue: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.min_eigenvalue = min_eigenvalue


class ConvergenceError(PyAlgebraError):
    """
    Iterative algorithm failed to converge.
    
    Raised by the QR-iteration eigen and Schur solvers, and on request by
    iterative linear solvers whose result reports non-convergence.
    
    Attributes:
        iterations: Number of iterations completed
        final_change: Final residual or iterate change
        reason: Why convergence failed (e.g., 'max_iterations', 'diverging')
        threshold: The convergence threshold that was not met
    """
    
    def __init__(
        self, 
        message: str, 
        iterations: int, 
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold


class UnsupportedOperationError(PyAlgebraError, NotImplementedError):
    """
    Operation is not defined for the given operand.
    
    Raised for cross products of non-3-vectors, vector-only norms requested
    on a matrix (and vice versa), and symbolic derivative or antiderivative
    rules that have no closed form here.
    
    Attributes:
        operation: Name of the rejected operation
        operand: Short description of the operand kind
    """
    
    def __init__(
        self,
        message: str,
        operation: str | None = None,
        operand: str | None = None
    ):
        super().__init__(message)
        self.operation = operation
        self.operand = operand
