"""
One-dimensional vectors.

A Vector is an immutable 1-D sequence of numbers using the same number
kinds as Matrix. It converts to and from Row and Column when a matrix
shape is needed.
"""

from __future__ import annotations

from typing import Any, Iterator, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.exceptions import (
    DimensionError,
    NumericalError,
    UnsupportedOperationError,
    ValidationError,
)
from pyalgebra.core.numeric import (
    NumberKind,
    as_array,
    is_number,
    kind_of,
    kind_of_array,
    normalize_scalar,
    promote,
)
from pyalgebra.core.tolerances import DEFAULT, ToleranceTier
from pyalgebra.core.validation import check_index, check_positive
from pyalgebra.matrix import Column, Diagonal, Matrix, Norm, Row
from pyalgebra.matrix.norms import vector_distance, vector_norm


class Vector:
    """
    Immutable numeric vector.
    
    Operators:
        v + w, v - w    elementwise, equal lengths required
        v * w, v / w    elementwise (Hadamard) for vectors
        v * c, v / c    scalar broadcast
        v @ w           dot product
    
    Example:
        >>> v = Vector([3, 4])
        >>> v.magnitude
        5.0
        >>> v.normalize().to_list()
        [0.6, 0.8]
    """
    
    __slots__ = ('_data',)
    __hash__ = None
    
    def __init__(self, values: ArrayLike | Matrix | Vector = (), *, is_double: bool = False):
        if isinstance(values, Vector):
            array = values._data
        elif isinstance(values, Matrix):
            if 1 not in values.shape and values.shape != (0, 0):
                raise DimensionError(
                    f"Vector: expected a 1 x N or N x 1 matrix, got "
                    f"{values.row_count}x{values.column_count}"
                )
            array = values.to_numpy().ravel()
        else:
            array = np.asarray(values if isinstance(values, np.ndarray) else list(values))
        if array.ndim != 1:
            raise DimensionError(f"Vector: expected a 1D sequence, got shape {array.shape}")
        kind = kind_of_array(array)
        if is_double and kind < NumberKind.REAL:
            kind = NumberKind.REAL
        self._data = as_array(array, kind).copy()
        self._data.setflags(write=False)
    
    # ═══════════════════════════════════════════════════════════════════
    # Factories
    # ═══════════════════════════════════════════════════════════════════
    
    @classmethod
    def zeros(cls, length: int) -> Vector:
        return cls(np.zeros(length, dtype=np.int64))
    
    @classmethod
    def ones(cls, length: int) -> Vector:
        return cls(np.ones(length, dtype=np.int64))
    
    @classmethod
    def linspace(cls, start: float, stop: float, number: int = 50) -> Vector:
        """number evenly spaced values from start to stop inclusive."""
        check_positive(number, 'number')
        return cls(np.linspace(start, stop, number))
    
    @classmethod
    def range(cls, end: int, *, start: int = 1, step: int = 1) -> Vector:
        """Integers start, start + step, ... below end."""
        if start >= end:
            raise ValidationError(f"range: start ({start}) must be less than end ({end})")
        check_positive(step, 'step')
        return cls(np.arange(start, end, step, dtype=np.int64))
    
    # ═══════════════════════════════════════════════════════════════════
    # Properties and conversion
    # ═══════════════════════════════════════════════════════════════════
    
    @property
    def length(self) -> int:
        return self._data.size
    
    @property
    def kind(self) -> NumberKind:
        return kind_of_array(self._data)
    
    def __len__(self) -> int:
        return self.length
    
    def __iter__(self) -> Iterator[Any]:
        return iter(self.to_list())
    
    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, slice):
            return Vector(self._data[key])
        i = check_index(key, self.length, 'element')
        return normalize_scalar(self._data[i])
    
    def __array__(self, dtype: Any = None, copy: Any = None) -> NDArray[Any]:
        return np.array(self._data, dtype=dtype)
    
    def to_numpy(self) -> NDArray[Any]:
        return self._data.copy()
    
    def to_list(self) -> list[Any]:
        return [normalize_scalar(v) for v in self._data]
    
    def to_row(self) -> Row:
        return Row(self._data)
    
    def to_column(self) -> Column:
        return Column(self._data)
    
    def to_diagonal(self) -> Diagonal:
        return Diagonal(self._data)
    
    def to_matrix(self, rows: int, columns: int) -> Matrix:
        """Row-major reshape into rows x columns."""
        return Matrix.from_flattened_list(self.to_list(), rows, columns)
    
    def with_value_at(self, index: int, value: Any) -> Vector:
        i = check_index(index, self.length, 'element')
        values = self.to_list()
        values[i] = value
        return Vector(values)
    
    def __repr__(self) -> str:
        return f"Vector({self.to_list()!r})"
    
    def __str__(self) -> str:
        return "[" + ", ".join(str(v) for v in self.to_list()) + "]"
    
    # ═══════════════════════════════════════════════════════════════════
    # Arithmetic
    # ═══════════════════════════════════════════════════════════════════
    
    def _check_length(self, other: Vector, operation: str) -> None:
        if self.length != other.length:
            raise DimensionError(
                f"{operation}: vectors must have the same length, "
                f"got {self.length} and {other.length}"
            )
    
    def _elementwise(self, other: Any, op, operation: str, reflected: bool = False) -> Vector:
        if isinstance(other, Vector):
            self._check_length(other, operation)
            rhs: Any = other._data
            rhs_kind = kind_of_array(rhs)
        elif is_number(other):
            rhs = other
            rhs_kind = kind_of(other)
        else:
            return NotImplemented
        target = promote(self.kind, rhs_kind)
        lhs = as_array(self._data, target)
        if isinstance(rhs, np.ndarray):
            rhs = as_array(rhs, target)
        return Vector(op(rhs, lhs) if reflected else op(lhs, rhs))
    
    def __add__(self, other: Any) -> Vector:
        return self._elementwise(other, np.add, 'add')
    
    def __radd__(self, other: Any) -> Vector:
        return self._elementwise(other, np.add, 'add', reflected=True)
    
    def __sub__(self, other: Any) -> Vector:
        return self._elementwise(other, np.subtract, 'subtract')
    
    def __rsub__(self, other: Any) -> Vector:
        return self._elementwise(other, np.subtract, 'subtract', reflected=True)
    
    def __mul__(self, other: Any) -> Vector:
        return self._elementwise(other, np.multiply, 'multiply')
    
    def __rmul__(self, other: Any) -> Vector:
        return self._elementwise(other, np.multiply, 'multiply', reflected=True)
    
    def __truediv__(self, other: Any) -> Vector:
        if is_number(other) and other == 0:
            raise NumericalError("divide: division of a vector by zero")
        if isinstance(other, Vector) and np.any(other._data == 0):
            raise NumericalError("divide: divisor vector contains zeros")
        return self._elementwise(other, np.true_divide, 'divide')
    
    def __neg__(self) -> Vector:
        return Vector(-self._data)
    
    def __matmul__(self, other: Any) -> Any:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.dot(other)
    
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.length == other.length and bool(np.all(self._data == other._data))
    
    def is_almost_equal(self, other: Vector, tier: ToleranceTier = DEFAULT) -> bool:
        self._check_length(other, 'is_almost_equal')
        return bool(np.allclose(
            np.asarray(self._data, dtype=np.complex128),
            np.asarray(other._data, dtype=np.complex128),
            rtol=tier.rtol, atol=tier.atol,
        ))
    
    def scale(self, factor: Any) -> Vector:
        return self * factor
    
    # ═══════════════════════════════════════════════════════════════════
    # Products and geometry
    # ═══════════════════════════════════════════════════════════════════
    
    def dot(self, other: Vector) -> Any:
        """Sum of elementwise products (no conjugation)."""
        self._check_length(other, 'dot')
        return normalize_scalar(np.dot(self._data, other._data)) if self.length else 0
    
    inner_product = dot
    
    def cross(self, other: Vector) -> Vector:
        """
        Cross product of two 3-vectors.
        
        Raises:
            UnsupportedOperationError: If either vector does not have length 3
        """
        if self.length != 3 or other.length != 3:
            raise UnsupportedOperationError(
                f"cross product is only defined for 3-vectors, got lengths "
                f"{self.length} and {other.length}",
                operation='cross',
                operand=f"Vector[{self.length}] x Vector[{other.length}]",
            )
        a, b = self.to_list(), other.to_list()
        return Vector([
            a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0],
        ])
    
    def outer_product(self, other: Vector) -> Matrix:
        return self.to_column() @ other.to_row()
    
    @property
    def magnitude(self) -> float:
        return self.norm()
    
    def norm(self, norm: Norm | str = Norm.FROBENIUS, **covariance: Any) -> float:
        """
        Vector norm.
        
        Args:
            norm: Any vector norm; MAHALANOBIS also needs covariance= or
                inverse_covariance=
                
        Raises:
            UnsupportedOperationError: For the matrix-only SPECTRAL and TRACE
        """
        return vector_norm(self._data, norm, **covariance)
    
    def normalize(self, norm: Norm | str = Norm.FROBENIUS) -> Vector:
        """
        Scale to unit norm.
        
        Raises:
            NumericalError: For a zero vector
        """
        size = self.norm(norm)
        if size == 0:
            raise NumericalError("normalize: cannot normalize a zero vector")
        return Vector(np.asarray(self._data, dtype=np.result_type(self._data.dtype, np.float64)) / size)
    
    def distance(self, other: Vector, norm: Norm | str = Norm.FROBENIUS, **covariance: Any) -> float:
        self._check_length(other, 'distance')
        return vector_distance(self._data, other._data, norm, **covariance)
    
    def is_zero(self) -> bool:
        return bool(np.all(self._data == 0))
    
    def is_unit(self, tol: float = 1e-10) -> bool:
        return abs(self.norm() - 1.0) < tol
    
    def _require_nonzero(self, other: Vector, operation: str) -> None:
        if self.is_zero() or other.is_zero():
            raise NumericalError(f"{operation}: undefined for a zero vector")
    
    def angle(self, other: Vector) -> float:
        """Angle in radians between two nonzero vectors."""
        self._check_length(other, 'angle')
        self._require_nonzero(other, 'angle')
        cosine = float(np.real(self.dot(other))) / (self.norm() * other.norm())
        return float(np.arccos(np.clip(cosine, -1.0, 1.0)))
    
    def projection(self, onto: Vector) -> Vector:
        """(v . u / u . u) u"""
        self._check_length(onto, 'projection')
        if onto.is_zero():
            raise NumericalError("projection: cannot project onto a zero vector")
        return onto * (float(np.real(self.dot(onto))) / float(np.real(onto.dot(onto))))
    
    def is_parallel_to(self, other: Vector, tol: float = 1e-10) -> bool:
        self._require_nonzero(other, 'is_parallel_to')
        return self.cross(other).magnitude < tol
    
    def is_perpendicular_to(self, other: Vector, tol: float = 1e-10) -> bool:
        self._check_length(other, 'is_perpendicular_to')
        self._require_nonzero(other, 'is_perpendicular_to')
        return abs(self.dot(other)) < tol
    
    # ═══════════════════════════════════════════════════════════════════
    # Reductions
    # ═══════════════════════════════════════════════════════════════════
    
    def sum(self) -> Any:
        return normalize_scalar(np.sum(self._data)) if self.length else 0
    
    def product(self) -> Any:
        return normalize_scalar(np.prod(self._data)) if self.length else 1
    
    def mean(self) -> float:
        if not self.length:
            raise ValidationError("mean: empty vector")
        return float(np.mean(np.asarray(self._data, dtype=np.float64)))
    
    def min(self) -> Any:
        return normalize_scalar(np.min(self._data))
    
    def max(self) -> Any:
        return normalize_scalar(np.max(self._data))
    
    def rescale(self) -> Vector:
        """Min-max rescale into [0, 1]; a constant vector maps to zeros."""
        values = np.asarray(self._data, dtype=np.float64)
        span = values.max() - values.min() if values.size else 0.0
        if span == 0:
            return Vector(np.zeros_like(values))
        return Vector((values - values.min()) / span)


def as_vector(values: Sequence[Any] | Vector | Matrix, name: str) -> Vector:
    """Accept a Vector, a Row/Column or a flat sequence at an API boundary."""
    if isinstance(values, Vector):
        return values
    try:
        return Vector(values)
    except TypeError as e:
        raise ValidationError(f"{name}: cannot convert to vector: {e}") from e
