"""
Dense matrix container.

Matrix wraps a read-only 2D numpy array whose dtype follows the element
kind (int64, object/Fraction, float64, complex128). Operations return new
matrices; set_value_at is the only in-place mutator. Row/column/diagonal
editing (push, pop, splice, swap) goes through an explicit MutableView
that is frozen back into a new Row, Column or Diagonal.
"""

from __future__ import annotations

from enum import Enum
from fractions import Fraction
from typing import Any, Iterator, Sequence, TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyalgebra.core.exceptions import (
    DimensionError,
    NumericalError,
    ParseError,
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
from pyalgebra.core.tolerances import (
    DEFAULT,
    SINGULAR_VALUE_FLOOR,
    STRUCTURE_TOL,
    ToleranceTier,
)
from pyalgebra.core.validation import (
    check_flat_length,
    check_index,
    check_inner_dimensions,
    check_ndim,
    check_rectangular,
    check_same_shape,
    check_square,
)
from pyalgebra.matrix import _elimination, _structure
from pyalgebra.matrix.norms import Norm, matrix_distance, matrix_norm

if TYPE_CHECKING:
    from pyalgebra.matrix.views import Column, Diagonal, MutableView, Row


class Rescale(Enum):
    ROW = 'row'
    COLUMN = 'column'
    ALL = 'all'


_HEADER = np.dtype('<i4')
_PAYLOAD = np.dtype('<f8')


def _is_index(key: Any) -> bool:
    return isinstance(key, (int, np.integer)) and not isinstance(key, (bool, np.bool_))


class Matrix:
    """
    Two-dimensional, row-major numeric matrix.
    
    Construct from nested sequences (or any 2D array-like); every row must
    have the same length. is_double=True coerces integer and rational
    entries to float.
    
    Indexing:
        m[i]        Row i (a copy)
        m[i][j]     element (both indices validated)
        m[i, j]     element
        m[a:b]      rows a..b-1 as a new Matrix
        m[a:b, c:d] submatrix copy, end-exclusive on both axes
        m[:, j]     Column j
    
    Example:
        >>> A = Matrix([[1, 2], [3, 4]])
        >>> A.determinant()
        -2
        >>> (A * Matrix.eye(2)) == A
        True
    """
    
    __slots__ = ('_data',)
    __hash__ = None  # set_value_at mutates
    
    def __init__(self, data: ArrayLike | Matrix = (), *, is_double: bool = False):
        if isinstance(data, Matrix):
            array = data._data
        elif isinstance(data, np.ndarray):
            array = data
        else:
            try:
                rows = [list(r) for r in data]
            except TypeError as e:
                raise DimensionError(f"data: expected a sequence of rows: {e}") from e
            check_rectangular(rows, 'data')
            array = rows if rows else np.zeros((0, 0))
        
        if not isinstance(array, np.ndarray) or array.dtype != object:
            array = np.array(array)
        if array.ndim == 1 and array.size == 0:
            array = array.reshape(0, 0)
        check_ndim(array, 2, 'data')
        
        kind = kind_of_array(array)
        if is_double and kind < NumberKind.REAL:
            kind = NumberKind.REAL
        self._data = as_array(array, kind).copy()
        self._data.setflags(write=False)
    
    # ═══════════════════════════════════════════════════════════════════
    # Factories
    # ═══════════════════════════════════════════════════════════════════
    
    @classmethod
    def _wrap(cls, array: NDArray[Any]) -> Matrix:
        """Wrap a freshly computed array without re-validating rows."""
        return Matrix(np.asarray(array))
    
    @classmethod
    def from_list(cls, rows: Sequence[Sequence[Any]], *, is_double: bool = False) -> Matrix:
        return Matrix(rows, is_double=is_double)
    
    @classmethod
    def from_rows(cls, rows: Sequence[Any], *, is_double: bool = False) -> Matrix:
        """Stack Row views (or plain sequences) top to bottom."""
        return Matrix([_flat(r) for r in rows], is_double=is_double)
    
    @classmethod
    def from_columns(cls, columns: Sequence[Any], *, is_double: bool = False) -> Matrix:
        """Place Column views (or plain sequences) left to right."""
        cols = [_flat(c) for c in columns]
        check_rectangular(cols, 'columns')
        if not cols:
            return Matrix()
        return Matrix([list(r) for r in zip(*cols)], is_double=is_double)
    
    @classmethod
    def from_flattened_list(
        cls,
        values: Sequence[Any],
        rows: int,
        columns: int,
        *,
        is_double: bool = False,
    ) -> Matrix:
        """Fill a rows x columns matrix in row-major order."""
        values = list(values)
        check_flat_length(len(values), rows, columns, 'values')
        return Matrix(
            [values[i * columns:(i + 1) * columns] for i in range(rows)],
            is_double=is_double,
        )
    
    @classmethod
    def from_diagonal(cls, values: Sequence[Any], *, is_double: bool = False) -> Matrix:
        """Square matrix with the given diagonal and zeros elsewhere."""
        diag = as_array(list(values))
        out = np.zeros((diag.size, diag.size), dtype=diag.dtype)
        np.fill_diagonal(out, diag)
        return Matrix(out, is_double=is_double)
    
    @classmethod
    def fill(cls, rows: int, columns: int, value: Any, *, is_double: bool = False) -> Matrix:
        check_flat_length(rows * columns, rows, columns, 'fill')
        kind_of(value)
        return Matrix([[value] * columns for _ in range(rows)], is_double=is_double)
    
    @classmethod
    def zeros(cls, rows: int, columns: int, *, is_double: bool = False) -> Matrix:
        return cls.fill(rows, columns, 0, is_double=is_double)
    
    @classmethod
    def ones(cls, rows: int, columns: int, *, is_double: bool = False) -> Matrix:
        return cls.fill(rows, columns, 1, is_double=is_double)
    
    @classmethod
    def eye(cls, n: int, *, is_double: bool = False) -> Matrix:
        """n x n identity."""
        if n < 0:
            raise ValidationError(f"n: must be non-negative, got {n}")
        return Matrix(np.eye(n, dtype=np.int64), is_double=is_double)
    
    identity = eye
    
    @classmethod
    def random(
        cls,
        rows: int,
        columns: int,
        *,
        low: float = 0,
        high: float = 1,
        is_double: bool = True,
        seed: int | None = None,
    ) -> Matrix:
        """
        Uniform random matrix.
        
        Doubles are drawn from [low, high); integers from [low, high].
        """
        check_flat_length(rows * columns, rows, columns, 'random')
        if high < low:
            raise ValidationError(f"random: high ({high}) must be >= low ({low})")
        rng = np.random.default_rng(seed)
        if is_double:
            return Matrix(rng.uniform(low, high, size=(rows, columns)))
        return Matrix(rng.integers(int(low), int(high), size=(rows, columns), endpoint=True))
    
    @classmethod
    def from_bytes(cls, payload: bytes) -> Matrix:
        """
        Decode the binary layout written by to_bytes.
        
        Layout: two little-endian int32 (rows, columns), then rows*columns
        little-endian float64 values in row-major order.
        
        Raises:
            ParseError: If the header is truncated or disagrees with the payload size
        """
        if len(payload) < 8:
            raise ParseError(
                f"matrix header needs 8 bytes, got {len(payload)}",
                position=0,
            )
        rows, columns = (int(v) for v in np.frombuffer(payload[:8], dtype=_HEADER))
        if rows < 0 or columns < 0:
            raise ParseError(
                f"matrix header declares negative shape {rows}x{columns}",
                position=0,
            )
        expected = rows * columns * _PAYLOAD.itemsize
        if len(payload) - 8 != expected:
            raise ParseError(
                f"matrix header declares {rows}x{columns} ({expected} bytes) "
                f"but payload has {len(payload) - 8} bytes",
                position=8,
            )
        values = np.frombuffer(payload[8:], dtype=_PAYLOAD).reshape(rows, columns)
        return Matrix(values.astype(np.float64))
    
    def to_bytes(self) -> bytes:
        """Binary layout: int32 rows, int32 columns, row-major float64 (all little-endian)."""
        if self.kind is NumberKind.COMPLEX:
            raise ValidationError("to_bytes: complex matrices have no binary layout")
        header = np.array(self.shape, dtype=_HEADER).tobytes()
        return header + np.asarray(self._data, dtype=_PAYLOAD).tobytes()
    
    # ═══════════════════════════════════════════════════════════════════
    # Shape and conversion
    # ═══════════════════════════════════════════════════════════════════
    
    @property
    def shape(self) -> tuple[int, int]:
        return (int(self._data.shape[0]), int(self._data.shape[1]))
    
    @property
    def row_count(self) -> int:
        return self.shape[0]
    
    @property
    def column_count(self) -> int:
        return self.shape[1]
    
    @property
    def kind(self) -> NumberKind:
        return kind_of_array(self._data)
    
    @property
    def is_double(self) -> bool:
        return self.kind >= NumberKind.REAL
    
    @property
    def is_square(self) -> bool:
        return self.row_count == self.column_count
    
    @property
    def T(self) -> Matrix:
        return self.transpose()
    
    def to_numpy(self) -> NDArray[Any]:
        """Writable copy of the underlying array."""
        return self._data.copy()
    
    def __array__(self, dtype: Any = None, copy: Any = None) -> NDArray[Any]:
        return self._data.astype(dtype) if dtype is not None else self._data.copy()
    
    def to_list(self) -> list[list[Any]]:
        return [[normalize_scalar(v) for v in row] for row in self._data]
    
    def flatten(self) -> list[Any]:
        """Row-major element list."""
        return [normalize_scalar(v) for v in self._data.ravel()]
    
    def copy(self) -> Matrix:
        return Matrix(self._data)
    
    def __len__(self) -> int:
        return self.row_count
    
    def __iter__(self) -> Iterator[Row]:
        for i in range(self.row_count):
            yield self.row(i)
    
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_list()!r})"
    
    def __str__(self) -> str:
        cells = [[str(v) for v in row] for row in self.to_list()]
        if not cells or not cells[0]:
            return f"{type(self).__name__}(empty {self.row_count}x{self.column_count})"
        width = max(len(c) for row in cells for c in row)
        lines = ["  ".join(c.rjust(width) for c in row) for row in cells]
        return "\n".join(lines)
    
    # ═══════════════════════════════════════════════════════════════════
    # Indexing
    # ═══════════════════════════════════════════════════════════════════
    
    def __getitem__(self, key: Any) -> Any:
        """
        m[i] Row, m[i, j] element, m[:, j] Column, slices give a Matrix copy.
        
        Integer indices count from the end when negative, as for lists;
        both bounds are checked and anything outside [-size, size) raises
        IndexOutOfRangeError.
        """
        from pyalgebra.matrix.views import Column, Row
        
        if isinstance(key, tuple):
            if len(key) != 2:
                raise ValidationError(f"matrix index takes at most 2 axes, got {len(key)}")
            r, c = key
            if _is_index(r) and _is_index(c):
                return self.value_at(r, c)
            if _is_index(r):
                r = check_index(r, self.row_count, 'row')
                return Row(self._data[r, c])
            if _is_index(c):
                c = check_index(c, self.column_count, 'column')
                return Column(self._data[r, c])
            return Matrix._wrap(self._data[r, c])
        if _is_index(key):
            return self.row(key)
        if isinstance(key, slice):
            return Matrix._wrap(self._data[key])
        raise ValidationError(f"unsupported matrix index {key!r}")
    
    def value_at(self, row: int, column: int) -> Any:
        r = check_index(row, self.row_count, 'row')
        c = check_index(column, self.column_count, 'column')
        return normalize_scalar(self._data[r, c])
    
    def row(self, index: int) -> Row:
        from pyalgebra.matrix.views import Row
        i = check_index(index, self.row_count, 'row')
        return Row(self._data[i])
    
    def column(self, index: int) -> Column:
        from pyalgebra.matrix.views import Column
        j = check_index(index, self.column_count, 'column')
        return Column(self._data[:, j])
    
    def diagonal(self) -> Diagonal:
        """Main diagonal as a Diagonal matrix."""
        from pyalgebra.matrix.views import Diagonal
        return Diagonal(np.diagonal(self._data))
    
    def slice(
        self,
        row_start: int,
        row_end: int,
        column_start: int = 0,
        column_end: int | None = None,
    ) -> Matrix:
        """Submatrix copy; both ranges are end-exclusive."""
        if column_end is None:
            column_end = self.column_count
        for start, end, size, axis in (
            (row_start, row_end, self.row_count, 'row'),
            (column_start, column_end, self.column_count, 'column'),
        ):
            if not 0 <= start <= end <= size:
                raise ValidationError(
                    f"{axis} range [{start}, {end}) invalid for size {size}"
                )
        return Matrix._wrap(self._data[row_start:row_end, column_start:column_end])
    
    submatrix = slice
    
    def set_value_at(self, row: int, column: int, value: Any) -> None:
        """
        Overwrite one element in place.
        
        The new value may promote the matrix kind (e.g. an int matrix
        receiving a float becomes a float matrix).
        """
        r = check_index(row, self.row_count, 'row')
        c = check_index(column, self.column_count, 'column')
        target = promote(self.kind, kind_of(value))
        data = as_array(self._data, target).copy()
        data[r, c] = value if target is not NumberKind.RATIONAL else Fraction(value)
        data.setflags(write=False)
        self._data = data
    
    def with_value_at(self, row: int, column: int, value: Any) -> Matrix:
        """Copy with one element replaced."""
        out = self.copy()
        out.set_value_at(row, column, value)
        return out
    
    def mutable_row(self, index: int) -> MutableView:
        from pyalgebra.matrix.views import MutableView
        return MutableView.of(self.row(index))
    
    def mutable_column(self, index: int) -> MutableView:
        from pyalgebra.matrix.views import MutableView
        return MutableView.of(self.column(index))
    
    def mutable_diagonal(self) -> MutableView:
        from pyalgebra.matrix.views import MutableView
        return MutableView.of(self.diagonal())
    
    # ═══════════════════════════════════════════════════════════════════
    # Arithmetic
    # ═══════════════════════════════════════════════════════════════════
    
    def _operand(self, other: Any, operation: str) -> NDArray[Any] | Any:
        if isinstance(other, Matrix):
            check_same_shape(self.shape, other.shape, operation)
            return other._data
        if is_number(other):
            return other
        return NotImplemented
    
    def _elementwise(self, other: Any, op, operation: str, reflected: bool = False) -> Matrix:
        rhs = self._operand(other, operation)
        if rhs is NotImplemented:
            return NotImplemented
        rhs_kind = kind_of_array(rhs) if isinstance(rhs, np.ndarray) else kind_of(rhs)
        target = promote(self.kind, rhs_kind)
        lhs = as_array(self._data, target)
        if isinstance(rhs, np.ndarray):
            rhs = as_array(rhs, target)
        return Matrix._wrap(op(rhs, lhs) if reflected else op(lhs, rhs))
    
    def __add__(self, other: Any) -> Matrix:
        return self._elementwise(other, np.add, 'add')
    
    def __radd__(self, other: Any) -> Matrix:
        return self._elementwise(other, np.add, 'add', reflected=True)
    
    def __sub__(self, other: Any) -> Matrix:
        return self._elementwise(other, np.subtract, 'subtract')
    
    def __rsub__(self, other: Any) -> Matrix:
        return self._elementwise(other, np.subtract, 'subtract', reflected=True)
    
    def __neg__(self) -> Matrix:
        return Matrix._wrap(-self._data)
    
    def __mul__(self, other: Any) -> Matrix:
        """Matrix product for matrices, scalar broadcast otherwise."""
        if isinstance(other, Matrix):
            return self.__matmul__(other)
        return self._elementwise(other, np.multiply, 'multiply')
    
    def __rmul__(self, other: Any) -> Matrix:
        return self._elementwise(other, np.multiply, 'multiply', reflected=True)
    
    def __matmul__(self, other: Any) -> Matrix:
        if not isinstance(other, Matrix):
            return NotImplemented
        check_inner_dimensions(self.shape, other.shape)
        target = promote(self.kind, other.kind)
        lhs = as_array(self._data, target)
        rhs = as_array(other._data, target)
        if target is NumberKind.RATIONAL:
            # np.matmul has no object loop; np.dot does
            return Matrix._wrap(np.dot(lhs, rhs))
        return Matrix._wrap(lhs @ rhs)
    
    def __truediv__(self, other: Any) -> Matrix:
        """
        Divide by a scalar or, elementwise, by an equally shaped matrix.
        
        Integer division promotes to REAL; rational stays exact.
        """
        if is_number(other) and other == 0:
            raise NumericalError("divide: division of a matrix by zero")
        if isinstance(other, Matrix) and np.any(other._data == 0):
            raise NumericalError("divide: divisor matrix contains zeros")
        return self._elementwise(other, np.true_divide, 'divide')
    
    def __pow__(self, exponent: int) -> Matrix:
        """Matrix power by repeated squaring; negative powers use the inverse."""
        if not _is_index(exponent):
            raise ValidationError(f"matrix power needs an integer exponent, got {exponent!r}")
        check_square(self.shape, 'power')
        base = self if exponent >= 0 else self.inverse()
        n = abs(int(exponent))
        result = Matrix.eye(self.row_count)
        while n:
            if n & 1:
                result = result @ base
            base = base @ base
            n >>= 1
        return result
    
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.all(self._data == other._data))
    
    def element_multiply(self, other: Matrix) -> Matrix:
        """Hadamard product."""
        return self._elementwise(other, np.multiply, 'element_multiply')
    
    def element_divide(self, other: Matrix) -> Matrix:
        return self / other
    
    def scale(self, factor: Any) -> Matrix:
        return self * factor
    
    def is_almost_equal(self, other: Matrix, tier: ToleranceTier = DEFAULT) -> bool:
        """Elementwise comparison within tier.rtol/tier.atol."""
        if self.shape != other.shape:
            return False
        a = self._data.astype(np.complex128 if self.kind is NumberKind.COMPLEX else np.float64)
        b = other._data.astype(np.complex128 if other.kind is NumberKind.COMPLEX else np.float64)
        return bool(np.allclose(a, b, rtol=tier.rtol, atol=tier.atol))
    
    # ═══════════════════════════════════════════════════════════════════
    # Structural operations
    # ═══════════════════════════════════════════════════════════════════
    
    def transpose(self) -> Matrix:
        return Matrix._wrap(self._data.T)
    
    def conjugate(self) -> Matrix:
        if self.kind is not NumberKind.COMPLEX:
            return self.copy()
        return Matrix._wrap(np.conjugate(self._data))
    
    def reshape(self, rows: int, columns: int) -> Matrix:
        """Refill a rows x columns matrix from the row-major elements."""
        check_flat_length(self._data.size, rows, columns, 'reshape')
        return Matrix._wrap(self._data.reshape(rows, columns))
    
    def flip(self, axis: int = 0) -> Matrix:
        """Reverse row order (axis=0) or the elements of each row (axis=1)."""
        if axis not in (0, 1):
            raise ValidationError(f"flip: axis must be 0 or 1, got {axis}")
        return Matrix._wrap(np.flip(self._data, axis=axis))
    
    def rescale(self, by: Rescale | str = Rescale.COLUMN) -> Matrix:
        """
        Min-max normalize to [0, 1] per row, per column, or globally.
        
        A constant slice has no range and maps to 0.
        """
        by = Rescale(by)
        a = self._data.astype(np.float64)
        if a.size == 0:
            return Matrix._wrap(a)
        axis = {Rescale.ROW: 1, Rescale.COLUMN: 0, Rescale.ALL: None}[by]
        lo = np.min(a, axis=axis, keepdims=True)
        hi = np.max(a, axis=axis, keepdims=True)
        span = hi - lo
        out = np.divide(a - lo, span, out=np.zeros_like(a), where=span != 0)
        return Matrix._wrap(out)
    
    def append_rows(self, other: Matrix) -> Matrix:
        if self.column_count != other.column_count and self._data.size:
            raise DimensionError(
                f"append_rows: column counts differ ({self.column_count} vs {other.column_count})"
            )
        target = promote(self.kind, other.kind)
        if not self._data.size:
            return other.copy()
        return Matrix._wrap(np.vstack([as_array(self._data, target), as_array(other._data, target)]))
    
    def append_columns(self, other: Matrix) -> Matrix:
        if self.row_count != other.row_count and self._data.size:
            raise DimensionError(
                f"append_columns: row counts differ ({self.row_count} vs {other.row_count})"
            )
        target = promote(self.kind, other.kind)
        if not self._data.size:
            return other.copy()
        return Matrix._wrap(np.hstack([as_array(self._data, target), as_array(other._data, target)]))
    
    def swap_rows(self, i: int, j: int) -> Matrix:
        i = check_index(i, self.row_count, 'row')
        j = check_index(j, self.row_count, 'row')
        data = self._data.copy()
        data[[i, j]] = data[[j, i]]
        return Matrix._wrap(data)
    
    def swap_columns(self, i: int, j: int) -> Matrix:
        i = check_index(i, self.column_count, 'column')
        j = check_index(j, self.column_count, 'column')
        data = self._data.copy()
        data[:, [i, j]] = data[:, [j, i]]
        return Matrix._wrap(data)
    
    # ═══════════════════════════════════════════════════════════════════
    # Reductions
    # ═══════════════════════════════════════════════════════════════════
    
    def sum(self, axis: int | None = None) -> Any:
        """Total, or per-column (axis=0) / per-row (axis=1) sums as a list."""
        if axis is None:
            return normalize_scalar(np.sum(self._data))
        return [normalize_scalar(v) for v in np.sum(self._data, axis=axis)]
    
    def cumsum(self, axis: int | None = None) -> Matrix | list[Any]:
        """Running sum: flattened list when axis is None, else a Matrix."""
        if axis is None:
            return [normalize_scalar(v) for v in np.cumsum(self._data)]
        return Matrix._wrap(np.cumsum(self._data, axis=axis))
    
    def min(self) -> Any:
        return normalize_scalar(np.min(self._data))
    
    def max(self) -> Any:
        return normalize_scalar(np.max(self._data))
    
    def trace(self) -> Any:
        check_square(self.shape, 'trace')
        return normalize_scalar(np.trace(self._data))
    
    # ═══════════════════════════════════════════════════════════════════
    # Determinant, inverse and subspaces
    # ═══════════════════════════════════════════════════════════════════
    
    def determinant(self) -> Any:
        """
        Determinant.
        
        Integer and rational matrices use fraction-free (Bareiss)
        elimination and return an exact value; floating matrices use
        partial-pivot elimination.
        """
        check_square(self.shape, 'determinant')
        if _elimination.is_exact(self._data):
            return _elimination.bareiss_determinant(self._data)
        return _elimination.pivoted_determinant(self._data)
    
    det = determinant
    
    def inverse(self) -> Matrix:
        """
        Inverse by Gauss-Jordan elimination (exact for integer/rational input).
        
        Raises:
            DimensionError: If not square
            SingularMatrixError: If singular
        """
        check_square(self.shape, 'inverse')
        return Matrix._wrap(_elimination.gauss_jordan_inverse(self._data))
    
    def minor(self, row: int, column: int) -> Matrix:
        """Matrix with one row and one column removed."""
        r = check_index(row, self.row_count, 'row')
        c = check_index(column, self.column_count, 'column')
        data = np.delete(np.delete(self._data, r, axis=0), c, axis=1)
        return Matrix._wrap(data)
    
    def cofactors(self) -> Matrix:
        check_square(self.shape, 'cofactors')
        n = self.row_count
        out = [
            [(-1) ** (i + j) * self.minor(i, j).determinant() for j in range(n)]
            for i in range(n)
        ]
        return Matrix(out)
    
    def adjoint(self) -> Matrix:
        """Classical adjugate (transpose of the cofactor matrix)."""
        return self.cofactors().transpose()
    
    def rank(self) -> int:
        _, pivots = _elimination.reduced_row_echelon(self._data)
        return len(pivots)
    
    def reduced_row_echelon(self) -> Matrix:
        rref, _ = _elimination.reduced_row_echelon(self._data)
        return Matrix._wrap(rref)
    
    def null_space(self) -> Matrix:
        """Basis of {x : A x = 0} as columns."""
        return Matrix._wrap(_elimination.null_space_basis(self._data))
    
    def row_space(self) -> Matrix:
        """Nonzero rows of the reduced row echelon form."""
        rref, pivots = _elimination.reduced_row_echelon(self._data)
        return Matrix._wrap(rref[:len(pivots)].reshape(len(pivots), self.column_count))
    
    def column_space(self) -> Matrix:
        """Pivot columns of the original matrix."""
        _, pivots = _elimination.reduced_row_echelon(self._data)
        return Matrix._wrap(self._data[:, pivots].reshape(self.row_count, len(pivots)))
    
    def singular_values(self) -> NDArray[np.floating[Any]]:
        a = self._data.astype(np.complex128 if self.kind is NumberKind.COMPLEX else np.float64)
        return np.linalg.svd(a, compute_uv=False)
    
    def condition_number(self) -> float:
        """sigma_max / sigma_min; inf once sigma_min falls under the relative floor."""
        s = self.singular_values()
        if s.size == 0 or s[-1] <= SINGULAR_VALUE_FLOOR * s[0]:
            return float('inf')
        return float(s[0] / s[-1])
    
    # ═══════════════════════════════════════════════════════════════════
    # Predicates
    # ═══════════════════════════════════════════════════════════════════
    
    def is_symmetric(self, tol: float = 0.0) -> bool:
        if not self.is_square:
            return False
        if tol == 0.0:
            return bool(np.all(self._data == self._data.T))
        return self.is_almost_equal(self.transpose(), ToleranceTier(0.0, tol, 'symmetric', ''))
    
    def is_upper_triangular(self) -> bool:
        return self.is_square and bool(np.all(np.tril(self._data, -1) == 0))
    
    def is_lower_triangular(self) -> bool:
        return self.is_square and bool(np.all(np.triu(self._data, 1) == 0))
    
    def is_diagonal(self) -> bool:
        return self.is_upper_triangular() and self.is_lower_triangular()
    
    def is_identity(self) -> bool:
        return self.is_square and bool(np.all(self._data == np.eye(self.row_count)))
    
    def is_singular(self) -> bool:
        check_square(self.shape, 'is_singular')
        return self.rank() < self.row_count
    
    def is_nonsingular(self) -> bool:
        return not self.is_singular()
    
    def is_full_rank(self) -> bool:
        return self.rank() == min(self.shape)
    
    @property
    def is_row(self) -> bool:
        return self.row_count == 1
    
    @property
    def is_column(self) -> bool:
        return self.column_count == 1
    
    def _floating(self) -> NDArray[Any]:
        return self._data.astype(np.complex128 if self.kind is NumberKind.COMPLEX else np.float64)
    
    def is_zero(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_zero(self._floating(), tol)
    
    def is_scalar(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_scalar(self._floating(), tol)
    
    def is_tridiagonal(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_banded(self._floating(), 1, 1, tol)
    
    def is_bidiagonal(self, tol: float = STRUCTURE_TOL) -> bool:
        """Upper bidiagonal: diagonal and first superdiagonal only."""
        return _structure.is_banded(self._floating(), 0, 1, tol)
    
    def is_skew_symmetric(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_skew_symmetric(self._floating(), tol)
    
    def is_hermitian(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_hermitian(self._floating(), tol)
    
    def is_orthogonal(self, tol: float = STRUCTURE_TOL) -> bool:
        """A A^T == I; for complex entries this is the unitary check A A^H == I."""
        return _structure.is_orthogonal(self._floating(), tol)
    
    is_unitary = is_orthogonal
    
    def is_toeplitz(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_toeplitz(self._floating(), tol)
    
    def is_hankel(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_hankel(self._floating(), tol)
    
    def is_circulant(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_circulant(self._floating(), tol)
    
    def is_vandermonde(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_vandermonde(self._floating(), tol)
    
    def is_permutation(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_permutation(self._floating(), tol)
    
    def is_sparse(self, threshold: float = 0.5) -> bool:
        """Fewer than threshold of the entries are nonzero."""
        return _structure.is_sparse(self._data != 0, threshold)
    
    def is_nilpotent(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_nilpotent(self._floating(), tol)
    
    def is_involutory(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_involutory(self._floating(), tol)
    
    def is_idempotent(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.is_idempotent(self._floating(), tol)
    
    def period(self, tol: float = STRUCTURE_TOL, max_period: int = 100) -> int | None:
        """Smallest k <= max_period with A^k == I, or None."""
        return _structure.period(self._floating(), tol, max_period)
    
    def is_periodic(self, tol: float = STRUCTURE_TOL, max_period: int = 100) -> bool:
        return self.period(tol, max_period) is not None
    
    def is_positive_definite(self, tol: float = STRUCTURE_TOL) -> bool:
        """Symmetric (Hermitian) with every eigenvalue > 0."""
        return _structure.definiteness(self._floating(), tol) == 1
    
    def is_negative_definite(self, tol: float = STRUCTURE_TOL) -> bool:
        return _structure.definiteness(self._floating(), tol) == -1
    
    def is_derogatory(self, tol: float = STRUCTURE_TOL) -> bool:
        """Some eigenvalue has geometric multiplicity above one."""
        return _structure.is_derogatory(self._floating(), tol)
    
    def has_dominant_eigenvalue(self, tol: float = STRUCTURE_TOL) -> bool:
        """|lambda_1| > |lambda_2|, so power iteration converges."""
        return _structure.has_dominant_eigenvalue(self._floating(), tol)
    
    def is_diagonally_dominant(self) -> bool:
        return _structure.is_diagonally_dominant(self._floating(), strict=False)
    
    def is_strictly_diagonally_dominant(self) -> bool:
        """Sufficient for Jacobi and Gauss-Seidel to converge."""
        return _structure.is_diagonally_dominant(self._floating(), strict=True)
    
    def is_submatrix_of(self, parent: Matrix) -> bool:
        """True when self occurs as a contiguous block of parent."""
        rows, columns = self.shape
        big = parent._data
        for i in range(big.shape[0] - rows + 1):
            for j in range(big.shape[1] - columns + 1):
                if np.array_equal(big[i:i + rows, j:j + columns], self._data):
                    return True
        return False
    
    def properties(self, tol: float = STRUCTURE_TOL) -> list[str]:
        """
        Every structural property that holds, e.g. ['square', 'full_rank',
        'symmetric', 'positive_definite', ...].
        
        Example:
            >>> 'orthogonal' in Matrix([[0, 1], [1, 0]]).properties()
            True
        """
        return _structure.properties(self._floating(), tol, self.rank)
    
    # ═══════════════════════════════════════════════════════════════════
    # Norms
    # ═══════════════════════════════════════════════════════════════════
    
    def norm(self, norm: Norm | str = Norm.FROBENIUS) -> float:
        return matrix_norm(self._data, norm)
    
    def distance(self, other: Matrix, norm: Norm | str = Norm.FROBENIUS) -> float:
        return matrix_distance(self._data, other._data, norm)
    
    def normalize(self, norm: Norm | str | None = None) -> Matrix:
        """
        Divide by the chosen norm, or by the largest element when none is given.
        
        Raises:
            NumericalError: If the divisor is zero
        """
        if self._data.size == 0:
            raise ValidationError("normalize: matrix is empty")
        divisor = self.norm(norm) if norm is not None else self.max()
        if divisor == 0:
            raise NumericalError("normalize: divisor is zero (all-zero matrix?)")
        return self / divisor
    
    # ═══════════════════════════════════════════════════════════════════
    # Decompositions
    # ═══════════════════════════════════════════════════════════════════
    
    def decompose(self, method: str, **kwargs: Any) -> Any:
        """Shortcut for pyalgebra.decomposition.decompose(self, method)."""
        from pyalgebra.decomposition.solvers import decompose
        return decompose(self, method, **kwargs)


def _flat(values: Any) -> list[Any]:
    """Elements of a Row/Column/Diagonal view or a plain sequence."""
    from pyalgebra.matrix.views import Column, Diagonal, Row
    if isinstance(values, (Row, Column, Diagonal)):
        return list(values.as_list)
    if isinstance(values, Matrix):
        return values.flatten()
    return list(values)


def as_matrix(value: ArrayLike | Matrix, name: str) -> Matrix:
    """Accept a Matrix or any 2D array-like at an API boundary."""
    if isinstance(value, Matrix):
        return value
    try:
        return Matrix(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name}: cannot convert to matrix: {e}") from e



__all__ = ['Matrix', 'Rescale', 'as_matrix']
