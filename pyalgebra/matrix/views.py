"""
Row, Column and Diagonal matrices, and the MutableView editor.

Row (1 x N), Column (N x 1) and Diagonal (N x N, zero off the diagonal)
are Matrix subtypes: they keep the matrix indexing contract and add
single-index element access. Like Matrix they are immutable apart from
set_value_at.

Linear editing (push, pop, splice, swap) happens on a MutableView,
which owns an independent copy of the elements and is frozen back into
a new Row, Column or Diagonal. Nothing aliases the source matrix.
"""

from __future__ import annotations

from typing import Any, Iterator, Literal, Sequence

import numpy as np
from numpy.typing import ArrayLike

from pyalgebra.core.exceptions import IndexOutOfRangeError, ValidationError
from pyalgebra.core.numeric import kind_of, normalize_scalar
from pyalgebra.core.validation import check_index
from pyalgebra.matrix.matrix import Matrix, _is_index


Orientation = Literal['row', 'column', 'diagonal']


def _vector(values: ArrayLike) -> np.ndarray:
    array = np.asarray(values if isinstance(values, np.ndarray) else list(values))
    if array.ndim != 1:
        raise ValidationError(f"expected a 1D sequence, got shape {array.shape}")
    return array


class _LinearMatrix(Matrix):
    """Shared single-index behaviour of Row and Column."""
    
    __slots__ = ()
    
    @property
    def as_list(self) -> list[Any]:
        return self.flatten()
    
    @property
    def length(self) -> int:
        return self._data.size
    
    def __len__(self) -> int:
        return self.length
    
    def __iter__(self) -> Iterator[Any]:
        return iter(self.as_list)
    
    def __getitem__(self, key: Any) -> Any:
        if _is_index(key):
            i = check_index(key, self.length, 'element')
            return normalize_scalar(self._data.ravel()[i])
        if isinstance(key, slice):
            return type(self)(self._data.ravel()[key])
        return super().__getitem__(key)
    
    def mutable(self) -> MutableView:
        return MutableView.of(self)


class Row(_LinearMatrix):
    """1 x N matrix. r[j] is an element, r[0, j] also works."""
    
    __slots__ = ()
    
    def __init__(self, values: ArrayLike = (), *, is_double: bool = False):
        super().__init__(_vector(values).reshape(1, -1), is_double=is_double)
    
    def transpose(self) -> Column:
        return Column(self._data.ravel())


class Column(_LinearMatrix):
    """N x 1 matrix. c[i] is an element, c[i, 0] also works."""
    
    __slots__ = ()
    
    def __init__(self, values: ArrayLike = (), *, is_double: bool = False):
        super().__init__(_vector(values).reshape(-1, 1), is_double=is_double)
    
    def transpose(self) -> Row:
        return Row(self._data.ravel())


class Diagonal(Matrix):
    """Square matrix holding values on the diagonal and zeros elsewhere."""
    
    __slots__ = ()
    
    def __init__(self, values: ArrayLike = (), *, is_double: bool = False):
        diag = _vector(values)
        out = np.zeros((diag.size, diag.size), dtype=diag.dtype)
        np.fill_diagonal(out, diag)
        super().__init__(out, is_double=is_double)
    
    @property
    def as_list(self) -> list[Any]:
        return [normalize_scalar(v) for v in np.diagonal(self._data)]
    
    @property
    def length(self) -> int:
        return self.row_count
    
    def set_value_at(self, row: int, column: int, value: Any) -> None:
        r = check_index(row, self.row_count, 'row')
        c = check_index(column, self.column_count, 'column')
        if r != c and value != 0:
            raise ValidationError(
                f"Diagonal: off-diagonal element ({r}, {c}) must stay zero"
            )
        super().set_value_at(r, c, value)
    
    def mutable(self) -> MutableView:
        return MutableView.of(self)


_FREEZE = {'row': Row, 'column': Column, 'diagonal': Diagonal}


class MutableView:
    """
    Growable, editable copy of a Row, Column or Diagonal.
    
    Example:
        >>> view = Matrix([[1, 2], [3, 4]]).mutable_row(0)
        >>> view.push(5)
        >>> view.swap(0, 2)
        >>> view.freeze()
        Row([[5, 2, 1]])
    """
    
    def __init__(self, values: Sequence[Any] = (), orientation: Orientation = 'row'):
        if orientation not in _FREEZE:
            raise ValidationError(
                f"orientation must be one of {sorted(_FREEZE)}, got {orientation!r}"
            )
        for v in values:
            kind_of(v)
        self._values = list(values)
        self.orientation = orientation
    
    @classmethod
    def of(cls, view: Row | Column | Diagonal) -> MutableView:
        if isinstance(view, Row):
            return cls(view.as_list, 'row')
        if isinstance(view, Column):
            return cls(view.as_list, 'column')
        if isinstance(view, Diagonal):
            return cls(view.as_list, 'diagonal')
        raise ValidationError(f"no mutable view for {type(view).__name__}")
    
    def __len__(self) -> int:
        return len(self._values)
    
    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._values))
    
    def __getitem__(self, index: int) -> Any:
        return self._values[check_index(index, len(self._values), 'element')]
    
    def __setitem__(self, index: int, value: Any) -> None:
        self.set(index, value)
    
    def __repr__(self) -> str:
        return f"MutableView({self._values!r}, {self.orientation!r})"
    
    def set(self, index: int, value: Any) -> None:
        kind_of(value)
        self._values[check_index(index, len(self._values), 'element')] = value
    
    def push(self, *values: Any) -> None:
        """Append values at the end."""
        for v in values:
            kind_of(v)
        self._values.extend(values)
    
    def pop(self, index: int = -1) -> Any:
        """Remove and return one element (the last by default)."""
        if not self._values:
            raise IndexOutOfRangeError("pop from an empty view", index=index, size=0, axis='element')
        return self._values.pop(check_index(index, len(self._values), 'element'))
    
    def splice(self, start: int, delete_count: int | None = None, *items: Any) -> list[Any]:
        """
        Remove delete_count elements at start and insert items there.
        
        Returns:
            The removed elements
        """
        size = len(self._values)
        if not -size <= start <= size:
            raise IndexOutOfRangeError(
                f"splice start {start} out of range for size {size}",
                index=start, size=size, axis='element',
            )
        start = start + size if start < 0 else start
        if delete_count is None:
            delete_count = size - start
        if delete_count < 0:
            raise ValidationError(f"delete_count must be non-negative, got {delete_count}")
        for v in items:
            kind_of(v)
        removed = self._values[start:start + delete_count]
        self._values[start:start + delete_count] = list(items)
        return removed
    
    def swap(self, i: int, j: int) -> None:
        i = check_index(i, len(self._values), 'element')
        j = check_index(j, len(self._values), 'element')
        self._values[i], self._values[j] = self._values[j], self._values[i]
    
    def to_list(self) -> list[Any]:
        return list(self._values)
    
    def freeze(self) -> Row | Column | Diagonal:
        """New immutable Row, Column or Diagonal holding the current elements."""
        return _FREEZE[self.orientation](self._values)
