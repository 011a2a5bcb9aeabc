"""
Sparse matrix storage.

SparseMatrix keeps its entries in one of the scipy.sparse layouts and
follows the Matrix indexing contract (m[i] is a Row, m[i, j] an element,
both validated). Arithmetic with another SparseMatrix stays sparse and
keeps the left operand's format; to_dense() gives a Matrix.
"""

from __future__ import annotations

from typing import Any, Literal

import numpy as np
import scipy.sparse as sp
from numpy.typing import ArrayLike

from pyalgebra.core.exceptions import DimensionError, ValidationError
from pyalgebra.core.numeric import normalize_scalar
from pyalgebra.core.validation import (
    check_index,
    check_inner_dimensions,
    check_same_shape,
)
from pyalgebra.matrix.matrix import Matrix, _is_index
from pyalgebra.matrix.norms import Norm, matrix_norm


SparseFormat = Literal['coo', 'csr', 'csc', 'dok', 'lil']

_CONSTRUCTORS = {
    'coo': sp.coo_matrix,
    'csr': sp.csr_matrix,
    'csc': sp.csc_matrix,
    'dok': sp.dok_matrix,
    'lil': sp.lil_matrix,
}


def _check_format(format: str) -> None:
    if format not in _CONSTRUCTORS:
        raise ValidationError(
            f"Unknown sparse format: {format!r}. Valid: {sorted(_CONSTRUCTORS)}"
        )


class SparseMatrix:
    """
    Sparse matrix in COO, CSR, CSC, DOK or LIL layout.
    
    Example:
        >>> S = SparseMatrix.from_list([[0, 0, 3], [4, 0, 0]], 'csr')
        >>> S[1, 0]
        4.0
        >>> S.sparsity
        0.6666666666666666
    """
    
    __hash__ = None
    
    def __init__(self, data: ArrayLike | Matrix | sp.spmatrix, format: SparseFormat = 'csr'):
        _check_format(format)
        if isinstance(data, Matrix):
            source = np.asarray(data, dtype=np.float64)
        elif sp.issparse(data):
            source = data
        else:
            source = Matrix(data).to_numpy().astype(np.float64)
        self._store = _CONSTRUCTORS[format](source, dtype=np.float64)
        self.format: SparseFormat = format
    
    @classmethod
    def from_list(cls, rows: list[list[Any]], format: SparseFormat = 'csr') -> SparseMatrix:
        return cls(rows, format)
    
    @classmethod
    def from_triplets(
        cls,
        rows: ArrayLike,
        columns: ArrayLike,
        values: ArrayLike,
        shape: tuple[int, int],
        format: SparseFormat = 'csr',
    ) -> SparseMatrix:
        """Build from (row, column, value) coordinates; duplicates are summed."""
        r, c, v = (np.asarray(a) for a in (rows, columns, values))
        if not (r.shape == c.shape == v.shape):
            raise DimensionError(
                f"triplets: lengths differ (rows={r.size}, columns={c.size}, values={v.size})"
            )
        coo = sp.coo_matrix((v.astype(np.float64), (r, c)), shape=shape)
        return cls(coo, format)
    
    @property
    def shape(self) -> tuple[int, int]:
        return (int(self._store.shape[0]), int(self._store.shape[1]))
    
    @property
    def row_count(self) -> int:
        return self.shape[0]
    
    @property
    def column_count(self) -> int:
        return self.shape[1]
    
    @property
    def nnz(self) -> int:
        """Number of stored nonzero entries."""
        return int(self._store.count_nonzero())
    
    @property
    def sparsity(self) -> float:
        """Fraction of entries that are zero."""
        total = self.row_count * self.column_count
        return 1.0 - self.nnz / total if total else 0.0
    
    def to_scipy(self) -> sp.spmatrix:
        return self._store.copy()
    
    def to_dense(self) -> Matrix:
        return Matrix(self._store.toarray())
    
    def asformat(self, format: SparseFormat) -> SparseMatrix:
        return SparseMatrix(self._store, format)
    
    def __repr__(self) -> str:
        return f"SparseMatrix(shape={self.shape}, nnz={self.nnz}, format={self.format!r})"
    
    def __len__(self) -> int:
        return self.row_count
    
    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, tuple) and len(key) == 2 and _is_index(key[0]) and _is_index(key[1]):
            r = check_index(key[0], self.row_count, 'row')
            c = check_index(key[1], self.column_count, 'column')
            # COO has no element access
            return normalize_scalar(self._store.tocsr()[r, c])
        if _is_index(key):
            r = check_index(key, self.row_count, 'row')
            from pyalgebra.matrix.views import Row
            return Row(self._store.tocsr()[r].toarray().ravel())
        return self.to_dense()[key]
    
    def __eq__(self, other: object) -> bool:
        if isinstance(other, SparseMatrix):
            return self.shape == other.shape and (self._store.tocsr() != other._store.tocsr()).nnz == 0
        if isinstance(other, Matrix):
            return self.to_dense() == other
        return NotImplemented
    
    def _other(self, other: Any, operation: str) -> sp.spmatrix:
        if isinstance(other, SparseMatrix):
            store = other._store
        elif isinstance(other, Matrix):
            store = sp.csr_matrix(np.asarray(other, dtype=np.float64))
        else:
            return NotImplemented
        check_same_shape(self.shape, (int(store.shape[0]), int(store.shape[1])), operation)
        return store
    
    def __add__(self, other: Any) -> SparseMatrix:
        store = self._other(other, 'add')
        if store is NotImplemented:
            return NotImplemented
        return SparseMatrix(self._store.tocsr() + store, self.format)
    
    def __sub__(self, other: Any) -> SparseMatrix:
        store = self._other(other, 'subtract')
        if store is NotImplemented:
            return NotImplemented
        return SparseMatrix(self._store.tocsr() - store, self.format)
    
    def __neg__(self) -> SparseMatrix:
        return SparseMatrix(-self._store.tocsr(), self.format)
    
    def __mul__(self, other: Any) -> SparseMatrix:
        """Matrix product with a sparse or dense matrix, scalar scaling otherwise."""
        if isinstance(other, (SparseMatrix, Matrix)):
            return self.__matmul__(other)
        if isinstance(other, (int, float, np.number)) and not isinstance(other, bool):
            return SparseMatrix(self._store.tocsr() * float(other), self.format)
        return NotImplemented
    
    def __rmul__(self, other: Any) -> SparseMatrix:
        return self.__mul__(other)
    
    def __matmul__(self, other: Any) -> SparseMatrix:
        if isinstance(other, SparseMatrix):
            store = other._store.tocsr()
        elif isinstance(other, Matrix):
            store = sp.csr_matrix(np.asarray(other, dtype=np.float64))
        else:
            return NotImplemented
        check_inner_dimensions(self.shape, (int(store.shape[0]), int(store.shape[1])))
        return SparseMatrix(self._store.tocsr() @ store, self.format)
    
    def transpose(self) -> SparseMatrix:
        return SparseMatrix(self._store.transpose(), self.format)
    
    def dot_vector(self, values: ArrayLike) -> np.ndarray:
        """A @ v for a dense 1D vector."""
        v = np.asarray(values, dtype=np.float64)
        if v.shape != (self.column_count,):
            raise DimensionError(
                f"dot_vector: expected length {self.column_count}, got shape {v.shape}"
            )
        return np.asarray(self._store.tocsr() @ v).ravel()
    
    def norm(self, norm: Norm | str = Norm.FROBENIUS) -> float:
        return matrix_norm(self._store.toarray(), norm)
