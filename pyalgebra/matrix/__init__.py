"""
Dense and sparse matrices.

Public API:
    Matrix: Default-immutable dense matrix
    Row, Column, Diagonal: Shape-constrained Matrix subtypes
    MutableView: Editable copy of a Row/Column/Diagonal (push, pop, splice, swap)
    SparseMatrix: scipy.sparse-backed matrix (coo, csr, csc, dok, lil)
    Norm: Norm/distance selector
    Rescale: Axis selector for min-max rescaling
"""

from pyalgebra.matrix.matrix import Matrix, Rescale, as_matrix
from pyalgebra.matrix.norms import Norm
from pyalgebra.matrix.views import Column, Diagonal, MutableView, Row
from pyalgebra.matrix.sparse import SparseMatrix

__all__ = [
    "Matrix",
    "Rescale",
    "as_matrix",
    "Norm",
    "Row",
    "Column",
    "Diagonal",
    "MutableView",
    "SparseMatrix",
]
