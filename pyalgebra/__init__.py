"""
PyAlgebra: linear algebra and symbolic expressions for Python.

Exact integer and rational arithmetic where the inputs allow it, numpy and
scipy for floating point, and a small computer algebra system for
single-variable calculus.

Submodules:
    matrix: Dense and sparse matrices, row/column/diagonal views, norms
    vector: One-dimensional vectors
    decomposition: LU, QR, LQ, Cholesky, SVD, eigen, Schur
    linear: Direct and iterative solvers for A x = b
    expression: Expression trees, parser, simplifier, calculus, limits
"""

__version__ = "0.1.0"

from pyalgebra import matrix
from pyalgebra import vector
from pyalgebra import decomposition
from pyalgebra import linear
from pyalgebra import expression

from pyalgebra.matrix import Matrix
from pyalgebra.vector import Vector
from pyalgebra.linear import solve
from pyalgebra.expression import Expression, parse

__all__ = [
    "__version__",
    "matrix",
    "vector",
    "decomposition",
    "linear",
    "expression",
    "Matrix",
    "Vector",
    "solve",
    "Expression",
    "parse",
]
