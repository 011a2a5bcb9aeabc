"""
Matrix decompositions.

Public API:
    decompose(A, method) -> *Decomposition
    lu, qr, lq, cholesky, svd, eigen, schur, divide_and_conquer
"""

from pyalgebra.decomposition.solvers import (
    decompose,
    lu,
    qr,
    lq,
    cholesky,
    svd,
    eigen,
    schur,
    divide_and_conquer,
)
from pyalgebra.decomposition.solution import (
    LUDecomposition,
    QRDecomposition,
    LQDecomposition,
    CholeskyDecomposition,
    SVDDecomposition,
    Eigen,
    EigenDecomposition,
    SchurDecomposition,
)

__all__ = [
    "decompose",
    "lu",
    "qr",
    "lq",
    "cholesky",
    "svd",
    "eigen",
    "schur",
    "divide_and_conquer",
    "LUDecomposition",
    "QRDecomposition",
    "LQDecomposition",
    "CholeskyDecomposition",
    "SVDDecomposition",
    "Eigen",
    "EigenDecomposition",
    "SchurDecomposition",
]
