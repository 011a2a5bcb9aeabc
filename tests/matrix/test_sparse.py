"""
Tests for SparseMatrix.
"""

import numpy as np
import pytest

from pyalgebra.core.exceptions import DimensionError, IndexOutOfRangeError, ValidationError
from pyalgebra.matrix import Matrix, Row, SparseMatrix


class TestSparseMatrix:

    def setup_method(self):
        self.rows = [[0, 0, 3], [4, 0, 0]]
        self.s = SparseMatrix.from_list(self.rows, 'csr')

    def test_properties(self):
        assert self.s.shape == (2, 3)
        assert self.s.nnz == 2
        assert self.s.sparsity == pytest.approx(4 / 6)

    def test_element_access(self):
        assert self.s[1, 0] == 4.0
        assert self.s[0, 1] == 0.0
        row = self.s[0]
        assert isinstance(row, Row)
        assert row.as_list == [0.0, 0.0, 3.0]

    def test_out_of_range(self):
        with pytest.raises(IndexOutOfRangeError):
            self.s[2, 0]

    @pytest.mark.parametrize("fmt", ['coo', 'csr', 'csc', 'dok', 'lil'])
    def test_formats_agree(self, fmt):
        s = SparseMatrix(self.rows, fmt)
        assert s.format == fmt
        assert s.to_dense() == Matrix(self.rows, is_double=True)
        assert s[0, 2] == 3.0

    def test_unknown_format(self):
        with pytest.raises(ValidationError, match="Unknown sparse format"):
            SparseMatrix(self.rows, 'bsr')

    def test_from_triplets_sums_duplicates(self):
        s = SparseMatrix.from_triplets([0, 0, 1], [1, 1, 0], [2.0, 3.0, 1.0], (2, 2))
        assert s[0, 1] == 5.0
        assert s.nnz == 2

    def test_triplet_length_mismatch(self):
        with pytest.raises(DimensionError):
            SparseMatrix.from_triplets([0], [0, 1], [1.0], (2, 2))

    def test_addition_keeps_left_format(self):
        other = SparseMatrix(self.rows, 'coo')
        total = SparseMatrix(self.rows, 'lil') + other
        assert total.format == 'lil'
        assert total[1, 0] == 8.0

    def test_subtract_to_zero(self):
        assert (self.s - self.s).nnz == 0

    def test_products(self):
        product = self.s @ self.s.transpose()
        assert product.to_dense() == Matrix([[9.0, 0.0], [0.0, 16.0]])
        assert (2 * self.s)[0, 2] == 6.0
        assert (self.s * Matrix([[1], [1], [1]])).to_dense() == Matrix([[3.0], [4.0]])

    def test_shape_mismatch(self):
        with pytest.raises(DimensionError):
            self.s + SparseMatrix([[1, 2]])

    def test_dot_vector(self):
        np.testing.assert_allclose(self.s.dot_vector([1.0, 1.0, 1.0]), [3.0, 4.0])
        with pytest.raises(DimensionError):
            self.s.dot_vector([1.0, 1.0])

    def test_equality_with_dense(self):
        assert self.s == Matrix(self.rows, is_double=True)
        assert -self.s == SparseMatrix([[0, 0, -3], [-4, 0, 0]])

    def test_norm(self):
        assert self.s.norm() == pytest.approx(5.0)

    def test_asformat(self):
        assert self.s.asformat('csc').format == 'csc'
