"""
Tests for matrix and vector norms.
"""

import numpy as np
import pytest

from pyalgebra.core.exceptions import UnsupportedOperationError, ValidationError
from pyalgebra.matrix import Matrix, Norm
from pyalgebra.matrix.norms import vector_distance, vector_norm


class TestMatrixNorms:

    def setup_method(self):
        self.data = [[1, -2], [3, 4]]
        self.m = Matrix(self.data)

    def test_frobenius(self):
        assert self.m.norm() == pytest.approx(np.sqrt(30))

    def test_manhattan_is_max_column_sum(self):
        assert self.m.norm(Norm.MANHATTAN) == pytest.approx(6.0)

    def test_chebyshev_is_max_row_sum(self):
        assert self.m.norm('chebyshev') == pytest.approx(7.0)

    def test_spectral_and_trace(self):
        a = np.array(self.data, dtype=float)
        assert self.m.norm(Norm.SPECTRAL) == pytest.approx(np.linalg.norm(a, 2))
        assert self.m.norm(Norm.TRACE) == pytest.approx(np.linalg.norm(a, 'nuc'))

    @pytest.mark.parametrize("norm", [Norm.HAMMING, Norm.COSINE, Norm.MAHALANOBIS])
    def test_vector_only_norms(self, norm):
        with pytest.raises(UnsupportedOperationError):
            self.m.norm(norm)

    def test_unknown_norm(self):
        with pytest.raises(ValidationError, match="Unknown norm"):
            self.m.norm('bogus')

    def test_distance(self):
        assert self.m.distance(self.m) == 0.0
        assert Matrix([[0, 0]]).distance(Matrix([[3, 4]])) == pytest.approx(5.0)


class TestVectorNorms:

    def test_basic(self):
        v = np.array([3.0, -4.0, 0.0])
        assert vector_norm(v) == pytest.approx(5.0)
        assert vector_norm(v, Norm.MANHATTAN) == pytest.approx(7.0)
        assert vector_norm(v, Norm.CHEBYSHEV) == pytest.approx(4.0)
        assert vector_norm(v, Norm.HAMMING) == 2.0

    @pytest.mark.parametrize("norm", [Norm.SPECTRAL, Norm.TRACE])
    def test_matrix_only_norms(self, norm):
        with pytest.raises(UnsupportedOperationError):
            vector_norm(np.array([1.0]), norm)

    def test_mahalanobis_identity_is_euclidean(self):
        v = np.array([3.0, 4.0])
        assert vector_norm(v, Norm.MAHALANOBIS, covariance=np.eye(2)) == pytest.approx(5.0)

    def test_mahalanobis_scaled(self):
        v = np.array([2.0, 0.0])
        cov = np.diag([4.0, 1.0])
        assert vector_norm(v, Norm.MAHALANOBIS, covariance=cov) == pytest.approx(1.0)

    def test_mahalanobis_requires_covariance(self):
        with pytest.raises(ValidationError):
            vector_norm(np.array([1.0, 2.0]), Norm.MAHALANOBIS)

    def test_distances(self):
        a = np.array([1, 0, 1])
        b = np.array([1, 1, 0])
        assert vector_distance(a, b, Norm.HAMMING) == 2.0
        assert vector_distance(a, a, Norm.COSINE) == pytest.approx(0.0)
