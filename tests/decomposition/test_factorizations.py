"""
Tests for QR, LQ, Cholesky and SVD.
"""

import numpy as np
import pytest

from pyalgebra.core.exceptions import (
    DimensionError,
    NotPositiveDefiniteError,
    SingularMatrixError,
    ValidationError,
)
from pyalgebra.decomposition import cholesky, decompose, lq, qr, svd
from pyalgebra.matrix import Matrix


# ═══════════════════════════════════════════════════════════════════════
# QR / LQ
# ═══════════════════════════════════════════════════════════════════════


class TestQR:

    def setup_method(self):
        self.A = Matrix([[1.0, 2.0], [3.0, 4.0], [5.0, 7.0]])

    @pytest.mark.parametrize("method", ['householder', 'gram_schmidt'])
    def test_reconstructs(self, method):
        result = qr(self.A, method)
        assert result.verify(self.A)
        assert result.R.slice(0, 2).is_upper_triangular()

    def test_householder_q_is_orthogonal(self):
        Q = np.asarray(qr(self.A).Q)
        assert Q.shape == (3, 3)
        np.testing.assert_allclose(Q.T @ Q, np.eye(3), atol=1e-12)

    def test_gram_schmidt_is_reduced(self):
        result = qr(self.A, 'gram_schmidt')
        assert result.Q.shape == (3, 2)
        assert result.R.shape == (2, 2)

    @pytest.mark.parametrize("method", ['householder', 'gram_schmidt'])
    def test_least_squares(self, method):
        b = [1.0, 2.0, 2.0]
        x = qr(self.A, method).solve(b)
        expected, *_ = np.linalg.lstsq(np.asarray(self.A), b, rcond=None)
        np.testing.assert_allclose(np.asarray(x).ravel(), expected, atol=1e-10)

    def test_gram_schmidt_dependent_columns(self):
        with pytest.raises(SingularMatrixError):
            qr([[1.0, 2.0], [2.0, 4.0], [3.0, 6.0]], 'gram_schmidt')

    def test_gram_schmidt_wide(self):
        with pytest.raises(DimensionError):
            qr([[1.0, 2.0, 3.0]], 'gram_schmidt')

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            qr(self.A, 'givens')


class TestLQ:

    def test_reconstructs_and_minimum_norm(self):
        A = Matrix([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        result = lq(A)
        assert result.verify(A)
        assert result.L.slice(0, 2, 0, 2).is_lower_triangular()
        b = [1.0, 1.0]
        x = np.asarray(result.solve(b)).ravel()
        np.testing.assert_allclose(x, np.linalg.pinv(np.asarray(A)) @ b, atol=1e-10)

    def test_tall_solve_rejected(self):
        with pytest.raises(DimensionError):
            lq([[1.0], [2.0]]).solve([1.0, 2.0])


# ═══════════════════════════════════════════════════════════════════════
# Cholesky
# ═══════════════════════════════════════════════════════════════════════


class TestCholesky:

    def test_reconstructs(self, spd_matrix):
        result = cholesky(spd_matrix)
        assert result.verify(spd_matrix)
        assert result.L.is_lower_triangular()

    def test_solve(self, spd_matrix):
        b = np.arange(5.0)
        x = cholesky(spd_matrix).solve(b)
        np.testing.assert_allclose(np.asarray(spd_matrix) @ np.asarray(x).ravel(), b, atol=1e-10)

    def test_not_symmetric(self):
        with pytest.raises(ValidationError, match="not symmetric"):
            cholesky([[2.0, 1.0], [0.0, 2.0]])

    def test_not_positive_definite(self):
        with pytest.raises(NotPositiveDefiniteError) as info:
            cholesky([[1.0, 2.0], [2.0, 1.0]])
        assert info.value.min_eigenvalue == pytest.approx(-1.0)


# ═══════════════════════════════════════════════════════════════════════
# SVD
# ═══════════════════════════════════════════════════════════════════════


class TestSVD:

    def test_reconstructs(self, rng):
        A = Matrix(rng.standard_normal((4, 3)))
        result = svd(A)
        assert result.verify(A)
        values = result.singular_values
        assert list(values) == sorted(values, reverse=True)

    def test_rank_deficient(self):
        A = Matrix([[1.0, 2.0], [2.0, 4.0]])
        result = decompose(A, 'svd')
        assert result.rank() == 1
        assert result.condition_number() > 1e12

    def test_pseudo_inverse_solve(self):
        A = [[1.0, 2.0], [2.0, 4.0]]
        b = [1.0, 2.0]
        x = np.asarray(svd(A).solve(b)).ravel()
        np.testing.assert_allclose(x, np.linalg.pinv(np.array(A)) @ b, atol=1e-10)

    def test_well_conditioned(self):
        assert svd(Matrix.eye(3)).condition_number() == pytest.approx(1.0)
