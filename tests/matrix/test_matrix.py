"""
Tests for the dense Matrix type.

Validates:
    - Construction, factories and element kind promotion
    - Indexing contract (m[i] Row, m[i, j] element, m[:, j] Column)
    - Arithmetic and shape errors
    - Exact determinant/inverse for integer and rational input
    - Subspaces, rank and predicates
    - Binary serialization
"""

from fractions import Fraction

import numpy as np
import pytest

from pyalgebra.core.exceptions import (
    DimensionError,
    IndexOutOfRangeError,
    NumericalError,
    ParseError,
    SingularMatrixError,
    ValidationError,
)
from pyalgebra.core.numeric import NumberKind
from pyalgebra.core.tolerances import LOOSE
from pyalgebra.matrix import Column, Matrix, Rescale, Row


# ═══════════════════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════════════════


class TestConstruction:

    def test_from_list(self):
        m = Matrix([[1, 2, 3], [4, 5, 6]])
        assert m.shape == (2, 3)
        assert m.kind is NumberKind.INTEGER
        assert not m.is_double

    def test_is_double_promotes(self):
        m = Matrix([[1, 2]], is_double=True)
        assert m.kind is NumberKind.REAL
        assert m.is_double

    def test_mixed_promotes_to_rational(self):
        m = Matrix([[1, Fraction(1, 2)]])
        assert m.kind is NumberKind.RATIONAL
        assert m.value_at(0, 0) == 1

    def test_ragged_rows(self):
        with pytest.raises(DimensionError):
            Matrix([[1, 2], [3]])

    def test_empty(self):
        m = Matrix()
        assert m.shape == (0, 0)

    def test_from_flattened_list(self):
        m = Matrix.from_flattened_list([1, 2, 3, 4, 5, 6], 2, 3)
        assert m.to_list() == [[1, 2, 3], [4, 5, 6]]

    def test_from_flattened_list_wrong_length(self):
        with pytest.raises(DimensionError):
            Matrix.from_flattened_list([1, 2, 3], 2, 2)

    def test_from_rows_and_columns(self):
        rows = Matrix.from_rows([Row([1, 2]), [3, 4]])
        cols = Matrix.from_columns([Column([1, 3]), Column([2, 4])])
        assert rows == cols

    def test_factories(self):
        assert Matrix.zeros(2, 3).to_list() == [[0, 0, 0], [0, 0, 0]]
        assert Matrix.ones(1, 2).to_list() == [[1, 1]]
        assert Matrix.fill(2, 2, 7).sum() == 28
        assert Matrix.eye(3).is_identity()
        assert Matrix.identity(2) == Matrix.eye(2)
        assert Matrix.from_diagonal([1, 2, 3]).is_diagonal()

    def test_eye_negative(self):
        with pytest.raises(ValidationError):
            Matrix.eye(-1)

    def test_random_is_seeded(self):
        a = Matrix.random(3, 2, seed=7)
        b = Matrix.random(3, 2, seed=7)
        assert a == b
        assert a.shape == (3, 2)
        assert 0.0 <= a.min() and a.max() < 1.0

    def test_random_integers_inclusive(self):
        m = Matrix.random(10, 10, low=0, high=2, is_double=False, seed=0)
        assert m.kind is NumberKind.INTEGER
        assert set(m.flatten()) <= {0, 1, 2}


# ═══════════════════════════════════════════════════════════════════════
# Indexing
# ═══════════════════════════════════════════════════════════════════════


class TestIndexing:

    def setup_method(self):
        self.m = Matrix([[1, 2], [3, 4]])

    def test_row(self):
        row = self.m[0]
        assert isinstance(row, Row)
        assert row.as_list == [1, 2]

    def test_element(self):
        assert self.m[1, 0] == 3
        assert self.m[-1, -1] == 4

    def test_column(self):
        col = self.m[:, 1]
        assert isinstance(col, Column)
        assert col.as_list == [2, 4]

    def test_slice(self):
        assert self.m[0:1] == Matrix([[1, 2]])
        assert self.m.slice(0, 2, 1, 2) == Matrix([[2], [4]])

    def test_slice_invalid_range(self):
        with pytest.raises(ValidationError):
            self.m.slice(1, 3)

    def test_out_of_range(self):
        with pytest.raises(IndexOutOfRangeError) as info:
            self.m[5]
        assert info.value.axis == 'row'

    def test_negative_index_counts_from_end(self):
        assert self.m[0][-1] == 2
        assert self.m[-2][0] == 1
        assert self.m.value_at(-1, 0) == 3

    @pytest.mark.parametrize("key,axis", [
        (-3, 'row'),
        ((0, -3), 'column'),
        ((-3, 0), 'row'),
        ((0, 2), 'column'),
    ])
    def test_both_bounds_checked(self, key, axis):
        with pytest.raises(IndexOutOfRangeError) as info:
            self.m[key]
        assert info.value.axis == axis
        assert info.value.size == 2
        assert isinstance(info.value, IndexError)

    def test_row_element_below_lower_bound(self):
        with pytest.raises(IndexOutOfRangeError, match="-3 out of range"):
            self.m[0][-3]

    def test_immutable_storage(self):
        array = self.m.to_numpy()
        array[0, 0] = 99
        assert self.m[0, 0] == 1

    def test_set_value_at_promotes(self):
        m = Matrix([[1, 2], [3, 4]])
        m.set_value_at(0, 0, 0.5)
        assert m.kind is NumberKind.REAL
        assert m[0, 0] == 0.5

    def test_with_value_at_copies(self):
        out = self.m.with_value_at(1, 1, 9)
        assert out[1, 1] == 9
        assert self.m[1, 1] == 4

    def test_iteration_yields_rows(self):
        assert [r.as_list for r in self.m] == [[1, 2], [3, 4]]
        assert len(self.m) == 2

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(self.m)


# ═══════════════════════════════════════════════════════════════════════
# Arithmetic
# ═══════════════════════════════════════════════════════════════════════


class TestArithmetic:

    def setup_method(self):
        self.a = Matrix([[1, 2], [3, 4]])
        self.b = Matrix([[5, 6], [7, 8]])

    def test_add_subtract(self):
        assert self.a + self.b == Matrix([[6, 8], [10, 12]])
        assert self.b - self.a == Matrix([[4, 4], [4, 4]])
        assert 1 + self.a == Matrix([[2, 3], [4, 5]])
        assert 10 - self.a == Matrix([[9, 8], [7, 6]])

    def test_shape_mismatch(self):
        with pytest.raises(DimensionError):
            self.a + Matrix([[1, 2, 3]])

    def test_matrix_product(self):
        expected = Matrix([[19, 22], [43, 50]])
        assert self.a * self.b == expected
        assert self.a @ self.b == expected

    def test_inner_dimension_mismatch(self):
        with pytest.raises(DimensionError):
            self.a @ Matrix([[1, 2, 3]])

    def test_scalar_product(self):
        assert 2 * self.a == Matrix([[2, 4], [6, 8]])
        assert self.a.scale(3)[1, 1] == 12

    def test_integer_division_is_real(self):
        out = self.a / 2
        assert out.kind is NumberKind.REAL
        assert out.to_list() == [[0.5, 1.0], [1.5, 2.0]]

    def test_division_by_zero(self):
        with pytest.raises(NumericalError):
            self.a / 0
        with pytest.raises(NumericalError):
            self.a.element_divide(Matrix([[1, 0], [1, 1]]))

    def test_hadamard(self):
        assert self.a.element_multiply(self.b) == Matrix([[5, 12], [21, 32]])

    def test_power(self):
        fib = Matrix([[1, 1], [1, 0]])
        assert fib ** 5 == Matrix([[8, 5], [5, 3]])
        assert fib ** 0 == Matrix.eye(2)

    def test_negative_power_uses_inverse(self):
        assert self.a ** -1 == self.a.inverse()

    def test_negate(self):
        assert -self.a == Matrix([[-1, -2], [-3, -4]])

    def test_is_almost_equal(self):
        noisy = self.a + 1e-7
        assert not self.a.is_almost_equal(noisy)
        assert self.a.is_almost_equal(noisy, LOOSE)


# ═══════════════════════════════════════════════════════════════════════
# Structural operations and reductions
# ═══════════════════════════════════════════════════════════════════════


class TestStructure:

    def setup_method(self):
        self.m = Matrix([[1, 2, 3], [4, 5, 6]])

    def test_transpose(self):
        assert self.m.T == Matrix([[1, 4], [2, 5], [3, 6]])
        assert self.m.transpose().transpose() == self.m

    def test_reshape(self):
        assert self.m.reshape(3, 2) == Matrix([[1, 2], [3, 4], [5, 6]])
        with pytest.raises(DimensionError):
            self.m.reshape(4, 2)

    def test_flip(self):
        assert self.m.flip(0) == Matrix([[4, 5, 6], [1, 2, 3]])
        assert self.m.flip(1) == Matrix([[3, 2, 1], [6, 5, 4]])

    def test_append(self):
        assert self.m.append_rows(Matrix([[7, 8, 9]])).shape == (3, 3)
        assert self.m.append_columns(Matrix([[0], [0]])).shape == (2, 4)
        with pytest.raises(DimensionError):
            self.m.append_rows(Matrix([[1, 2]]))

    def test_swaps(self):
        assert self.m.swap_rows(0, 1) == Matrix([[4, 5, 6], [1, 2, 3]])
        assert self.m.swap_columns(0, 2) == Matrix([[3, 2, 1], [6, 5, 4]])

    def test_rescale(self):
        m = Matrix([[1, 2], [3, 2]])
        assert m.rescale(Rescale.COLUMN).to_list() == [[0.0, 0.0], [1.0, 0.0]]
        assert m.rescale('all').to_list() == [[0.0, 0.5], [1.0, 0.5]]

    def test_reductions(self):
        assert self.m.sum() == 21
        assert self.m.sum(axis=0) == [5, 7, 9]
        assert self.m.sum(axis=1) == [6, 15]
        assert self.m.cumsum() == [1, 3, 6, 10, 15, 21]
        assert self.m.min() == 1
        assert self.m.max() == 6

    def test_trace_requires_square(self):
        with pytest.raises(DimensionError):
            self.m.trace()
        assert Matrix([[1, 2], [3, 4]]).trace() == 5

    def test_conjugate(self):
        c = Matrix([[1 + 2j, 3]]).conjugate()
        assert c[0, 0] == 1 - 2j


# ═══════════════════════════════════════════════════════════════════════
# Determinant, inverse and subspaces
# ═══════════════════════════════════════════════════════════════════════


class TestLinearAlgebra:

    def test_exact_determinant(self):
        det = Matrix([[1, 2], [3, 4]]).determinant()
        assert det == -2
        assert isinstance(det, int)

    def test_determinant_needs_row_swap(self):
        assert Matrix([[0, 1], [1, 0]]).det() == -1

    def test_rational_determinant(self):
        m = Matrix([[Fraction(1, 2), 0], [0, Fraction(2, 3)]])
        assert m.determinant() == Fraction(1, 3)

    def test_float_determinant(self, rng):
        a = rng.standard_normal((4, 4))
        assert Matrix(a).determinant() == pytest.approx(np.linalg.det(a))

    def test_singular_determinant(self):
        assert Matrix([[1, 2], [2, 4]]).determinant() == 0

    def test_exact_inverse(self):
        inv = Matrix([[1, 2], [3, 4]]).inverse()
        assert inv.kind is NumberKind.RATIONAL
        assert inv[1, 0] == Fraction(3, 2)
        assert Matrix([[1, 2], [3, 4]]) @ inv == Matrix.eye(2)

    def test_inverse_of_inverse(self):
        m = Matrix([[1, 2], [3, 4]])
        assert m.inverse().inverse() == m
        floats = Matrix([[4.0, 7.0], [2.0, 6.0]])
        assert floats.inverse().inverse().is_almost_equal(floats)

    def test_singular_inverse(self):
        with pytest.raises(SingularMatrixError) as info:
            Matrix([[1, 2], [2, 4]]).inverse()
        assert info.value.expected_rank == 2

    def test_cofactors_and_adjoint(self):
        m = Matrix([[1, 2], [3, 4]])
        assert m.cofactors() == Matrix([[4, -3], [-2, 1]])
        assert m.adjoint() == Matrix([[4, -2], [-3, 1]])
        assert m.minor(0, 0) == Matrix([[4]])

    def test_rank_and_rref(self):
        m = Matrix([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
        assert m.rank() == 2
        assert m.reduced_row_echelon() == Matrix([[1, 0, -1], [0, 1, 2], [0, 0, 0]])
        assert m.is_singular()

    def test_null_space(self):
        m = Matrix([[1, 2], [2, 4]])
        basis = m.null_space()
        assert basis.shape == (2, 1)
        assert m @ basis == Matrix.zeros(2, 1)

    def test_null_space_of_full_rank_is_empty(self):
        assert Matrix.eye(3).null_space().shape == (3, 0)

    def test_row_and_column_space(self):
        m = Matrix([[1, 2], [2, 4]])
        assert m.row_space() == Matrix([[1, 2]])
        assert m.column_space() == Matrix([[1], [2]])

    def test_condition_number(self):
        assert Matrix.eye(3).condition_number() == pytest.approx(1.0)
        assert Matrix([[1, 2], [2, 4]]).condition_number() > 1e12

    def test_predicates(self):
        sym = Matrix([[2, 1], [1, 3]])
        assert sym.is_symmetric()
        assert not Matrix([[1, 2], [3, 4]]).is_symmetric()
        assert Matrix([[1, 2], [0, 3]]).is_upper_triangular()
        assert Matrix([[1, 0], [2, 3]]).is_lower_triangular()
        assert not Matrix([[1, 2, 3]]).is_upper_triangular()

    def test_symmetric_with_tolerance(self):
        m = Matrix([[1.0, 2.0], [2.0 + 1e-12, 1.0]])
        assert not m.is_symmetric()
        assert m.is_symmetric(tol=1e-9)

    def test_normalize_by_max(self):
        assert Matrix([[1, 2], [3, 4]]).normalize().to_list() == [[0.25, 0.5], [0.75, 1.0]]

    def test_normalize_zero_matrix(self):
        with pytest.raises(NumericalError):
            Matrix.zeros(2, 2).normalize()

    def test_decompose_shortcut(self):
        m = Matrix([[4.0, 3.0], [6.0, 3.0]])
        assert m.decompose('partial_pivot').verify(m)


# ═══════════════════════════════════════════════════════════════════════
# Serialization
# ═══════════════════════════════════════════════════════════════════════


class TestBytes:

    def test_round_trip(self):
        m = Matrix([[1.5, 2.0], [3.0, -4.25]])
        payload = m.to_bytes()
        assert len(payload) == 8 + 4 * 8
        assert Matrix.from_bytes(payload) == m

    def test_header_is_little_endian_int32(self):
        payload = Matrix([[1, 2, 3]]).to_bytes()
        assert payload[:8] == b'\x01\x00\x00\x00\x03\x00\x00\x00'

    def test_truncated_header(self):
        with pytest.raises(ParseError) as info:
            Matrix.from_bytes(b'\x01\x00')
        assert info.value.position == 0

    def test_payload_mismatch(self):
        payload = Matrix([[1.0, 2.0]]).to_bytes()[:-1]
        with pytest.raises(ParseError) as info:
            Matrix.from_bytes(payload)
        assert info.value.position == 8

    def test_complex_has_no_layout(self):
        with pytest.raises(ValidationError):
            Matrix([[1j]]).to_bytes()
