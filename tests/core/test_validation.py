"""
Tests for input validation utilities.
"""

import numpy as np
import pytest

from pyalgebra.core.exceptions import DimensionError, IndexOutOfRangeError, ValidationError
from pyalgebra.core.validation import (
    check_finite,
    check_flat_length,
    check_index,
    check_inner_dimensions,
    check_ndim,
    check_positive,
    check_rectangular,
    check_same_shape,
    check_square,
)


class TestCheckRectangular:

    def test_returns_shape(self):
        assert check_rectangular([[1, 2, 3], [4, 5, 6]], 'data') == (2, 3)

    def test_empty(self):
        assert check_rectangular([], 'data') == (0, 0)

    def test_ragged_rows(self):
        with pytest.raises(DimensionError, match="row 1 has 1 elements"):
            check_rectangular([[1, 2], [3]], 'data')


class TestShapeChecks:

    def test_flat_length_ok(self):
        check_flat_length(6, 2, 3, 'values')

    def test_flat_length_mismatch(self):
        with pytest.raises(DimensionError, match="cannot fill a 2x3"):
            check_flat_length(5, 2, 3, 'values')

    def test_flat_length_negative(self):
        with pytest.raises(ValidationError):
            check_flat_length(0, -1, 0, 'values')

    def test_ndim(self):
        with pytest.raises(DimensionError, match="expected 2D"):
            check_ndim(np.zeros(3), 2, 'data')

    def test_same_shape(self):
        with pytest.raises(DimensionError, match="shape mismatch"):
            check_same_shape((2, 2), (2, 3), 'add')

    def test_inner_dimensions(self):
        check_inner_dimensions((2, 3), (3, 4))
        with pytest.raises(DimensionError, match="3 columns but right has 2 rows"):
            check_inner_dimensions((2, 3), (2, 4))

    def test_square(self):
        check_square((3, 3), 'A')
        with pytest.raises(DimensionError, match="square"):
            check_square((2, 3), 'A')


class TestCheckIndex:

    def test_positive(self):
        assert check_index(1, 3, 'row') == 1

    def test_negative_counts_from_end(self):
        assert check_index(-1, 3, 'row') == 2

    @pytest.mark.parametrize("index", [3, -4])
    def test_out_of_range(self, index):
        with pytest.raises(IndexOutOfRangeError) as info:
            check_index(index, 3, 'column')
        assert info.value.index == index
        assert info.value.size == 3
        assert info.value.axis == 'column'

    def test_bool_rejected(self):
        with pytest.raises(ValidationError):
            check_index(True, 3, 'row')


class TestScalars:

    def test_finite_detects_nan(self):
        with pytest.raises(ValidationError, match="1 NaN"):
            check_finite(np.array([1.0, np.nan]), 'b')

    def test_finite_skips_object_arrays(self):
        check_finite(np.array([1, 2], dtype=object), 'b')

    @pytest.mark.parametrize("value", [0, -1.0])
    def test_positive(self, value):
        with pytest.raises(ValidationError, match="must be positive"):
            check_positive(value, 'tol')
