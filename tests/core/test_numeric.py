"""
Tests for the numeric element model: kinds, promotion, normalization.
"""

from fractions import Fraction

import numpy as np
import pytest

from pyalgebra.core.exceptions import ValidationError
from pyalgebra.core.numeric import (
    NumberKind,
    as_array,
    coerce,
    is_integral,
    is_number,
    kind_of,
    kind_of_array,
    normalize_scalar,
    promote,
)


class TestKinds:

    @pytest.mark.parametrize("value, kind", [
        (3, NumberKind.INTEGER),
        (np.int32(3), NumberKind.INTEGER),
        (Fraction(1, 3), NumberKind.RATIONAL),
        (0.5, NumberKind.REAL),
        (1 + 2j, NumberKind.COMPLEX),
    ])
    def test_kind_of(self, value, kind):
        assert kind_of(value) is kind

    def test_bool_rejected(self):
        with pytest.raises(ValidationError):
            kind_of(True)

    def test_string_rejected(self):
        with pytest.raises(ValidationError, match="unsupported element type"):
            kind_of("3")

    def test_promotion_order(self):
        assert promote(NumberKind.INTEGER, NumberKind.RATIONAL) is NumberKind.RATIONAL
        assert promote(NumberKind.RATIONAL, NumberKind.REAL) is NumberKind.REAL
        assert promote(NumberKind.REAL, NumberKind.COMPLEX) is NumberKind.COMPLEX
        assert promote() is NumberKind.INTEGER

    def test_object_array_kind(self):
        array = np.array([1, Fraction(1, 2)], dtype=object)
        assert kind_of_array(array) is NumberKind.RATIONAL


class TestConversion:

    def test_coerce_never_demotes(self):
        with pytest.raises(ValidationError, match="cannot demote"):
            coerce(0.5, NumberKind.INTEGER)

    def test_coerce_to_rational(self):
        assert coerce(2, NumberKind.RATIONAL) == Fraction(2)
        assert isinstance(coerce(2, NumberKind.RATIONAL), Fraction)

    def test_as_array_rational_is_object(self):
        array = as_array([1, Fraction(1, 3)])
        assert array.dtype == object
        assert all(isinstance(v, Fraction) for v in array)

    def test_as_array_forced_real(self):
        assert as_array([1, 2], NumberKind.REAL).dtype == np.float64

    @pytest.mark.parametrize("value, expected", [
        (np.float64(1.5), 1.5),
        (Fraction(4, 2), 2),
        (complex(3, 0), 3.0),
        (Fraction(1, 3), Fraction(1, 3)),
    ])
    def test_normalize_scalar(self, value, expected):
        out = normalize_scalar(value)
        assert out == expected
        assert type(out) is type(expected)

    def test_predicates(self):
        assert is_number(2.5)
        assert not is_number(True)
        assert is_integral(np.int64(4))
        assert not is_integral(4.0)
