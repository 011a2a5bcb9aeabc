"""
Tests for limits.

Validates:
    - Direct evaluation at continuous points
    - L'Hopital's rule for 0/0 quotients, applied repeatedly
    - One-sided limits and infinite limits
    - Two-sided limits that disagree raise NumericalError
    - Argument validation
"""

import math
from dataclasses import FrozenInstanceError

import pytest

from pyalgebra.core.exceptions import NumericalError, ValidationError
from pyalgebra.expression import Limit, Polynomial, RationalFunction, limit, parse


class TestDirect:

    def test_continuous_point(self):
        assert Limit(parse("x^2"), 3).compute() == 9

    def test_function(self):
        assert limit(parse("cos(x)"), 0) == pytest.approx(1.0)

    def test_named_variable(self):
        assert limit(parse("t + 1"), 2) == 3


class TestLHopital:

    def test_sin_x_over_x(self):
        assert Limit(parse("sin(x) / x"), 0).compute() == pytest.approx(1.0)

    def test_removable_discontinuity(self):
        assert limit(parse("(x^2 - 1) / (x - 1)"), 1) == pytest.approx(2.0)

    def test_applied_twice(self):
        assert limit(parse("(1 - cos(x)) / x^2"), 0) == pytest.approx(0.5)

    def test_exponential(self):
        assert limit(parse("(exp(x) - 1) / x"), 0) == pytest.approx(1.0)

    def test_rational_function(self):
        r = RationalFunction(Polynomial((1, 0, -1)), Polynomial((1, -1)))
        assert limit(r, 1) == 2


class TestOneSided:

    def test_infinite_from_both_sides(self):
        assert limit(parse("1 / x^2"), 0) == math.inf

    def test_directional_infinity(self):
        assert limit(parse("1 / x"), 0, 'right') == math.inf
        assert limit(parse("1 / x"), 0, 'left') == -math.inf

    def test_two_sided_disagreement(self):
        with pytest.raises(NumericalError, match="does not exist"):
            limit(parse("1 / x"), 0)

    def test_sign_jump(self):
        expr = parse("abs(x) / x")
        assert limit(expr, 0, 'left') == pytest.approx(-1.0)
        assert limit(expr, 0, 'right') == pytest.approx(1.0)
        with pytest.raises(NumericalError, match="does not exist"):
            limit(expr, 0)

    def test_numeric_estimate_when_undefined_at_point(self):
        expr = parse("abs(x) / abs(x)")
        assert limit(expr, 0) == pytest.approx(1.0)


class TestValidation:

    def test_unknown_direction(self):
        with pytest.raises(ValueError, match="Unknown direction"):
            Limit(parse("x"), 0, 'up')

    @pytest.mark.parametrize("point", [math.inf, math.nan, 'a'])
    def test_point_must_be_finite(self, point):
        with pytest.raises(ValidationError, match="finite"):
            Limit(parse("x"), point)

    def test_other_free_variables(self):
        with pytest.raises(ValidationError, match="free variables"):
            limit(parse("x + y"), 0)

    def test_limit_is_frozen(self):
        lim = Limit(parse("x"), 1)
        with pytest.raises(FrozenInstanceError):
            lim.point = 2


def test_unresolved_indeterminate_form_warns():
    expr = parse("x^5 / x^5")
    with pytest.warns(RuntimeWarning, match="L'Hopital"):
        assert limit(expr, 0) == pytest.approx(1.0)
