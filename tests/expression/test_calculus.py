"""
Tests for symbolic differentiation and integration.

Validates:
    - Sum, product, quotient and chain rules
    - Derivatives of the elementary functions
    - Variable resolution for single- and multi-variable expressions
    - Antiderivatives of the supported forms
    - Unsupported forms raise UnsupportedOperationError
"""

import math

import pytest

from pyalgebra.core.exceptions import UnsupportedOperationError, ValidationError
from pyalgebra.expression import (
    Divide,
    Function,
    Literal,
    Multiply,
    Pow,
    Variable,
    parse,
)


x = Variable('x')


def derivative_at(text, value, variable=None):
    return parse(text).differentiate(variable).evaluate(value)


def central_difference(text, value, h=1e-6):
    f = parse(text)
    return (f.evaluate(value + h) - f.evaluate(value - h)) / (2 * h)


# ═══════════════════════════════════════════════════════════════════════
# Differentiation
# ═══════════════════════════════════════════════════════════════════════


class TestDerivativeRules:

    def test_constant_and_variable(self):
        assert Literal(7).differentiate() == Literal(0)
        assert x.differentiate() == Literal(1)
        assert x.differentiate('y') == Literal(0)

    def test_power_rule(self):
        assert derivative_at("x^3", 2) == 12

    def test_simplified_power_rule(self):
        assert str(parse("x^2").differentiate().simplify()) == '(2 * x)'

    def test_product_rule(self):
        assert derivative_at("x^2 * sin(x)", 1.2) == pytest.approx(
            2 * 1.2 * math.sin(1.2) + 1.2 ** 2 * math.cos(1.2)
        )

    def test_quotient_rule(self):
        assert derivative_at("x / (x + 1)", 1.0) == pytest.approx(0.25)

    def test_chain_rule(self):
        assert derivative_at("exp(2*x)", 0) == pytest.approx(2.0)
        assert derivative_at("sin(x^2)", 0.7) == pytest.approx(
            math.cos(0.49) * 1.4
        )

    def test_variable_exponent(self):
        assert derivative_at("2^x", 1.0) == pytest.approx(2 * math.log(2))
        assert derivative_at("x^x", 2.0) == pytest.approx(4 * (math.log(2) + 1))

    def test_negation_and_subtraction(self):
        assert derivative_at("-(x^2) - 3*x", 2) == -7

    def test_partial_derivative(self):
        assert parse("x * y").differentiate('y').evaluate({'x': 3, 'y': 1}) == 3

    def test_modulo(self):
        assert derivative_at("(3*x) % 2", 0.1) == 3
        with pytest.raises(UnsupportedOperationError, match="divisor"):
            parse("5 % x").differentiate()

    def test_comparison_has_no_derivative(self):
        with pytest.raises(UnsupportedOperationError, match="comparison"):
            parse("x < 1").differentiate()

    def test_conditional_differentiates_branches(self):
        expr = parse("x > 0 ? x^2 : -x")
        d = expr.differentiate()
        assert d.evaluate(3) == 6
        assert d.evaluate(-3) == -1


class TestFunctionDerivatives:

    @pytest.mark.parametrize("text,point", [
        ("sin(x)", 0.4),
        ("cos(x)", 0.4),
        ("tan(x)", 0.4),
        ("sec(x)", 0.4),
        ("csc(x)", 0.4),
        ("cot(x)", 0.4),
        ("asin(x)", 0.4),
        ("acos(x)", 0.4),
        ("atan(x)", 0.4),
        ("exp(x)", 0.4),
        ("ln(x)", 0.4),
        ("log(x)", 0.4),
        ("sqrt(x)", 0.4),
        ("abs(x)", -0.4),
    ])
    def test_matches_finite_difference(self, text, point):
        assert derivative_at(text, point) == pytest.approx(
            central_difference(text, point), rel=1e-6
        )

    def test_sin_and_cos(self):
        assert parse("sin(x)").differentiate() == Multiply(Function('cos', x), Literal(1))
        assert derivative_at("cos(x)", 0.5) == pytest.approx(-math.sin(0.5))


class TestVariableResolution:

    def test_prefers_x(self):
        assert parse("x * y").differentiate().evaluate({'x': 1, 'y': 4}) == 4

    def test_single_other_variable(self):
        assert derivative_at("t^2", 3) == 6

    def test_ambiguous(self):
        with pytest.raises(ValidationError, match="ambiguous variable"):
            parse("y * z").differentiate()

    def test_variable_object(self):
        y = Variable('y')
        assert parse("x * y").differentiate(y).evaluate({'x': 5, 'y': 0}) == 5

    def test_bad_variable_type(self):
        with pytest.raises(ValidationError):
            parse("x").differentiate(3)


# ═══════════════════════════════════════════════════════════════════════
# Integration
# ═══════════════════════════════════════════════════════════════════════


class TestIntegrals:

    def test_constant(self):
        assert Literal(3).integrate() == Multiply(Literal(3), x)
        assert Literal(0).integrate() == Literal(0)

    def test_derivative_of_constant_integral_is_the_constant(self):
        assert Literal(3).integrate().differentiate().evaluate() == 3
        assert Literal(3).integrate().differentiate().evaluate(7) == 3

    def test_variable(self):
        result = x.integrate()
        assert result == Divide(Pow(x, Literal(2)), Literal(2))
        assert result.evaluate(4) == pytest.approx(8.0)

    def test_power(self):
        assert parse("x^2").integrate().evaluate(3) == pytest.approx(9.0)

    def test_power_of_linear(self):
        # (2x + 1)^3 -> (2x + 1)^4 / 8
        assert parse("(2*x + 1)^3").integrate().evaluate(1) == pytest.approx(81 / 8)

    def test_reciprocal(self):
        assert parse("1 / x").integrate().evaluate(math.e) == pytest.approx(1.0)
        assert parse("x^-1").integrate().evaluate(-math.e) == pytest.approx(1.0)

    def test_reciprocal_of_linear(self):
        assert parse("3 / (2*x + 1)").integrate().evaluate(1) == pytest.approx(
            1.5 * math.log(3)
        )

    def test_exponential_base(self):
        assert parse("2^x").integrate().evaluate(3) == pytest.approx(8 / math.log(2))

    def test_trig_and_exp(self):
        assert parse("sin(x)").integrate().evaluate(0) == pytest.approx(-1.0)
        assert parse("cos(x)").integrate().evaluate(math.pi / 2) == pytest.approx(1.0)
        assert parse("exp(x)").integrate().evaluate(1) == pytest.approx(math.e)
        assert parse("sin(2*x)").integrate().evaluate(0) == pytest.approx(-0.5)

    def test_constant_factor(self):
        assert parse("3 * x^2").integrate().evaluate(2) == pytest.approx(8.0)
        assert parse("x / 4").integrate().evaluate(2) == pytest.approx(0.5)

    def test_independent_of_variable(self):
        assert parse("y^2").integrate('x').evaluate({'x': 2, 'y': 3}) == 18

    def test_derivative_recovers_integrand(self):
        integral = parse("3*x^2 + 2*x - 5").integrate()
        assert integral.differentiate().evaluate(1.5) == pytest.approx(3 * 2.25 + 3 - 5)


class TestUnsupportedIntegrals:

    @pytest.mark.parametrize("text", [
        "x * sin(x)",
        "tan(x)",
        "sin(x^2)",
        "1 / (x^2 + 1)",
        "x^x",
        "x < 1",
        "x % 3",
    ])
    def test_raises(self, text):
        with pytest.raises(UnsupportedOperationError, match="integrate"):
            parse(text).integrate()

    def test_error_carries_operation(self):
        with pytest.raises(UnsupportedOperationError) as exc_info:
            parse("tan(x)").integrate()
        assert exc_info.value.operation == 'integrate'
