"""
Tests for the formula parser.

Validates:
    - Precedence and associativity of the operator grammar
    - Functions, calls, member access, indexing and conditionals
    - Implicit multiplication after numbers
    - ParseError position and fragment reporting
    - Rendered trees parse back to the same tree
"""

import pytest

from pyalgebra.core.exceptions import ParseError
from pyalgebra.expression import (
    Add,
    Call,
    Comparison,
    Conditional,
    Divide,
    Expression,
    Function,
    Index,
    Literal,
    Member,
    Multiply,
    Negate,
    Pow,
    Subtract,
    Variable,
    parse,
    tokenize,
    try_parse,
)


x = Variable('x')
y = Variable('y')


# ═══════════════════════════════════════════════════════════════════════
# Grammar
# ═══════════════════════════════════════════════════════════════════════


class TestPrecedence:

    def test_polynomial_text(self):
        expr = parse("2*x^2 + 3*x + 1")
        assert str(expr) == '(((2 * (x ^ 2)) + (3 * x)) + 1)'
        assert expr.evaluate({'x': 2}) == 15

    def test_left_associative_subtraction(self):
        assert parse("x - y - 1") == Subtract(Subtract(x, y), Literal(1))

    def test_power_binds_tighter_than_unary_minus_on_the_right(self):
        assert parse("x^-1") == Pow(x, Literal(-1))

    def test_power_is_right_associative(self):
        assert parse("x^2^3") == Pow(x, Pow(Literal(2), Literal(3)))

    def test_double_star_is_power(self):
        assert parse("x ** 2") == Pow(x, Literal(2))

    def test_parentheses(self):
        assert parse("(x + 1) * y") == Multiply(Add(x, Literal(1)), y)

    def test_negative_literal_folds(self):
        assert parse("-3") == Literal(-3)
        assert parse("-x") == Negate(x)

    def test_unary_plus(self):
        assert parse("+x") == x

    def test_division_and_modulo(self):
        assert parse("x / 2 % 3") == parse("(x / 2) % 3")
        assert isinstance(parse("x / y"), Divide)


class TestLiterals:

    def test_numbers(self):
        assert parse("42") == Literal(42)
        assert parse("2.5") == Literal(2.5)
        assert parse("1e3") == Literal(1000.0)
        assert parse(".5") == Literal(0.5)

    def test_imaginary(self):
        assert parse("2j") == Literal(2j)

    def test_booleans_and_strings(self):
        assert parse("true") == Literal(True)
        assert parse("false") == Literal(False)
        assert parse("'hi'") == Literal('hi')
        assert parse('"a\\nb"') == Literal('a\nb')


class TestImplicitMultiplication:

    def test_number_then_name(self):
        assert parse("3x") == Multiply(Literal(3), x)

    def test_number_then_parenthesis(self):
        assert parse("2(x + 1)") == Multiply(Literal(2), Add(x, Literal(1)))

    def test_coefficient_before_parenthesis_evaluates(self):
        assert parse("3(x+1)").evaluate({'x': 1}) == 6
        assert parse("2(x)^2").evaluate(3) == 18

    def test_parenthesised_callee_still_calls(self):
        assert isinstance(parse("(f)(2)"), Call)

    def test_names_do_not_juxtapose(self):
        with pytest.raises(ParseError):
            parse("x y")


class TestAccessNodes:

    def test_known_function(self):
        assert parse("sin(x)") == Function('sin', x)

    def test_unknown_name_is_a_call(self):
        assert parse("f(x, y)") == Call(Variable('f'), (x, y))

    def test_known_name_with_two_arguments_is_a_call(self):
        assert isinstance(parse("sin(x, y)"), Call)

    def test_member(self):
        assert parse("p.x") == Member(Variable('p'), 'x')

    def test_index(self):
        assert parse("v[0]") == Index(Variable('v'), Literal(0))

    def test_chained_postfix(self):
        expr = parse("a.b[1](2)")
        assert isinstance(expr, Call)
        assert isinstance(expr.callee, Index)
        assert isinstance(expr.callee.obj, Member)

    def test_conditional(self):
        expr = parse("x > 1 ? 2 : 3")
        assert expr == Conditional(
            Comparison('>', x, Literal(1)), Literal(2), Literal(3),
        )
        assert expr.evaluate(5) == 2
        assert expr.evaluate(0) == 3


# ═══════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════


class TestErrors:

    def test_unexpected_character(self):
        with pytest.raises(ParseError) as exc_info:
            parse("x # 1")
        assert exc_info.value.position == 2
        assert exc_info.value.fragment == '#'
        assert exc_info.value.source == "x # 1"

    def test_trailing_operator(self):
        with pytest.raises(ParseError, match="unexpected end of input") as exc_info:
            parse("2 * ")
        assert exc_info.value.position == 4
        assert exc_info.value.fragment == '*'

    def test_unclosed_parenthesis(self):
        with pytest.raises(ParseError, match="expected '\\)'") as exc_info:
            parse("(x + 1")
        assert exc_info.value.position == 6

    def test_unexpected_token(self):
        with pytest.raises(ParseError) as exc_info:
            parse("x y")
        assert exc_info.value.position == 2
        assert exc_info.value.fragment == 'y'

    def test_empty(self):
        with pytest.raises(ParseError, match="empty"):
            parse("   ")

    def test_not_a_string(self):
        with pytest.raises(ParseError):
            parse(42)

    def test_try_parse(self):
        assert try_parse("x +") is None
        assert try_parse("x + 1") == Add(x, Literal(1))

    def test_static_entry_points(self):
        assert Expression.parse("x") == x
        assert Expression.try_parse(")") is None


# ═══════════════════════════════════════════════════════════════════════
# Tokens and round trips
# ═══════════════════════════════════════════════════════════════════════


def test_tokenize():
    tokens = tokenize("x ** 2")
    assert [t.kind for t in tokens] == ['name', 'op', 'number']
    assert [t.text for t in tokens] == ['x', '^', '2']
    assert [t.position for t in tokens] == [0, 2, 5]


@pytest.mark.parametrize("text", [
    "2*x^2 + 3*x + 1",
    "(x - y) / (x + y)",
    "sin(x)^2 + cos(2*x)",
    "-x * 3 % 2",
    "x^-2",
    "f(x, 2) + p.q",
])
def test_render_parses_back(text):
    expr = parse(text)
    assert parse(str(expr)) == expr
