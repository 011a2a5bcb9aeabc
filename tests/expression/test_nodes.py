"""
Tests for expression nodes.

Validates:
    - Literal and Variable construction and rendering
    - Operator overloading builds trees
    - Full and partial evaluation, and numeric failures
    - Structural queries: variables, variable terms, depth, size, walk
    - Substitution
    - Member access, calls and indexing against host values
"""

import math
from fractions import Fraction
from types import SimpleNamespace

import pytest

from pyalgebra.core.exceptions import (
    NumericalError,
    UnsupportedOperationError,
    ValidationError,
)
from pyalgebra.expression import (
    Add,
    Call,
    Comparison,
    Function,
    Index,
    Literal,
    Member,
    Multiply,
    Negate,
    Pow,
    Variable,
    parse,
    variants,
)


x = Variable('x')
y = Variable('y')
z = Variable('z')


# ═══════════════════════════════════════════════════════════════════════
# Leaves
# ═══════════════════════════════════════════════════════════════════════


class TestLiteral:

    def test_normalized(self):
        assert Literal(Fraction(4, 2)) == Literal(2)
        assert isinstance(Literal(Fraction(4, 2)).value, int)

    def test_rendering(self):
        assert str(Literal(3)) == '3'
        assert str(Literal(-2)) == '(-2)'
        assert str(Literal(Fraction(1, 3))) == '(1/3)'
        assert str(Literal(True)) == 'true'
        assert str(Literal('a')) == "'a'"

    def test_rejects_other_values(self):
        with pytest.raises(ValidationError, match="Literal"):
            Literal([1, 2])

    def test_is_numeric(self):
        assert Literal(2.5).is_numeric
        assert not Literal(True).is_numeric
        assert not Literal('s').is_numeric


class TestVariable:

    def test_name_rendering(self):
        assert str(Variable('rate')) == 'rate'

    @pytest.mark.parametrize("name", ["1x", "a b", "", "x-y"])
    def test_invalid_names(self, name):
        with pytest.raises(ValidationError):
            Variable(name)

    def test_structural_equality_and_hash(self):
        assert Variable('x') == x
        assert len({Variable('x'), x, y}) == 2


def test_every_node_type_is_registered():
    registered = set(variants())
    for node_type in (Literal, Variable, Negate, Add, Pow, Function, Member, Call, Index):
        assert node_type in registered


# ═══════════════════════════════════════════════════════════════════════
# Operators
# ═══════════════════════════════════════════════════════════════════════


class TestOperators:

    def test_builds_tree(self):
        expr = 2 * x ** 2 + 1
        assert expr == Add(Multiply(Literal(2), Pow(x, Literal(2))), Literal(1))
        assert expr.evaluate(3) == 19

    def test_reflected(self):
        assert 1 - x == parse("1 - x")
        assert 1 / x == parse("1 / x")
        assert 2 ** x == parse("2 ^ x")

    def test_negation(self):
        assert -x == Negate(x)
        assert str(-x) == '(-x)'

    def test_unsupported_operand(self):
        with pytest.raises(TypeError):
            x + [1]


# ═══════════════════════════════════════════════════════════════════════
# Evaluation
# ═══════════════════════════════════════════════════════════════════════


class TestEvaluate:

    def test_mapping(self):
        assert parse("x * y + 1").evaluate({'x': 2, 'y': 5}) == 11

    def test_single_value_binds_only_variable(self):
        assert parse("y^2").evaluate(4) == 16

    def test_single_value_with_several_variables(self):
        with pytest.raises(ValidationError, match="mapping"):
            parse("x + y").evaluate(1)

    def test_constant(self):
        assert parse("2 + 3 * 4").evaluate() == 14

    def test_partial(self):
        result = parse("x + y").evaluate({'x': 1})
        assert str(result) == '(1 + y)'

    def test_partial_folds_constants(self):
        result = parse("x + 2 * 3").evaluate({})
        assert str(result) == '(x + 6)'

    def test_partial_zero_product(self):
        assert parse("0 * y").evaluate({}) == 0

    def test_integer_division_is_real(self):
        assert parse("1 / 4").evaluate() == 0.25

    def test_functions(self):
        assert parse("sin(x)").evaluate(0.5) == pytest.approx(math.sin(0.5))
        assert parse("log(x)").evaluate(100) == pytest.approx(2.0)
        assert parse("abs(x)").evaluate(-3) == 3

    def test_division_by_zero(self):
        with pytest.raises(NumericalError, match="division by zero"):
            parse("1 / x").evaluate(0)

    @pytest.mark.parametrize("text,value", [
        ("ln(x)", 0),
        ("ln(x)", -1),
        ("sqrt(x)", -4),
    ])
    def test_function_domain(self, text, value):
        with pytest.raises(NumericalError, match="undefined"):
            parse(text).evaluate(value)

    def test_zero_to_negative_power(self):
        with pytest.raises(NumericalError):
            parse("x ^ -1").evaluate(0)

    def test_comparison_and_conditional(self):
        assert parse("x <= 2").evaluate(2) is True
        assert parse("x == 1 ? 10 : 20").evaluate(3) == 20

    def test_unknown_function(self):
        with pytest.raises(ValidationError, match="unknown function"):
            Function('foo', x)

    def test_unknown_comparison(self):
        with pytest.raises(ValidationError):
            Comparison('<>', x, y)


# ═══════════════════════════════════════════════════════════════════════
# Structure
# ═══════════════════════════════════════════════════════════════════════


class TestStructure:

    def test_get_variables(self):
        assert parse("x^2*y + z").get_variables() == {x, y, z}
        assert parse("3 + 4").get_variables() == set()

    def test_get_variable_terms(self):
        terms = parse("3*x^2 + x*y + z").get_variable_terms()
        assert terms == {Pow(x, Literal(2)), Multiply(x, y), z}

    def test_depth_and_size(self):
        expr = parse("x + 1")
        assert expr.depth() == 2
        assert expr.size() == 3
        assert parse("sin(x^2)").depth() == 3

    def test_walk_is_preorder(self):
        nodes = list(parse("x * (y + 1)").walk())
        assert nodes[0] == parse("x * (y + 1)")
        assert nodes[1] == x
        assert nodes[2] == Add(y, Literal(1))
        assert len(nodes) == 5

    def test_depends_on(self):
        expr = parse("x * y")
        assert expr.depends_on('y')
        assert not expr.depends_on('z')


class TestSubstitute:

    def test_variable(self):
        expr = parse("x + y").substitute(y, 2)
        assert expr == Add(x, Literal(2))
        assert expr.evaluate(3) == 5

    def test_subtree(self):
        expr = parse("sin(x^2) + x^2")
        replaced = expr.substitute(Pow(x, Literal(2)), z)
        assert replaced == Add(Function('sin', z), z)

    def test_no_match_returns_equal_tree(self):
        expr = parse("x + 1")
        assert expr.substitute(y, 5) == expr


# ═══════════════════════════════════════════════════════════════════════
# Member access, calls and indexing
# ═══════════════════════════════════════════════════════════════════════


class TestAccess:

    def test_call_with_members(self):
        expr = parse("f(p.x, p.y)")
        value = expr.evaluate({'f': math.hypot, 'p': {'x': 3, 'y': 4}})
        assert value == pytest.approx(5.0)

    def test_attribute(self):
        point = SimpleNamespace(x=7)
        assert Member(Variable('p'), 'x').evaluate({'p': point}) == 7

    def test_missing_member(self):
        with pytest.raises(ValidationError, match="no member"):
            parse("p.w").evaluate({'p': SimpleNamespace(x=1)})
        with pytest.raises(ValidationError, match="not found"):
            parse("p.w").evaluate({'p': {'x': 1}})

    def test_index(self):
        assert parse("v[1]").evaluate({'v': [10, 20, 30]}) == 20
        with pytest.raises(ValidationError, match="cannot index"):
            parse("v[5]").evaluate({'v': [10]})

    def test_not_callable(self):
        with pytest.raises(ValidationError, match="not callable"):
            parse("f(1)").evaluate({'f': 3})

    def test_callee_is_not_a_variable(self):
        assert parse("f(x, y)").get_variables() == {x, y}

    def test_partial_call(self):
        assert str(parse("f(x)").evaluate({'x': 2})) == 'f(2)'

    def test_calculus_through_opaque_values(self):
        assert parse("f(y)").differentiate('x') == Literal(0)
        with pytest.raises(UnsupportedOperationError):
            parse("f(x)").differentiate('x')
        with pytest.raises(UnsupportedOperationError):
            parse("v[x]").integrate('x')
