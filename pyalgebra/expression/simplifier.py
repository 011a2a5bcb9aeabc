"""
Rewrite passes and the simplifier.

A RewritePass maps every node variant to a rule. The mapping is checked
against the registered variants when the pass is built, so adding a node
type without teaching each pass about it fails at import.

Simplifier.simplify runs BASIC, FRACTIONS, TRIGONOMETRY and RATIONAL once,
in that order. It is deliberately not a fixed-point loop: a later pass can
expose work for an earlier one, and a second simplify() call picks it up.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Any, Callable, Mapping

from pyalgebra.core.exceptions import NumericalError, UnsupportedOperationError
from pyalgebra.core.numeric import normalize_scalar
from pyalgebra.expression.base import Expression, variants
from pyalgebra.expression.basic import (
    COMPARISONS,
    Comparison,
    Conditional,
    Literal,
    Negate,
    Variable,
)
from pyalgebra.expression.calls import Call, Index, Member
from pyalgebra.expression.functions import Function, apply_function
from pyalgebra.expression.operations import (
    Add,
    Divide,
    Modulo,
    Multiply,
    Pow,
    Subtract,
)
from pyalgebra.expression.polynomial import (
    MultiVariablePolynomial,
    Polynomial,
    RationalFunction,
    _div,
    _exact_sqrt,
)
from pyalgebra.expression.trig import TrigSimplifier, pythagorean


Rule = Callable[[Any, 'RewritePass'], Expression]

_MAX_FOLDED_EXPONENT = 1024


class RewritePass:
    """
    Bottom-up rewrite with one rule per node variant.
    
    Rules receive the original node and the pass; most call
    rewrite.descend(node) first to rewrite the children.
    
    Raises:
        TypeError: At construction, if a registered variant has no rule
    """
    
    def __init__(self, name: str, rules: Mapping[type, Rule]):
        missing = sorted(t.__name__ for t in variants() if t not in rules)
        if missing:
            raise TypeError(f"{name} pass has no rule for: {', '.join(missing)}")
        self.name = name
        self._rules = dict(rules)
    
    def __call__(self, node: Expression) -> Expression:
        rule = self._rules.get(type(node))
        if rule is None:
            raise UnsupportedOperationError(
                f"{self.name} pass cannot rewrite {type(node).__name__}",
                operation=self.name, operand=str(node),
            )
        return rule(node, self)
    
    def descend(self, node: Expression) -> Expression:
        """node rebuilt with every child rewritten by this pass."""
        kids = node.children()
        if not kids:
            return node
        new = tuple(self(c) for c in kids)
        if all(a is b for a, b in zip(new, kids)):
            return node
        return node.with_children(*new)
    
    def __repr__(self) -> str:
        return f"RewritePass({self.name!r})"


def _descend(node: Expression, rewrite: RewritePass) -> Expression:
    return rewrite.descend(node)


def _keep(node: Expression, rewrite: RewritePass) -> Expression:
    return node


def _num(node: Expression) -> bool:
    return isinstance(node, Literal) and node.is_numeric


def _is(node: Expression, value: Any) -> bool:
    return _num(node) and node.value == value


def _is_int(node: Expression) -> bool:
    return _num(node) and isinstance(node.value, int)


def _negate(node: Expression) -> Expression:
    if _num(node):
        return Literal(-node.value)
    if isinstance(node, Negate):
        return node.operand
    return Negate(node)


def _split(node: Expression) -> tuple[Any, Expression]:
    """(c, rest) with node == c * rest."""
    if isinstance(node, Multiply) and _num(node.left):
        return node.left.value, node.right
    if isinstance(node, Negate):
        return -1, node.operand
    return 1, node


def _like_terms(left: Expression, right: Expression, sign: int) -> Expression | None:
    cl, tl = _split(left)
    cr, tr = _split(right)
    if tl != tr or _num(tl):
        return None
    c = normalize_scalar(cl + sign * cr)
    if c == 0:
        return Literal(0)
    if c == 1:
        return tl
    if c == -1:
        return Negate(tl)
    return Multiply(Literal(c), tl)


def _power_parts(node: Expression) -> tuple[Expression, Any]:
    if isinstance(node, Pow) and _num(node.right):
        return node.left, node.right.value
    return node, 1


# ═══════════════════════════════════════════════════════════════════════
# Basic pass: constant folding and algebraic identities
# ═══════════════════════════════════════════════════════════════════════

def _basic_negate(node: Negate, rewrite: RewritePass) -> Expression:
    return _negate(rewrite(node.operand))


def _basic_add(node: Add, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    left, right = n.left, n.right
    if _num(left) and _num(right):
        return Literal(left.value + right.value)
    if _is(left, 0):
        return right
    if _is(right, 0):
        return left
    combined = _like_terms(left, right, 1)
    if combined is not None:
        return combined
    if isinstance(right, Negate):
        return Subtract(left, right.operand)
    return n


def _basic_subtract(node: Subtract, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    left, right = n.left, n.right
    if _num(left) and _num(right):
        return Literal(left.value - right.value)
    if _is(right, 0):
        return left
    if _is(left, 0):
        return _negate(right)
    combined = _like_terms(left, right, -1)
    if combined is not None:
        return combined
    if isinstance(right, Negate):
        return Add(left, right.operand)
    return n


def product(left: Expression, right: Expression) -> Expression:
    """Folded product of two already simplified factors."""
    if _num(left) and _num(right):
        return Literal(left.value * right.value)
    if _is(left, 0) or _is(right, 0):
        return Literal(0)
    if _is(left, 1):
        return right
    if _is(right, 1):
        return left
    if _num(right):
        left, right = right, left
    if _num(left):
        if _is(left, -1):
            return _negate(right)
        if isinstance(right, Multiply) and _num(right.left):
            return product(Literal(left.value * right.left.value), right.right)
        return Multiply(left, right)
    base_l, exp_l = _power_parts(left)
    base_r, exp_r = _power_parts(right)
    if base_l == base_r:
        total = normalize_scalar(exp_l + exp_r)
        if total == 0:
            return Literal(1)
        return base_l if total == 1 else Pow(base_l, Literal(total))
    return Multiply(left, right)


def _basic_multiply(node: Multiply, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    return product(n.left, n.right)


def _basic_divide(node: Divide, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    top, bottom = n.left, n.right
    if _is(bottom, 0):
        raise NumericalError(f"division by zero in {node}")
    if _num(top) and _num(bottom):
        if _is_int(top) and _is_int(bottom):
            return n
        return Literal(_div(top.value, bottom.value))
    if _is(bottom, 1):
        return top
    if _is(top, 0):
        return Literal(0)
    if top == bottom:
        return Literal(1)
    return n


def _fold_power(base: Any, exponent: Any) -> Any:
    if base == 0 and exponent.real < 0:
        raise NumericalError("zero raised to a negative power")
    if isinstance(base, (int, Fraction)) and isinstance(exponent, int) and exponent < 0:
        return Fraction(base) ** exponent
    return base ** exponent


def _basic_pow(node: Pow, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    base, exponent = n.left, n.right
    if _num(base) and _num(exponent):
        if not (isinstance(exponent.value, int) and abs(exponent.value) > _MAX_FOLDED_EXPONENT):
            return Literal(_fold_power(base.value, exponent.value))
    if _is(exponent, 0):
        return Literal(1)
    if _is(exponent, 1):
        return base
    if _is(base, 1):
        return Literal(1)
    if _is(base, 0) and _num(exponent) and exponent.value.real > 0:
        return Literal(0)
    if isinstance(base, Pow) and _is_int(base.right) and _is_int(exponent):
        return Pow(base.left, Literal(base.right.value * exponent.value))
    return n


def _basic_modulo(node: Modulo, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    if _is(n.right, 0):
        raise NumericalError(f"modulo by zero in {node}")
    if _num(n.left) and _num(n.right):
        return Literal(n.left.value % n.right.value)
    return n


_SPECIAL_VALUES: dict[tuple[str, Any], Any] = {
    ('sin', 0): 0,
    ('cos', 0): 1,
    ('tan', 0): 0,
    ('sec', 0): 1,
    ('asin', 0): 0,
    ('acos', 1): 0,
    ('atan', 0): 0,
    ('exp', 0): 1,
    ('ln', 1): 0,
    ('log', 1): 0,
    ('log', 10): 1,
}

_INVERSES = {('exp', 'ln'), ('ln', 'exp')}


def _basic_function(node: Function, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    argument = n.argument
    if _num(argument):
        value = argument.value
        if isinstance(value, (float, complex)):
            return Literal(apply_function(n.name, value))
        if (n.name, value) in _SPECIAL_VALUES:
            return Literal(_SPECIAL_VALUES[(n.name, value)])
        if n.name == 'abs':
            return Literal(abs(value))
        if n.name == 'sqrt':
            root = _exact_sqrt(value)
            if root is not None:
                return Literal(root)
    if isinstance(argument, Function) and (n.name, argument.name) in _INVERSES:
        return argument.argument
    return n


def _basic_comparison(node: Comparison, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    if isinstance(n.left, Literal) and isinstance(n.right, Literal):
        try:
            return Literal(bool(COMPARISONS[n.op](n.left.value, n.right.value)))
        except TypeError:
            return n
    return n


def _basic_conditional(node: Conditional, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    test = n.condition
    if isinstance(test, Literal) and isinstance(test.value, bool):
        return n.if_true if test.value else n.if_false
    if n.if_true == n.if_false:
        return n.if_true
    return n


def _basic_rational(node: RationalFunction, rewrite: RewritePass) -> Expression:
    if node.denominator.degree == 0:
        return node.numerator / node.denominator.coefficients[0]
    return node


def _basic_multivariable(node: MultiVariablePolynomial, rewrite: RewritePass) -> Expression:
    return node.combined()


BASIC = RewritePass('basic', {
    Literal: _keep,
    Variable: _keep,
    Negate: _basic_negate,
    Comparison: _basic_comparison,
    Conditional: _basic_conditional,
    Add: _basic_add,
    Subtract: _basic_subtract,
    Multiply: _basic_multiply,
    Divide: _basic_divide,
    Pow: _basic_pow,
    Modulo: _basic_modulo,
    Function: _basic_function,
    Member: _descend,
    Call: _descend,
    Index: _descend,
    Polynomial: _keep,
    RationalFunction: _basic_rational,
    MultiVariablePolynomial: _basic_multivariable,
})


# ═══════════════════════════════════════════════════════════════════════
# Fractions pass: integer quotients in lowest terms
# ═══════════════════════════════════════════════════════════════════════

def _fraction_divide(node: Divide, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    if not (_is_int(n.left) and _is_int(n.right)):
        return n
    top, bottom = n.left.value, n.right.value
    if bottom == 0:
        raise NumericalError(f"division by zero in {node}")
    if bottom < 0:
        top, bottom = -top, -bottom
    if top % bottom == 0:
        return Literal(top // bottom)
    g = math.gcd(top, bottom)
    if g == 1 and bottom == n.right.value:
        return n
    return Divide(Literal(top // g), Literal(bottom // g))


def _fraction_rational(node: RationalFunction, rewrite: RewritePass) -> Expression:
    return node.reduce()


FRACTIONS = RewritePass('fractions', {
    **{t: _descend for t in (
        Negate, Comparison, Conditional, Add, Subtract, Multiply, Pow, Modulo,
        Function, Member, Call, Index,
    )},
    Literal: _keep,
    Variable: _keep,
    Polynomial: _keep,
    MultiVariablePolynomial: _keep,
    Divide: _fraction_divide,
    RationalFunction: _fraction_rational,
})


# ═══════════════════════════════════════════════════════════════════════
# Trigonometry pass
# ═══════════════════════════════════════════════════════════════════════

def _trig_add(node: Add, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    identity = pythagorean(n)
    return n if identity is None else identity


def _trig_other(node: Expression, rewrite: RewritePass) -> Expression:
    return TrigSimplifier.rewrite(rewrite.descend(node))


TRIGONOMETRY = RewritePass('trigonometry', {
    **{t: _trig_other for t in (
        Negate, Comparison, Conditional, Subtract, Multiply, Divide, Pow, Modulo,
        Function, Member, Call, Index,
    )},
    Literal: _keep,
    Variable: _keep,
    Polynomial: _keep,
    MultiVariablePolynomial: _keep,
    RationalFunction: _keep,
    Add: _trig_add,
})


# ═══════════════════════════════════════════════════════════════════════
# Rational pass: sums involving quotients over one denominator
# ═══════════════════════════════════════════════════════════════════════

def _over_common_denominator(left: Expression, right: Expression, op: type) -> Expression | None:
    if isinstance(left, Divide) and isinstance(right, Divide):
        if str(left.right) != str(right.right):
            return None
        return Divide(BASIC(op(left.left, right.left)), left.right)
    if isinstance(left, Divide):
        return Divide(BASIC(op(left.left, Multiply(right, left.right))), left.right)
    if isinstance(right, Divide):
        return Divide(BASIC(op(Multiply(left, right.right), right.left)), right.right)
    return None


def _rational_sum(node: Add | Subtract, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    combined = _over_common_denominator(n.left, n.right, type(n))
    return n if combined is None else combined


RATIONAL = RewritePass('rational', {
    **{t: _descend for t in (
        Negate, Comparison, Conditional, Multiply, Divide, Pow, Modulo,
        Function, Member, Call, Index,
    )},
    Literal: _keep,
    Variable: _keep,
    Polynomial: _keep,
    MultiVariablePolynomial: _keep,
    RationalFunction: _keep,
    Add: _rational_sum,
    Subtract: _rational_sum,
})


# ═══════════════════════════════════════════════════════════════════════
# Expansion
# ═══════════════════════════════════════════════════════════════════════

def _summands(node: Expression) -> list[tuple[int, Expression]]:
    if isinstance(node, Add):
        return _summands(node.left) + _summands(node.right)
    if isinstance(node, Subtract):
        return _summands(node.left) + [(-s, t) for s, t in _summands(node.right)]
    if isinstance(node, Negate):
        return [(-s, t) for s, t in _summands(node.operand)]
    return [(1, node)]


def _is_sum(node: Expression) -> bool:
    return isinstance(node, (Add, Subtract))


def _rebuild(summands: list[tuple[int, Expression]]) -> Expression:
    sign, result = summands[0]
    if sign < 0:
        result = Negate(result)
    for sign, term in summands[1:]:
        result = Add(result, term) if sign > 0 else Subtract(result, term)
    return result


def _distribute(left: Expression, right: Expression) -> Expression:
    return _rebuild([
        (sl * sr, Multiply(tl, tr))
        for sl, tl in _summands(left)
        for sr, tr in _summands(right)
    ])


def _expand_multiply(node: Multiply, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    if _is_sum(n.left) or _is_sum(n.right):
        return _distribute(n.left, n.right)
    return n


def _expand_pow(node: Pow, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    if _is_sum(n.left) and _is_int(n.right) and n.right.value >= 2:
        result = n.left
        for _ in range(n.right.value - 1):
            result = _distribute(result, n.left)
        return result
    return n


def _expand_negate(node: Negate, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    if _is_sum(n.operand):
        return _rebuild(_summands(n))
    return n


def _expand_divide(node: Divide, rewrite: RewritePass) -> Expression:
    n = rewrite.descend(node)
    if _is_sum(n.left):
        return _rebuild([(s, Divide(t, n.right)) for s, t in _summands(n.left)])
    return n


EXPAND = RewritePass('expand', {
    **{t: _descend for t in (
        Comparison, Conditional, Add, Subtract, Modulo, Function, Member, Call, Index,
    )},
    Literal: _keep,
    Variable: _keep,
    Polynomial: _keep,
    MultiVariablePolynomial: _keep,
    RationalFunction: _keep,
    Negate: _expand_negate,
    Multiply: _expand_multiply,
    Pow: _expand_pow,
    Divide: _expand_divide,
})


class Simplifier:
    """Runs the simplification passes once, in order."""
    
    PASSES: tuple[RewritePass, ...] = (BASIC, FRACTIONS, TRIGONOMETRY, RATIONAL)
    
    @classmethod
    def simplify(cls, expression: Expression) -> Expression:
        for rewrite in cls.PASSES:
            expression = rewrite(expression)
        return expression
