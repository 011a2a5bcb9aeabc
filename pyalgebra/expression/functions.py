"""
Named elementary functions of one argument.

Each function has a numeric implementation, a derivative f'(u) and,
where a closed form exists, an antiderivative F(u). Integration applies
F only to arguments linear in the variable, dividing by the slope.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Callable

import numpy as np

from pyalgebra.core.exceptions import (
    NumericalError,
    UnsupportedOperationError,
    ValidationError,
)
from pyalgebra.expression.base import Expression, lift, linear_coefficient
from pyalgebra.expression.basic import Literal, Negate, Variable
from pyalgebra.expression.operations import Add, Divide, Multiply, Pow, Subtract


@dataclass(frozen=True)
class FunctionRule:
    numeric: Callable[[Any], Any]
    derivative: Callable[[Expression], Expression]
    antiderivative: Callable[[Expression], Expression] | None = None


def _f(name: str, u: Expression) -> Expression:
    return Function(name, u)


def _one_over_root(u: Expression) -> Expression:
    return Divide(Literal(1), _f('sqrt', Subtract(Literal(1), Pow(u, Literal(2)))))


FUNCTIONS: dict[str, FunctionRule] = {
    'sin': FunctionRule(
        np.sin,
        lambda u: _f('cos', u),
        lambda u: Negate(_f('cos', u)),
    ),
    'cos': FunctionRule(
        np.cos,
        lambda u: Negate(_f('sin', u)),
        lambda u: _f('sin', u),
    ),
    'tan': FunctionRule(
        np.tan,
        lambda u: Pow(_f('sec', u), Literal(2)),
    ),
    'sec': FunctionRule(
        lambda v: 1 / np.cos(v),
        lambda u: Multiply(_f('sec', u), _f('tan', u)),
    ),
    'csc': FunctionRule(
        lambda v: 1 / np.sin(v),
        lambda u: Negate(Multiply(_f('csc', u), _f('cot', u))),
    ),
    'cot': FunctionRule(
        lambda v: 1 / np.tan(v),
        lambda u: Negate(Pow(_f('csc', u), Literal(2))),
    ),
    'asin': FunctionRule(np.arcsin, _one_over_root),
    'acos': FunctionRule(np.arccos, lambda u: Negate(_one_over_root(u))),
    'atan': FunctionRule(
        np.arctan,
        lambda u: Divide(Literal(1), Add(Literal(1), Pow(u, Literal(2)))),
    ),
    'exp': FunctionRule(
        np.exp,
        lambda u: _f('exp', u),
        lambda u: _f('exp', u),
    ),
    'ln': FunctionRule(
        np.log,
        lambda u: Divide(Literal(1), u),
    ),
    'log': FunctionRule(
        np.log10,
        lambda u: Divide(Literal(1), Multiply(u, _f('ln', Literal(10)))),
    ),
    'sqrt': FunctionRule(
        np.sqrt,
        lambda u: Divide(Literal(1), Multiply(Literal(2), _f('sqrt', u))),
    ),
    'abs': FunctionRule(
        abs,
        lambda u: Divide(u, _f('abs', u)),
    ),
}


def apply_function(name: str, value: Any) -> Any:
    """
    Numeric value of a named function.
    
    Raises:
        NumericalError: Argument outside the function's domain
    """
    if isinstance(value, Fraction):
        value = float(value)
    with np.errstate(all='raise'):
        try:
            result = FUNCTIONS[name].numeric(value)
        except (FloatingPointError, ZeroDivisionError) as e:
            raise NumericalError(f"{name}({value}) is undefined: {e}") from e
    if isinstance(result, np.generic):
        result = result.item()
    return result


@dataclass(frozen=True)
class Function(Expression):
    """Named function applied to one argument, e.g. sin(x)."""
    name: str
    argument: Expression
    
    def __post_init__(self):
        if self.name not in FUNCTIONS:
            raise ValidationError(
                f"Function: unknown function {self.name!r}. Valid: {sorted(FUNCTIONS)}"
            )
    
    def children(self):
        return (self.argument,)
    
    def with_children(self, argument):
        return Function(self.name, argument)
    
    def _evaluate(self, env):
        value = self.argument._evaluate(env)
        if isinstance(value, Expression):
            return Function(self.name, value)
        return apply_function(self.name, value)
    
    def _derivative(self, variable):
        inner = self.argument._derivative(variable)
        outer = FUNCTIONS[self.name].derivative(self.argument)
        return Multiply(outer, inner)
    
    def _antiderivative(self, variable):
        if not self.depends_on(variable):
            return Multiply(self, Variable(variable))
        rule = FUNCTIONS[self.name].antiderivative
        a = linear_coefficient(self.argument, variable)
        if rule is None or a is None:
            raise UnsupportedOperationError(
                f"cannot integrate {self}: no closed-form antiderivative",
                operation='integrate', operand=str(self),
            )
        result = rule(self.argument)
        return result if a == 1 else Divide(result, Literal(a))
    
    def __str__(self) -> str:
        return f"{self.name}({self.argument})"


def _factory(name: str) -> Callable[[Any], Function]:
    def build(argument: Any) -> Function:
        return Function(name, lift(argument))
    build.__name__ = name
    build.__doc__ = f"{name}(argument) node."
    return build


sin = _factory('sin')
cos = _factory('cos')
tan = _factory('tan')
sec = _factory('sec')
csc = _factory('csc')
cot = _factory('cot')
asin = _factory('asin')
acos = _factory('acos')
atan = _factory('atan')
exp = _factory('exp')
ln = _factory('ln')
log = _factory('log')
sqrt = _factory('sqrt')
absolute = _factory('abs')
