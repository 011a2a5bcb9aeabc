"""
Leaf nodes, negation and conditionals.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Callable

import numpy as np

from pyalgebra.core.exceptions import UnsupportedOperationError, ValidationError
from pyalgebra.core.numeric import is_number, normalize_scalar
from pyalgebra.expression.base import Expression, lift


def _is_value(value: Any) -> bool:
    return is_number(value) or isinstance(value, (bool, np.bool_, str))


@dataclass(frozen=True)
class Literal(Expression):
    """
    Constant: a number, a boolean or a string.
    
    Numbers are normalized on construction, so Literal(Fraction(4, 2)) is
    Literal(2).
    """
    value: Any
    
    def __post_init__(self):
        value = self.value
        if isinstance(value, np.generic):
            value = value.item()
        if not _is_value(value):
            raise ValidationError(
                f"Literal: expected a number, bool or str, got {type(value).__name__}"
            )
        if is_number(value):
            value = normalize_scalar(value)
        object.__setattr__(self, 'value', value)
    
    @property
    def is_numeric(self) -> bool:
        return is_number(self.value)
    
    def _evaluate(self, env):
        return self.value
    
    def _derivative(self, variable):
        return Literal(0)
    
    def _antiderivative(self, variable):
        from pyalgebra.expression.operations import Multiply
        if self.value == 0:
            return Literal(0)
        return Multiply(self, Variable(variable))
    
    def __str__(self) -> str:
        value = self.value
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, str):
            return repr(value)
        if isinstance(value, Fraction):
            return f"({value})"
        if isinstance(value, complex):
            return str(value)
        if value < 0:
            return f"({value})"
        return str(value)


@dataclass(frozen=True)
class Variable(Expression):
    """Named free variable."""
    name: str
    
    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.replace('$', '_').isidentifier():
            raise ValidationError(f"Variable: invalid name {self.name!r}")
    
    def _evaluate(self, env):
        return env.get(self.name, self)
    
    def _derivative(self, variable):
        return Literal(1 if self.name == variable else 0)
    
    def _antiderivative(self, variable):
        from pyalgebra.expression.operations import Divide, Multiply, Pow
        if self.name == variable:
            return Divide(Pow(self, Literal(2)), Literal(2))
        return Multiply(self, Variable(variable))
    
    def get_variables(self):
        return {self}
    
    def get_variable_terms(self):
        return {self}
    
    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Negate(Expression):
    operand: Expression
    
    def children(self):
        return (self.operand,)
    
    def with_children(self, operand):
        return Negate(operand)
    
    def _evaluate(self, env):
        value = self.operand._evaluate(env)
        if isinstance(value, Expression):
            return Negate(value)
        return -value
    
    def _derivative(self, variable):
        return Negate(self.operand._derivative(variable))
    
    def _antiderivative(self, variable):
        return Negate(self.operand._antiderivative(variable))
    
    def __str__(self) -> str:
        return f"(-{self.operand})"


COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    '<': operator.lt,
    '>': operator.gt,
    '<=': operator.le,
    '>=': operator.ge,
    '==': operator.eq,
    '!=': operator.ne,
}


@dataclass(frozen=True)
class Comparison(Expression):
    """Relational test; evaluates to a bool."""
    op: str
    left: Expression
    right: Expression
    
    def __post_init__(self):
        if self.op not in COMPARISONS:
            raise ValidationError(
                f"Comparison: unknown operator {self.op!r}. Valid: {sorted(COMPARISONS)}"
            )
    
    def children(self):
        return (self.left, self.right)
    
    def with_children(self, left, right):
        return Comparison(self.op, left, right)
    
    def _evaluate(self, env):
        left = self.left._evaluate(env)
        right = self.right._evaluate(env)
        if isinstance(left, Expression) or isinstance(right, Expression):
            return Comparison(self.op, lift(left), lift(right))
        return bool(COMPARISONS[self.op](left, right))
    
    def _derivative(self, variable):
        raise UnsupportedOperationError(
            f"cannot differentiate comparison {self}", operation='differentiate', operand=str(self),
        )
    
    def _antiderivative(self, variable):
        raise UnsupportedOperationError(
            f"cannot integrate comparison {self}", operation='integrate', operand=str(self),
        )
    
    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"


@dataclass(frozen=True)
class Conditional(Expression):
    """condition ? if_true : if_false"""
    condition: Expression
    if_true: Expression
    if_false: Expression
    
    def children(self):
        return (self.condition, self.if_true, self.if_false)
    
    def with_children(self, condition, if_true, if_false):
        return Conditional(condition, if_true, if_false)
    
    def _evaluate(self, env):
        test = self.condition._evaluate(env)
        if isinstance(test, Expression):
            return Conditional(
                test, lift(self.if_true._evaluate(env)), lift(self.if_false._evaluate(env)),
            )
        branch = self.if_true if test else self.if_false
        return branch._evaluate(env)
    
    def _derivative(self, variable):
        return Conditional(
            self.condition,
            self.if_true._derivative(variable),
            self.if_false._derivative(variable),
        )
    
    def _antiderivative(self, variable):
        return Conditional(
            self.condition,
            self.if_true._antiderivative(variable),
            self.if_false._antiderivative(variable),
        )
    
    def __str__(self) -> str:
        return f"({self.condition} ? {self.if_true} : {self.if_false})"
