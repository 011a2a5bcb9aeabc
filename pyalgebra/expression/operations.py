"""
Binary arithmetic nodes.

Rendering is fully parenthesized: Add(x, 1) prints as "(x + 1)" and
Pow(x, 2) as "(x ^ 2)", so printed trees parse back to the same value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from pyalgebra.core.exceptions import NumericalError, UnsupportedOperationError
from pyalgebra.core.numeric import is_number
from pyalgebra.expression.base import Expression, lift, linear_coefficient
from pyalgebra.expression.basic import Literal, Negate, Variable


def _is_zero(value: Any) -> bool:
    return is_number(value) and value == 0


def _unsupported(action: str, node: Expression, reason: str = '') -> UnsupportedOperationError:
    suffix = f": {reason}" if reason else ""
    return UnsupportedOperationError(
        f"cannot {action} {node}{suffix}", operation=action, operand=str(node),
    )


def is_monomial(node: Expression) -> bool:
    """Variable, power of a monomial to a literal, or product of monomials."""
    if isinstance(node, Variable):
        return True
    if isinstance(node, Pow):
        return isinstance(node.right, Literal) and is_monomial(node.left)
    if isinstance(node, Multiply):
        return is_monomial(node.left) and is_monomial(node.right)
    return False


@dataclass(frozen=True)
class BinaryOperation(Expression, abstract=True):
    left: Expression
    right: Expression
    
    symbol = '?'
    
    def children(self):
        return (self.left, self.right)
    
    def with_children(self, left, right):
        return type(self)(left, right)
    
    def _apply(self, left: Any, right: Any) -> Any:
        raise NotImplementedError
    
    def _partial(self, left: Any, right: Any) -> Any:
        return type(self)(lift(left), lift(right))
    
    def _evaluate(self, env):
        left = self.left._evaluate(env)
        right = self.right._evaluate(env)
        if isinstance(left, Expression) or isinstance(right, Expression):
            return self._partial(left, right)
        try:
            return self._apply(left, right)
        except OverflowError as e:
            raise NumericalError(f"{self}: {e}") from e
        except TypeError as e:
            raise UnsupportedOperationError(
                f"{self}: operands {left!r} and {right!r} do not support '{self.symbol}'",
                operation=self.symbol, operand=str(self),
            ) from e
    
    def __str__(self) -> str:
        return f"({self.left} {self.symbol} {self.right})"


@dataclass(frozen=True)
class Add(BinaryOperation):
    symbol = '+'
    
    def _apply(self, left, right):
        return left + right
    
    def _derivative(self, variable):
        return Add(self.left._derivative(variable), self.right._derivative(variable))
    
    def _antiderivative(self, variable):
        return Add(self.left._antiderivative(variable), self.right._antiderivative(variable))


@dataclass(frozen=True)
class Subtract(BinaryOperation):
    symbol = '-'
    
    def _apply(self, left, right):
        return left - right
    
    def _derivative(self, variable):
        return Subtract(self.left._derivative(variable), self.right._derivative(variable))
    
    def _antiderivative(self, variable):
        return Subtract(self.left._antiderivative(variable), self.right._antiderivative(variable))


@dataclass(frozen=True)
class Multiply(BinaryOperation):
    symbol = '*'
    
    def _apply(self, left, right):
        return left * right
    
    def _partial(self, left, right):
        if _is_zero(left) or _is_zero(right):
            return 0
        return Multiply(lift(left), lift(right))
    
    def _derivative(self, variable):
        # (uv)' = u'v + uv'
        return Add(
            Multiply(self.left._derivative(variable), self.right),
            Multiply(self.left, self.right._derivative(variable)),
        )
    
    def _antiderivative(self, variable):
        if not self.left.depends_on(variable):
            return Multiply(self.left, self.right._antiderivative(variable))
        if not self.right.depends_on(variable):
            return Multiply(self.right, self.left._antiderivative(variable))
        raise _unsupported('integrate', self, "product of two non-constant factors")
    
    def get_variable_terms(self):
        return {self} if is_monomial(self) else super().get_variable_terms()


@dataclass(frozen=True)
class Divide(BinaryOperation):
    symbol = '/'
    
    def _apply(self, left, right):
        if right == 0:
            raise NumericalError(f"division by zero in {self}")
        return left / right
    
    def _derivative(self, variable):
        # (u/v)' = (u'v - uv') / v^2
        return Divide(
            Subtract(
                Multiply(self.left._derivative(variable), self.right),
                Multiply(self.left, self.right._derivative(variable)),
            ),
            Pow(self.right, Literal(2)),
        )
    
    def _antiderivative(self, variable):
        if not self.right.depends_on(variable):
            return Divide(self.left._antiderivative(variable), self.right)
        if not self.left.depends_on(variable):
            a = linear_coefficient(self.right, variable)
            if a is not None:
                # c / (a x + b) -> c ln|a x + b| / a
                from pyalgebra.expression.functions import Function
                log = Multiply(self.left, Function('ln', Function('abs', self.right)))
                return log if a == 1 else Divide(log, Literal(a))
        raise _unsupported('integrate', self, "no closed-form rule for this quotient")
    
    def is_indeterminate(self, at, variable=None):
        name = self.resolve_variable(variable)
        try:
            top = self.left.evaluate({name: at})
            bottom = self.right.evaluate({name: at})
        except NumericalError:
            return False
        if not (is_number(top) and is_number(bottom)):
            return False
        if top == 0 and bottom == 0:
            return True
        return math.isinf(abs(top)) and math.isinf(abs(bottom))
    
    def is_infinity(self, at, variable=None):
        name = self.resolve_variable(variable)
        try:
            top = self.left.evaluate({name: at})
            bottom = self.right.evaluate({name: at})
        except NumericalError:
            return False
        if is_number(top) and is_number(bottom) and bottom == 0:
            return top != 0
        return super().is_infinity(at, name)


@dataclass(frozen=True)
class Pow(BinaryOperation):
    symbol = '^'
    
    @property
    def base(self) -> Expression:
        return self.left
    
    @property
    def exponent(self) -> Expression:
        return self.right
    
    def _apply(self, left, right):
        if left == 0 and is_number(right) and right.real < 0:
            raise NumericalError(f"zero raised to a negative power in {self}")
        return left ** right
    
    def _derivative(self, variable):
        from pyalgebra.expression.functions import Function
        u, n = self.left, self.right
        if not n.depends_on(variable):
            # (u^n)' = n u^(n-1) u'
            return Multiply(
                Multiply(n, Pow(u, Subtract(n, Literal(1)))),
                u._derivative(variable),
            )
        if not u.depends_on(variable):
            # (c^v)' = c^v ln(c) v'
            return Multiply(Multiply(self, Function('ln', u)), n._derivative(variable))
        # (u^v)' = u^v (v' ln u + v u'/u)
        return Multiply(
            self,
            Add(
                Multiply(n._derivative(variable), Function('ln', u)),
                Divide(Multiply(n, u._derivative(variable)), u),
            ),
        )
    
    def _antiderivative(self, variable):
        from pyalgebra.expression.functions import Function
        u, n = self.left, self.right
        if not self.depends_on(variable):
            return Multiply(self, Variable(variable))
        if not n.depends_on(variable):
            a = linear_coefficient(u, variable)
            if a is not None and isinstance(n, Literal) and n.is_numeric:
                if n.value == -1:
                    log = Function('ln', Function('abs', u))
                    return log if a == 1 else Divide(log, Literal(a))
                raised = Literal(n.value + 1)
                scale = raised if a == 1 else Multiply(raised, Literal(a))
                return Divide(Pow(u, raised), scale)
        elif not u.depends_on(variable):
            a = linear_coefficient(n, variable)
            if a is not None:
                scale = Function('ln', u) if a == 1 else Multiply(Function('ln', u), Literal(a))
                return Divide(self, scale)
        raise _unsupported('integrate', self, "no closed-form rule for this power")
    
    def get_variable_terms(self):
        return {self} if is_monomial(self) else super().get_variable_terms()


@dataclass(frozen=True)
class Modulo(BinaryOperation):
    symbol = '%'
    
    def _apply(self, left, right):
        if right == 0:
            raise NumericalError(f"modulo by zero in {self}")
        return left % right
    
    def _derivative(self, variable):
        # d/dx (u mod c) = u' almost everywhere
        if self.right.depends_on(variable):
            raise _unsupported('differentiate', self, "divisor depends on the variable")
        return self.left._derivative(variable)
    
    def _antiderivative(self, variable):
        if not self.depends_on(variable):
            return Multiply(self, Variable(variable))
        raise _unsupported('integrate', self)
