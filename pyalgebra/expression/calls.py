"""
Member access, calls and indexing on bound objects.

These nodes let formulas reach into host values: with
{'p': point, 'f': math.hypot} bound, "f(p.x, p.y)" evaluates to a number.
They are constant for calculus unless they involve the variable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from pyalgebra.core.exceptions import UnsupportedOperationError, ValidationError
from pyalgebra.expression.base import Expression, lift
from pyalgebra.expression.basic import Literal, Variable


def _opaque(action: str, node: Expression) -> UnsupportedOperationError:
    return UnsupportedOperationError(
        f"cannot {action} {node}: it depends on the variable through an opaque value",
        operation=action, operand=str(node),
    )


def _keep(node: Expression, value: Any) -> Expression:
    """Evaluated value as a node, or the original node for host objects."""
    if isinstance(value, Expression):
        return value
    try:
        return lift(value)
    except ValidationError:
        return node


class _Opaque:
    """Calculus rules shared by the access nodes."""
    
    def _derivative(self, variable):
        if not self.depends_on(variable):
            return Literal(0)
        raise _opaque('differentiate', self)
    
    def _antiderivative(self, variable):
        from pyalgebra.expression.operations import Multiply
        if not self.depends_on(variable):
            return Multiply(self, Variable(variable))
        raise _opaque('integrate', self)


@dataclass(frozen=True)
class Member(_Opaque, Expression):
    """obj.name"""
    obj: Expression
    name: str
    
    def children(self):
        return (self.obj,)
    
    def with_children(self, obj):
        return Member(obj, self.name)
    
    def _evaluate(self, env):
        target = self.obj._evaluate(env)
        if isinstance(target, Expression):
            return Member(target, self.name)
        if isinstance(target, Mapping):
            if self.name not in target:
                raise ValidationError(f"{self}: key {self.name!r} not found")
            return target[self.name]
        try:
            return getattr(target, self.name)
        except AttributeError as e:
            raise ValidationError(
                f"{self}: {type(target).__name__} has no member {self.name!r}"
            ) from e
    
    def __str__(self) -> str:
        return f"{self.obj}.{self.name}"


@dataclass(frozen=True)
class Call(_Opaque, Expression):
    """callee(arguments...)"""
    callee: Expression
    arguments: tuple[Expression, ...] = ()
    
    def __post_init__(self):
        object.__setattr__(self, 'arguments', tuple(lift(a) for a in self.arguments))
    
    def children(self):
        return (self.callee, *self.arguments)
    
    def with_children(self, callee, *arguments):
        return Call(callee, arguments)
    
    def get_variables(self):
        # A bare callee name is a function, not a variable.
        found = set() if isinstance(self.callee, Variable) else self.callee.get_variables()
        for argument in self.arguments:
            found |= argument.get_variables()
        return found
    
    def _evaluate(self, env):
        fn = self.callee._evaluate(env)
        values = [a._evaluate(env) for a in self.arguments]
        if isinstance(fn, Expression) or any(isinstance(v, Expression) for v in values):
            return Call(
                _keep(self.callee, fn),
                tuple(_keep(a, v) for a, v in zip(self.arguments, values)),
            )
        if not callable(fn):
            raise ValidationError(f"{self}: {type(fn).__name__} is not callable")
        return fn(*values)
    
    def __str__(self) -> str:
        args = ', '.join(str(a) for a in self.arguments)
        return f"{self.callee}({args})"


@dataclass(frozen=True)
class Index(_Opaque, Expression):
    """obj[index]"""
    obj: Expression
    index: Expression
    
    def children(self):
        return (self.obj, self.index)
    
    def with_children(self, obj, index):
        return Index(obj, index)
    
    def _evaluate(self, env):
        target = self.obj._evaluate(env)
        key = self.index._evaluate(env)
        if isinstance(target, Expression) or isinstance(key, Expression):
            return Index(_keep(self.obj, target), _keep(self.index, key))
        try:
            return target[key]
        except (KeyError, IndexError, TypeError) as e:
            raise ValidationError(f"{self}: cannot index with {key!r}: {e}") from e
    
    def __str__(self) -> str:
        return f"{self.obj}[{self.index}]"
