"""
Trigonometric identities applied at a single node.

TrigSimplifier.rewrite looks only at the node it is given (children are
expected to be rewritten already) and returns it unchanged when no
identity matches.
"""

from __future__ import annotations

from typing import Any, Callable

from pyalgebra.expression.base import Expression
from pyalgebra.expression.basic import Literal, Negate
from pyalgebra.expression.functions import Function
from pyalgebra.expression.operations import Add, Divide, Multiply, Pow, Subtract


def call_of(node: Expression, name: str) -> Expression | None:
    """Argument of name(u), else None."""
    if isinstance(node, Function) and node.name == name:
        return node.argument
    return None


def square_of(node: Expression, name: str) -> Expression | None:
    """Argument u of name(u)^2, else None."""
    if isinstance(node, Pow) and node.right == Literal(2):
        return call_of(node.left, name)
    return None


def _is_one(node: Expression) -> bool:
    return isinstance(node, Literal) and node.value == 1


def pythagorean(node: Add) -> Expression | None:
    """sin(u)^2 + cos(u)^2 in either order."""
    for first, second in (('sin', 'cos'), ('cos', 'sin')):
        u = square_of(node.left, first)
        if u is not None and square_of(node.right, second) == u:
            return Literal(1)
    return None


class TrigSimplifier:
    """Single-node trigonometric rewrites."""
    
    @staticmethod
    def _subtract(node: Subtract) -> Expression:
        if _is_one(node.left):
            u = square_of(node.right, 'sin')
            if u is not None:
                return Pow(Function('cos', u), Literal(2))
            u = square_of(node.right, 'cos')
            if u is not None:
                return Pow(Function('sin', u), Literal(2))
        u = square_of(node.left, 'sec')
        if u is not None and square_of(node.right, 'tan') == u:
            return Literal(1)
        return node
    
    @staticmethod
    def _divide(node: Divide) -> Expression:
        top, bottom = node.left, node.right
        u = call_of(top, 'sin')
        if u is not None and call_of(bottom, 'cos') == u:
            return Function('tan', u)
        u = call_of(top, 'cos')
        if u is not None and call_of(bottom, 'sin') == u:
            return Function('cot', u)
        if _is_one(top) and isinstance(bottom, Function):
            reciprocal = {'cos': 'sec', 'sin': 'csc', 'tan': 'cot'}.get(bottom.name)
            if reciprocal:
                return Function(reciprocal, bottom.argument)
        return node
    
    @staticmethod
    def _function(node: Function) -> Expression:
        if not isinstance(node.argument, Negate):
            return node
        inner = node.argument.operand
        if node.name == 'cos':
            return Function('cos', inner)
        if node.name in ('sin', 'tan'):
            return Negate(Function(node.name, inner))
        return node
    
    @staticmethod
    def _multiply(node: Multiply) -> Expression:
        # 2 sin(u) cos(u) -> sin(2u), grouped either way
        if node.left == Literal(2) and isinstance(node.right, Multiply):
            pair = (node.right.left, node.right.right)
        elif isinstance(node.left, Multiply) and node.left.left == Literal(2):
            pair = (node.left.right, node.right)
        else:
            return node
        for a, b in (pair, pair[::-1]):
            u = call_of(a, 'sin')
            if u is not None and call_of(b, 'cos') == u:
                return Function('sin', Multiply(Literal(2), u))
        return node
    
    _RULES: dict[type, Callable[[Any], Expression]] = {
        Subtract: _subtract.__func__,
        Divide: _divide.__func__,
        Function: _function.__func__,
        Multiply: _multiply.__func__,
    }
    
    @classmethod
    def rewrite(cls, node: Expression) -> Expression:
        rule = cls._RULES.get(type(node))
        return node if rule is None else rule(node)
