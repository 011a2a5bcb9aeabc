"""
Limits of single-variable expressions.

Limit.compute tries, in order:

1. L'Hopital's rule when the expression is a 0/0 or inf/inf quotient at
   the point, differentiating numerator and denominator at most depth()
   times
2. direct evaluation, when it gives a finite number
3. one-sided numeric estimates f(p - h) and f(p + h) with h = 1e-4

If L'Hopital's rule cannot resolve an indeterminate form, step 3 is used
and a RuntimeWarning is issued.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from typing import Any, Literal as Choice

from pyalgebra.core.exceptions import (
    NumericalError,
    UnsupportedOperationError,
    ValidationError,
)
from pyalgebra.core.numeric import is_number
from pyalgebra.core.tolerances import LIMIT_STEP
from pyalgebra.expression.base import Expression, lift
from pyalgebra.expression.operations import Divide
from pyalgebra.expression.polynomial import RationalFunction


Direction = Choice['both', 'left', 'right']

_DIRECTIONS = ('both', 'left', 'right')

# Relative agreement required between the two one-sided estimates
_AGREEMENT_TOL = 1e-3


def _is_finite(value: Any) -> bool:
    return is_number(value) and math.isfinite(abs(value))


@dataclass(frozen=True)
class Limit:
    """
    Limit of expression as variable approaches point.
    
    Args:
        expression: Expression in one free variable
        point: Finite real point
        direction: 'both', 'left' (from below) or 'right' (from above)
        variable: Variable name; resolved from the expression if omitted
        
    Examples:
        >>> from pyalgebra.expression import parse
        >>> Limit(parse("sin(x) / x"), 0).compute()
        1.0
    """
    expression: Expression
    point: Any
    direction: Direction = 'both'
    variable: str | None = None
    
    def __post_init__(self):
        object.__setattr__(self, 'expression', lift(self.expression))
        if self.direction not in _DIRECTIONS:
            raise ValueError(
                f"Unknown direction: {self.direction!r}. Valid: {list(_DIRECTIONS)}"
            )
        if not _is_finite(self.point):
            raise ValidationError(f"point: must be a finite number, got {self.point!r}")
    
    def compute(self) -> Any:
        """
        Evaluate the limit.
        
        Returns:
            The limit, possibly +/-inf
            
        Raises:
            NumericalError: The one-sided limits disagree
            ValidationError: The expression has other free variables
        """
        name = self.expression.resolve_variable(self.variable)
        expression = self.expression
        
        if expression.is_indeterminate(self.point, name):
            resolved = self._lhopital(expression, name)
            if resolved is not None:
                return resolved
            warnings.warn(
                f"L'Hopital's rule did not resolve the limit of {expression} at "
                f"{self.point}; using a numeric estimate",
                RuntimeWarning,
                stacklevel=2,
            )
            return self._one_sided(expression, name)
        
        value = self._direct(expression, name)
        if value is not None:
            return value
        return self._one_sided(expression, name)
    
    # === Strategies ===
    
    def _at(self, expression: Expression, name: str, x: Any) -> Any:
        value = expression.evaluate({name: x})
        if not is_number(value):
            raise ValidationError(
                f"limit: {expression} has free variables other than {name!r}"
            )
        return value
    
    def _direct(self, expression: Expression, name: str) -> Any:
        try:
            value = self._at(expression, name, self.point)
        except NumericalError:
            return None
        return value if _is_finite(value) else None
    
    def _lhopital(self, expression: Expression, name: str) -> Any:
        if isinstance(expression, RationalFunction):
            rounds = expression.numerator.degree + 1
        else:
            rounds = max(expression.depth(), 1)
        
        current = expression
        for _ in range(rounds):
            try:
                if isinstance(current, RationalFunction):
                    current = RationalFunction(
                        current.numerator._derivative(name),
                        current.denominator._derivative(name),
                    )
                elif isinstance(current, Divide):
                    current = Divide(
                        current.left._derivative(name),
                        current.right._derivative(name),
                    )
                else:
                    return None
            except (UnsupportedOperationError, NumericalError):
                return None
            if current.is_indeterminate(self.point, name):
                continue
            value = self._direct(current, name)
            return value if value is not None else self._one_sided(current, name)
        return None
    
    def _one_sided(self, expression: Expression, name: str) -> Any:
        h = LIMIT_STEP
        infinite = expression.is_infinity(self.point, name)
        sides = {}
        for side, x in (('left', self.point - h), ('right', self.point + h)):
            if self.direction in (side, 'both'):
                value = self._at(expression, name, x)
                if infinite and not isinstance(value, complex):
                    value = math.copysign(math.inf, value)
                sides[side] = value
        
        if self.direction != 'both':
            return sides[self.direction]
        
        left, right = sides['left'], sides['right']
        if left == right:
            return left
        scale = max(1.0, abs(left), abs(right))
        if math.isfinite(scale) and abs(left - right) <= _AGREEMENT_TOL * scale:
            return (left + right) / 2
        raise NumericalError(
            f"limit of {expression} at {self.point} does not exist: "
            f"left ~ {left}, right ~ {right}"
        )


def limit(
    expression: Expression,
    point: Any,
    direction: Direction = 'both',
    variable: str | None = None,
) -> Any:
    """Shorthand for Limit(...).compute()."""
    return Limit(expression, point, direction, variable).compute()
