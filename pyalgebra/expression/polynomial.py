"""
Polynomial nodes.

Polynomial holds dense coefficients, highest degree first, in one named
variable. MultiVariablePolynomial is a sum of Terms, each a coefficient
times a product of variables raised to non-negative integer powers.
RationalFunction is a quotient of two polynomials in the same variable.

Integer and Fraction coefficients stay exact through division, so
Polynomial((1, 0)).integrate() has coefficient Fraction(1, 2).
"""

from __future__ import annotations

import cmath
import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Iterable, Mapping

import numpy as np

from pyalgebra.core.exceptions import (
    NumericalError,
    UnsupportedOperationError,
    ValidationError,
)
from pyalgebra.core.numeric import is_number, normalize_scalar
from pyalgebra.expression.base import Expression, lift
from pyalgebra.expression.basic import Literal, Variable
from pyalgebra.expression.operations import Add, Divide, Multiply, Pow, Subtract


_GCD_TOL = 1e-10


def _is_exact(value: Any) -> bool:
    return isinstance(value, (int, Fraction)) and not isinstance(value, bool)


def _div(a: Any, b: Any) -> Any:
    if b == 0:
        raise NumericalError("division by zero")
    if _is_exact(a) and _is_exact(b):
        return normalize_scalar(Fraction(a) / Fraction(b))
    return normalize_scalar(a / b)


def _exact_sqrt(value: Any) -> Fraction | None:
    """Exact square root of a non-negative rational, if it is rational."""
    if not _is_exact(value) or value < 0:
        return None
    q = Fraction(value)
    num, den = math.isqrt(q.numerator), math.isqrt(q.denominator)
    if num * num == q.numerator and den * den == q.denominator:
        return Fraction(num, den)
    return None


def _format_coefficient(value: Any) -> str:
    if isinstance(value, Fraction):
        return f"({value})"
    return str(value)


def _is_negative(value: Any) -> bool:
    return not isinstance(value, complex) and value < 0


def _join_signed(parts: list[tuple[Any, str]]) -> str:
    """Join (coefficient, monomial) pairs into 'a + b - c' text."""
    if not parts:
        return '0'
    out = []
    for i, (c, bare) in enumerate(parts):
        negative = _is_negative(c)
        magnitude = -c if negative else c
        if bare and magnitude == 1:
            text = bare
        elif bare:
            text = f"{_format_coefficient(magnitude)}*{bare}"
        else:
            text = _format_coefficient(magnitude)
        if i == 0:
            out.append(f"-{text}" if negative else text)
        else:
            out.append(f" - {text}" if negative else f" + {text}")
    return ''.join(out)


def _check_coefficients(values: Iterable[Any], name: str) -> list[Any]:
    out = []
    for v in values:
        if isinstance(v, Literal) and v.is_numeric:
            v = v.value
        if not is_number(v):
            raise ValidationError(f"{name}: coefficient {v!r} is not a number")
        out.append(normalize_scalar(v))
    return out


@dataclass(frozen=True)
class Polynomial(Expression):
    """
    Dense single-variable polynomial.
    
    Args:
        coefficients: Highest degree first; (2, 3, 1) is 2x^2 + 3x + 1.
            Leading zeros are dropped.
        variable: Variable name
    """
    coefficients: tuple[Any, ...]
    variable: str = 'x'
    
    def __post_init__(self):
        coeffs = _check_coefficients(self.coefficients, 'Polynomial')
        while len(coeffs) > 1 and coeffs[0] == 0:
            coeffs.pop(0)
        object.__setattr__(self, 'coefficients', tuple(coeffs) or (0,))
        Variable(self.variable)
    
    @classmethod
    def from_roots(cls, roots: Iterable[Any], variable: str = 'x') -> Polynomial:
        result = cls((1,), variable)
        for r in roots:
            result = result * cls((1, -r), variable)
        return result
    
    # ═══════════════════════════════════════════════════════════════════
    # Structure
    # ═══════════════════════════════════════════════════════════════════
    
    @property
    def degree(self) -> int:
        return len(self.coefficients) - 1
    
    @property
    def is_zero(self) -> bool:
        return self.coefficients == (0,)
    
    @property
    def leading_coefficient(self) -> Any:
        return self.coefficients[0]
    
    def coefficient(self, power: int) -> Any:
        """Coefficient of variable^power (0 beyond the degree)."""
        if power < 0 or power > self.degree:
            return 0
        return self.coefficients[self.degree - power]
    
    def get_variables(self):
        return {Variable(self.variable)} if self.degree > 0 else set()
    
    def get_variable_terms(self):
        return self.get_variables()
    
    def to_expression(self) -> Expression:
        """The same polynomial as an Add/Multiply/Pow tree."""
        x = Variable(self.variable)
        result: Expression | None = None
        for power in range(self.degree, -1, -1):
            c = self.coefficient(power)
            if c == 0:
                continue
            if power == 0:
                term: Expression = Literal(c)
            else:
                monomial = x if power == 1 else Pow(x, Literal(power))
                term = monomial if c == 1 else Multiply(Literal(c), monomial)
            result = term if result is None else Add(result, term)
        return Literal(0) if result is None else result
    
    def substitute(self, old, new):
        old = lift(old)
        if old == Variable(self.variable) and self.degree > 0:
            return self.to_expression().substitute(old, new)
        return super().substitute(old, new)
    
    # ═══════════════════════════════════════════════════════════════════
    # Evaluation and calculus
    # ═══════════════════════════════════════════════════════════════════
    
    def _evaluate(self, env):
        if self.variable not in env:
            return self if self.degree > 0 else self.coefficients[0]
        x = env[self.variable]
        result: Any = 0
        for c in self.coefficients:
            result = result * x + c
        return result
    
    def _derivative(self, variable):
        if variable != self.variable or self.degree == 0:
            return Polynomial((0,), self.variable)
        n = self.degree
        return Polynomial(
            tuple(c * (n - i) for i, c in enumerate(self.coefficients[:-1])),
            self.variable,
        )
    
    def _antiderivative(self, variable):
        if variable != self.variable:
            return Multiply(self, Variable(variable))
        n = self.degree
        coeffs = [_div(c, n - i + 1) for i, c in enumerate(self.coefficients)]
        return Polynomial((*coeffs, 0), self.variable)
    
    # ═══════════════════════════════════════════════════════════════════
    # Arithmetic
    # ═══════════════════════════════════════════════════════════════════
    
    def _coerce(self, other: Any) -> Polynomial | None:
        if isinstance(other, Polynomial) and (
            other.variable == self.variable or other.degree == 0 or self.degree == 0
        ):
            variable = self.variable if self.degree > 0 else other.variable
            return Polynomial(other.coefficients, variable)
        if is_number(other):
            return Polynomial((other,), self.variable)
        return None
    
    def _combine(self, other: Polynomial, sign: int) -> Polynomial:
        variable = self.variable if self.degree > 0 else other.variable
        size = max(len(self.coefficients), len(other.coefficients))
        a = (0,) * (size - len(self.coefficients)) + self.coefficients
        b = (0,) * (size - len(other.coefficients)) + other.coefficients
        return Polynomial(tuple(x + sign * y for x, y in zip(a, b)), variable)
    
    def __add__(self, other):
        o = self._coerce(other)
        return super().__add__(other) if o is None else self._combine(o, 1)
    
    def __radd__(self, other):
        o = self._coerce(other)
        return super().__radd__(other) if o is None else o._combine(self, 1)
    
    def __sub__(self, other):
        o = self._coerce(other)
        return super().__sub__(other) if o is None else self._combine(o, -1)
    
    def __rsub__(self, other):
        o = self._coerce(other)
        return super().__rsub__(other) if o is None else o._combine(self, -1)
    
    def __mul__(self, other):
        o = self._coerce(other)
        if o is None:
            return super().__mul__(other)
        out = [0] * (len(self.coefficients) + len(o.coefficients) - 1)
        for i, a in enumerate(self.coefficients):
            for j, b in enumerate(o.coefficients):
                out[i + j] += a * b
        return Polynomial(tuple(out), self.variable if self.degree > 0 else o.variable)
    
    def __rmul__(self, other):
        return self.__mul__(other)
    
    def __neg__(self):
        return Polynomial(tuple(-c for c in self.coefficients), self.variable)
    
    def __truediv__(self, other):
        if is_number(other):
            return Polynomial(tuple(_div(c, other) for c in self.coefficients), self.variable)
        if isinstance(other, Polynomial):
            return RationalFunction(self, other)
        return super().__truediv__(other)
    
    def __divmod__(self, other: Any) -> tuple[Polynomial, Polynomial]:
        """
        Polynomial long division: (quotient, remainder).
        
        Raises:
            NumericalError: If the divisor is the zero polynomial
        """
        divisor = self._coerce(other)
        if divisor is None:
            return NotImplemented
        if divisor.is_zero:
            raise NumericalError("polynomial division by zero")
        rem = list(self.coefficients)
        d = divisor.coefficients
        shift = len(rem) - len(d)
        if shift < 0:
            return Polynomial((0,), self.variable), self
        quotient = []
        for i in range(shift + 1):
            factor = _div(rem[i], d[0])
            quotient.append(factor)
            for j, c in enumerate(d):
                rem[i + j] = normalize_scalar(rem[i + j] - factor * c)
        return (
            Polynomial(tuple(quotient), self.variable),
            Polynomial(tuple(rem[shift + 1:]) or (0,), self.variable),
        )
    
    def __floordiv__(self, other):
        return divmod(self, other)[0]
    
    # ═══════════════════════════════════════════════════════════════════
    # Algebra
    # ═══════════════════════════════════════════════════════════════════
    
    def roots(self) -> list[Any]:
        """
        All complex roots, with multiplicity.
        
        Degrees 1 and 2 use closed forms (exact for rational coefficients
        when the discriminant is a perfect square); higher degrees use the
        companion-matrix eigenvalues from numpy.roots. A quadratic returns
        (-b + sqrt(d)) / 2a first.
        
        Raises:
            ValidationError: For the zero polynomial
        """
        if self.is_zero:
            raise ValidationError("roots: the zero polynomial vanishes everywhere")
        if self.degree == 0:
            return []
        if self.degree == 1:
            a, b = self.coefficients
            return [_div(-b, a)]
        if self.degree == 2:
            a, b, c = self.coefficients
            disc = b * b - 4 * a * c
            root = _exact_sqrt(disc)
            if root is None:
                root = cmath.sqrt(disc) if isinstance(disc, complex) or disc < 0 else math.sqrt(disc)
            return [_div(-b + root, 2 * a), _div(-b - root, 2 * a)]
        
        dtype = complex if any(isinstance(c, complex) for c in self.coefficients) else float
        values = np.roots(np.array(self.coefficients, dtype=dtype))
        return [normalize_scalar(v) for v in values]
    
    def factorize(self) -> list[Polynomial]:
        """
        Linear factors (x - r) for each root; the leading coefficient is
        folded into the first factor.
        """
        if self.degree < 1:
            return [self]
        factors = [Polynomial((1, normalize_scalar(-r)), self.variable) for r in self.roots()]
        factors[0] = factors[0] * self.leading_coefficient
        return factors
    
    def _cleaned(self) -> Polynomial:
        if all(_is_exact(c) for c in self.coefficients):
            return self
        scale = max(abs(c) for c in self.coefficients)
        return Polynomial(
            tuple(0 if abs(c) <= _GCD_TOL * max(scale, 1.0) else c for c in self.coefficients),
            self.variable,
        )
    
    def monic(self) -> Polynomial:
        if self.is_zero:
            return self
        return self / self.leading_coefficient
    
    def gcd(self, other: Polynomial) -> Polynomial:
        """Monic greatest common divisor (Euclid)."""
        a, b = self, self._coerce(other)
        if b is None:
            raise ValidationError(f"gcd: expected a Polynomial in {self.variable!r}")
        while not b.is_zero:
            a, b = b, divmod(a, b)[1]._cleaned()
        return a.monic()
    
    def __str__(self) -> str:
        parts = []
        for power in range(self.degree, -1, -1):
            c = self.coefficient(power)
            if c == 0:
                continue
            if power == 0:
                bare = ''
            elif power == 1:
                bare = self.variable
            else:
                bare = f"{self.variable}^{power}"
            parts.append((c, bare))
        return _join_signed(parts)


@dataclass(frozen=True)
class RationalFunction(Expression):
    """numerator / denominator, both polynomials in the same variable."""
    numerator: Polynomial
    denominator: Polynomial
    
    def __post_init__(self):
        num, den = self.numerator, self.denominator
        if is_number(num):
            num = Polynomial((num,), getattr(den, 'variable', 'x'))
        if is_number(den):
            den = Polynomial((den,), num.variable)
        if not (isinstance(num, Polynomial) and isinstance(den, Polynomial)):
            raise ValidationError("RationalFunction: numerator and denominator must be Polynomials")
        if num.degree > 0 and den.degree > 0 and num.variable != den.variable:
            raise ValidationError(
                f"RationalFunction: variables differ ({num.variable!r} vs {den.variable!r})"
            )
        if den.is_zero:
            raise NumericalError("RationalFunction: denominator is the zero polynomial")
        variable = num.variable if num.degree > 0 else den.variable
        object.__setattr__(self, 'numerator', Polynomial(num.coefficients, variable))
        object.__setattr__(self, 'denominator', Polynomial(den.coefficients, variable))
    
    @property
    def variable(self) -> str:
        return self.numerator.variable
    
    def get_variables(self):
        return self.numerator.get_variables() | self.denominator.get_variables()
    
    def get_variable_terms(self):
        return self.get_variables()
    
    def to_expression(self) -> Expression:
        return Divide(self.numerator.to_expression(), self.denominator.to_expression())
    
    def substitute(self, old, new):
        old = lift(old)
        if old == Variable(self.variable):
            return self.to_expression().substitute(old, new)
        return super().substitute(old, new)
    
    def _evaluate(self, env):
        if self.variable not in env and self.get_variables():
            return self
        top = self.numerator._evaluate(env)
        bottom = self.denominator._evaluate(env)
        if isinstance(top, Expression) or isinstance(bottom, Expression):
            return Divide(lift(top), lift(bottom))
        if bottom == 0:
            raise NumericalError(f"division by zero in {self}")
        return _div(top, bottom)
    
    def _derivative(self, variable):
        if variable != self.variable:
            return Literal(0)
        n, d = self.numerator, self.denominator
        return RationalFunction(
            n._derivative(variable) * d - n * d._derivative(variable),
            d * d,
        )
    
    def _antiderivative(self, variable):
        if variable != self.variable:
            return Multiply(self, Variable(variable))
        quotient, remainder = divmod(self.numerator, self.denominator)
        integral = quotient._antiderivative(variable)
        if remainder.is_zero:
            return integral
        if self.denominator.degree == 1:
            from pyalgebra.expression.functions import Function
            # r / (a x + b) -> (r / a) ln|a x + b|
            scale = _div(remainder.coefficient(0), self.denominator.leading_coefficient)
            log = Function('ln', Function('abs', self.denominator.to_expression()))
            return Add(integral, Multiply(Literal(scale), log))
        raise UnsupportedOperationError(
            f"cannot integrate {self}: denominator degree "
            f"{self.denominator.degree} > 1",
            operation='integrate', operand=str(self),
        )
    
    def divide(self) -> tuple[Polynomial, RationalFunction]:
        """Split into (polynomial quotient, proper remainder fraction)."""
        quotient, remainder = divmod(self.numerator, self.denominator)
        return quotient, RationalFunction(remainder, self.denominator)
    
    def reduce(self) -> RationalFunction:
        """Cancel the common polynomial factor of numerator and denominator."""
        common = self.numerator.gcd(self.denominator)
        if common.degree == 0:
            return self
        return RationalFunction(self.numerator // common, self.denominator // common)
    
    def _at(self, at: Any) -> tuple[Any, Any]:
        return self.numerator.evaluate(at), self.denominator.evaluate(at)
    
    def is_indeterminate(self, at, variable=None):
        top, bottom = self._at(at)
        return top == 0 and bottom == 0
    
    def is_infinity(self, at, variable=None):
        top, bottom = self._at(at)
        return bottom == 0 and top != 0
    
    def __str__(self) -> str:
        return f"(({self.numerator}) / ({self.denominator}))"


@dataclass(frozen=True)
class Term:
    """
    coefficient * x1^p1 * x2^p2 * ...
    
    Powers accept a mapping or (name, power) pairs; they are stored as a
    sorted tuple, with zero powers dropped and repeats summed.
    """
    coefficient: Any
    powers: tuple[tuple[str, int], ...] = ()
    
    def __post_init__(self):
        if not is_number(self.coefficient):
            raise ValidationError(f"Term: coefficient {self.coefficient!r} is not a number")
        items = self.powers.items() if isinstance(self.powers, Mapping) else self.powers
        merged: dict[str, int] = {}
        for name, power in items:
            Variable(name)
            if not isinstance(power, (int, np.integer)) or isinstance(power, bool) or power < 0:
                raise ValidationError(
                    f"Term: power of {name!r} must be a non-negative integer, got {power!r}"
                )
            if power:
                merged[name] = merged.get(name, 0) + int(power)
        object.__setattr__(self, 'coefficient', normalize_scalar(self.coefficient))
        object.__setattr__(self, 'powers', tuple(sorted(merged.items())))
    
    @property
    def degree(self) -> int:
        return sum(p for _, p in self.powers)
    
    def power_of(self, name: str) -> int:
        return dict(self.powers).get(name, 0)
    
    def monomial(self) -> str:
        return '*'.join(name if p == 1 else f"{name}^{p}" for name, p in self.powers)
    
    def __str__(self) -> str:
        return _join_signed([(self.coefficient, self.monomial())])


@dataclass(frozen=True)
class MultiVariablePolynomial(Expression):
    """Sum of Terms in any number of variables."""
    terms: tuple[Term, ...] = ()
    
    def __post_init__(self):
        terms = []
        for t in self.terms:
            if not isinstance(t, Term):
                coefficient, powers = t
                t = Term(coefficient, powers)
            terms.append(t)
        object.__setattr__(self, 'terms', tuple(terms))
    
    @property
    def degree(self) -> int:
        return max((t.degree for t in self.terms), default=0)
    
    def combined(self) -> MultiVariablePolynomial:
        """Like terms merged and zero terms removed, in first-seen order."""
        sums: dict[tuple[tuple[str, int], ...], Any] = {}
        for t in self.terms:
            sums[t.powers] = sums.get(t.powers, 0) + t.coefficient
        return MultiVariablePolynomial(tuple(Term(c, p) for p, c in sums.items() if c != 0))
    
    def get_variables(self):
        return {Variable(name) for t in self.terms for name, _ in t.powers}
    
    def get_variable_terms(self):
        return self.get_variables()
    
    def to_expression(self) -> Expression:
        result: Expression | None = None
        for t in self.terms:
            monomial: Expression | None = None
            for name, p in t.powers:
                factor = Variable(name) if p == 1 else Pow(Variable(name), Literal(p))
                monomial = factor if monomial is None else Multiply(monomial, factor)
            if monomial is None:
                term: Expression = Literal(t.coefficient)
            elif t.coefficient == 1:
                term = monomial
            else:
                term = Multiply(Literal(t.coefficient), monomial)
            result = term if result is None else Add(result, term)
        return Literal(0) if result is None else result
    
    def substitute(self, old, new):
        old = lift(old)
        if old in self.get_variables():
            return self.to_expression().substitute(old, new)
        return super().substitute(old, new)
    
    def _evaluate(self, env):
        names = {v.name for v in self.get_variables()}
        if any(n in env and not is_number(env[n]) for n in names):
            return self.to_expression()._evaluate(env)
        terms = []
        for t in self.terms:
            c = t.coefficient
            remaining = {}
            for name, p in t.powers:
                if name in env:
                    c = c * env[name] ** p
                else:
                    remaining[name] = p
            terms.append(Term(c, remaining))
        if all(not t.powers for t in terms):
            return sum((t.coefficient for t in terms), 0)
        return MultiVariablePolynomial(tuple(terms)).combined()
    
    def _derivative(self, variable):
        terms = []
        for t in self.terms:
            p = t.power_of(variable)
            if p:
                powers = dict(t.powers)
                powers[variable] = p - 1
                terms.append(Term(t.coefficient * p, powers))
        return MultiVariablePolynomial(tuple(terms)).combined()
    
    def _antiderivative(self, variable):
        terms = []
        for t in self.terms:
            p = t.power_of(variable)
            powers = dict(t.powers)
            powers[variable] = p + 1
            terms.append(Term(_div(t.coefficient, p + 1), powers))
        return MultiVariablePolynomial(tuple(terms))
    
    # ═══════════════════════════════════════════════════════════════════
    # Arithmetic
    # ═══════════════════════════════════════════════════════════════════
    
    @staticmethod
    def _coerce(other: Any) -> MultiVariablePolynomial | None:
        if isinstance(other, MultiVariablePolynomial):
            return other
        if is_number(other):
            return MultiVariablePolynomial((Term(other),))
        return None
    
    def __add__(self, other):
        o = self._coerce(other)
        if o is None:
            return super().__add__(other)
        return MultiVariablePolynomial(self.terms + o.terms).combined()
    
    def __radd__(self, other):
        return self.__add__(other)
    
    def __sub__(self, other):
        o = self._coerce(other)
        if o is None:
            return super().__sub__(other)
        return self + (-o)
    
    def __neg__(self):
        return MultiVariablePolynomial(tuple(Term(-t.coefficient, t.powers) for t in self.terms))
    
    def __mul__(self, other):
        o = self._coerce(other)
        if o is None:
            return super().__mul__(other)
        terms = []
        for a in self.terms:
            for b in o.terms:
                terms.append(Term(a.coefficient * b.coefficient, a.powers + b.powers))
        return MultiVariablePolynomial(tuple(terms)).combined()
    
    def __rmul__(self, other):
        return self.__mul__(other)
    
    def __str__(self) -> str:
        return _join_signed([(t.coefficient, t.monomial()) for t in self.terms])
