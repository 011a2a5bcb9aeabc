"""
Expression tree base class.

Nodes are immutable (frozen dataclasses) and come from a closed set of
variants: every concrete subclass registers itself when it is defined, and
each rewrite pass in the simplifier checks at import time that it has a
rule for every registered variant.

Calculus is with respect to a single variable. When none is given it is
resolved from the tree: 'x' if present (or if there are no variables at
all), otherwise the only free variable; anything else is ambiguous.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterator, Mapping

from pyalgebra.core.exceptions import ValidationError
from pyalgebra.core.numeric import is_number, normalize_scalar


Bindings = Mapping[str, Any]

_VARIANTS: list[type[Expression]] = []


def variants() -> tuple[type[Expression], ...]:
    """Every concrete node type defined so far."""
    return tuple(_VARIANTS)


def lift(value: Any) -> Expression:
    """Wrap plain numbers (and bools/strings) as Literal nodes."""
    if isinstance(value, Expression):
        return value
    from pyalgebra.expression.basic import Literal
    return Literal(value)


def _is_operand(value: Any) -> bool:
    return isinstance(value, Expression) or is_number(value)


class Expression(ABC):
    """
    Immutable node of a symbolic expression tree.
    
    Arithmetic operators build new trees, so 2 * x ** 2 + 1 works once x
    is a Variable. Equality is structural: Add(x, 1) != Add(1, x).
    """
    
    def __init_subclass__(cls, abstract: bool = False, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        if not abstract:
            _VARIANTS.append(cls)
    
    # ═══════════════════════════════════════════════════════════════════
    # Node protocol
    # ═══════════════════════════════════════════════════════════════════
    
    def children(self) -> tuple[Expression, ...]:
        return ()
    
    def with_children(self, *children: Expression) -> Expression:
        """Same node type rebuilt around new children."""
        return self
    
    @abstractmethod
    def _evaluate(self, env: dict[str, Any]) -> Any:
        """Value under env, or a partially evaluated Expression."""
    
    @abstractmethod
    def _derivative(self, variable: str) -> Expression:
        pass
    
    @abstractmethod
    def _antiderivative(self, variable: str) -> Expression:
        pass
    
    @abstractmethod
    def __str__(self) -> str:
        pass
    
    # ═══════════════════════════════════════════════════════════════════
    # Operators
    # ═══════════════════════════════════════════════════════════════════
    
    def __add__(self, other: Any) -> Expression:
        from pyalgebra.expression.operations import Add
        return Add(self, lift(other)) if _is_operand(other) else NotImplemented
    
    def __radd__(self, other: Any) -> Expression:
        from pyalgebra.expression.operations import Add
        return Add(lift(other), self) if _is_operand(other) else NotImplemented
    
    def __sub__(self, other: Any) -> Expression:
        from pyalgebra.expression.operations import Subtract
        return Subtract(self, lift(other)) if _is_operand(other) else NotImplemented
    
    def __rsub__(self, other: Any) -> Expression:
        from pyalgebra.expression.operations import Subtract
        return Subtract(lift(other), self) if _is_operand(other) else NotImplemented
    
    def __mul__(self, other: Any) -> Expression:
        from pyalgebra.expression.operations import Multiply
        return Multiply(self, lift(other)) if _is_operand(other) else NotImplemented
    
    def __rmul__(self, other: Any) -> Expression:
        from pyalgebra.expression.operations import Multiply
        return Multiply(lift(other), self) if _is_operand(other) else NotImplemented
    
    def __truediv__(self, other: Any) -> Expression:
        from pyalgebra.expression.operations import Divide
        return Divide(self, lift(other)) if _is_operand(other) else NotImplemented
    
    def __rtruediv__(self, other: Any) -> Expression:
        from pyalgebra.expression.operations import Divide
        return Divide(lift(other), self) if _is_operand(other) else NotImplemented
    
    def __mod__(self, other: Any) -> Expression:
        from pyalgebra.expression.operations import Modulo
        return Modulo(self, lift(other)) if _is_operand(other) else NotImplemented
    
    def __pow__(self, other: Any) -> Expression:
        from pyalgebra.expression.operations import Pow
        return Pow(self, lift(other)) if _is_operand(other) else NotImplemented
    
    def __rpow__(self, other: Any) -> Expression:
        from pyalgebra.expression.operations import Pow
        return Pow(lift(other), self) if _is_operand(other) else NotImplemented
    
    def __neg__(self) -> Expression:
        from pyalgebra.expression.basic import Negate
        return Negate(self)
    
    def __pos__(self) -> Expression:
        return self
    
    # ═══════════════════════════════════════════════════════════════════
    # Evaluation and calculus
    # ═══════════════════════════════════════════════════════════════════
    
    def evaluate(self, bindings: Bindings | Any = None) -> Any:
        """
        Evaluate under variable bindings.
        
        Args:
            bindings: Mapping of variable name to value, or a single number
                that binds the only free variable
                
        Returns:
            A number when every variable is bound, otherwise the partially
            evaluated Expression (with constant subtrees folded)
            
        Raises:
            NumericalError: Division by zero or a function outside its domain
            ValidationError: A bare number given for several free variables
        """
        value = self._evaluate(self._bindings(bindings))
        if isinstance(value, Expression):
            from pyalgebra.expression.simplifier import BASIC
            return BASIC(value)
        return normalize_scalar(value) if is_number(value) else value
    
    def _bindings(self, bindings: Bindings | Any) -> dict[str, Any]:
        if bindings is None:
            return {}
        if isinstance(bindings, Mapping):
            return dict(bindings)
        names = sorted(v.name for v in self.get_variables())
        if not names:
            return {}
        if len(names) > 1:
            raise ValidationError(
                f"evaluate: a single value cannot bind the variables {names}; "
                f"pass a mapping instead"
            )
        return {names[0]: bindings}
    
    def resolve_variable(self, variable: Any = None) -> str:
        """Name of the variable calculus operates on."""
        from pyalgebra.expression.basic import Variable
        if isinstance(variable, Variable):
            return variable.name
        if isinstance(variable, str):
            return variable
        if variable is not None:
            raise ValidationError(f"variable: expected a name or Variable, got {variable!r}")
        names = {v.name for v in self.get_variables()}
        if not names or 'x' in names:
            return 'x'
        if len(names) == 1:
            return names.pop()
        raise ValidationError(
            f"ambiguous variable: expression contains {sorted(names)} and no 'x'; "
            f"name the variable explicitly"
        )
    
    def differentiate(self, variable: Any = None) -> Expression:
        """
        Symbolic derivative.
        
        Raises:
            UnsupportedOperationError: No derivative rule for a node
        """
        return self._derivative(self.resolve_variable(variable))
    
    def integrate(self, variable: Any = None) -> Expression:
        """
        Symbolic antiderivative (constant of integration omitted).
        
        Raises:
            UnsupportedOperationError: No closed-form rule for a node
        """
        return self._antiderivative(self.resolve_variable(variable))
    
    def depends_on(self, variable: str) -> bool:
        return any(v.name == variable for v in self.get_variables())
    
    # ═══════════════════════════════════════════════════════════════════
    # Rewriting
    # ═══════════════════════════════════════════════════════════════════
    
    def simplify(self) -> Expression:
        """
        One run of the four simplifier passes.
        
        Not iterated to a fixed point: calling simplify() again on the
        result may simplify further.
        """
        from pyalgebra.expression.simplifier import Simplifier
        return Simplifier.simplify(self)
    
    def expand(self) -> Expression:
        """Distribute products over sums and expand integer powers of sums."""
        from pyalgebra.expression.simplifier import BASIC, EXPAND
        return BASIC(EXPAND(self))
    
    def substitute(self, old: Any, new: Any) -> Expression:
        """Replace every subtree structurally equal to old."""
        old, new = lift(old), lift(new)
        if self == old:
            return new
        kids = self.children()
        if not kids:
            return self
        return self.with_children(*(c.substitute(old, new) for c in kids))
    
    # ═══════════════════════════════════════════════════════════════════
    # Structure
    # ═══════════════════════════════════════════════════════════════════
    
    def walk(self) -> Iterator[Expression]:
        """Pre-order traversal."""
        yield self
        for child in self.children():
            yield from child.walk()
    
    def get_variables(self) -> set[Any]:
        """Base variables, found by walking the tree (x^2*y gives {x, y})."""
        found: set[Any] = set()
        for child in self.children():
            found |= child.get_variables()
        return found
    
    def get_variable_terms(self) -> set[Expression]:
        """
        Distinct variable terms, keeping composites whole.
        
        A term is a Variable, a power of a term to a literal exponent, or a
        product of terms: 3*x^2 + x*y + z gives {x^2, x*y, z}.
        """
        found: set[Expression] = set()
        for child in self.children():
            found |= child.get_variable_terms()
        return found
    
    def depth(self) -> int:
        kids = self.children()
        return 1 + (max(c.depth() for c in kids) if kids else 0)
    
    def size(self) -> int:
        return 1 + sum(c.size() for c in self.children())
    
    def is_indeterminate(self, at: Any, variable: Any = None) -> bool:
        """True for 0/0 or inf/inf quotients at the point; other nodes never are."""
        return False
    
    def is_infinity(self, at: Any, variable: Any = None) -> bool:
        from pyalgebra.core.exceptions import NumericalError
        name = self.resolve_variable(variable)
        try:
            value = self.evaluate({name: at})
        except NumericalError:
            return False
        return is_number(value) and abs(value) == float('inf')
    
    # ═══════════════════════════════════════════════════════════════════
    # Parsing
    # ═══════════════════════════════════════════════════════════════════
    
    @staticmethod
    def parse(text: str) -> Expression:
        """
        Parse a formula such as "2*x^2 + 3x - sin(y)".
        
        Raises:
            ParseError: Malformed input; .fragment holds the offending text
        """
        from pyalgebra.expression.parser import parse
        return parse(text)
    
    @staticmethod
    def try_parse(text: str) -> Expression | None:
        from pyalgebra.expression.parser import try_parse
        return try_parse(text)


def linear_coefficient(expression: Expression, variable: str) -> Any:
    """
    a when expression is a*variable + b with constant a != 0, else None.
    """
    from pyalgebra.core.exceptions import UnsupportedOperationError
    from pyalgebra.expression.basic import Literal
    from pyalgebra.expression.simplifier import BASIC
    
    if not expression.depends_on(variable):
        return None
    try:
        slope = BASIC(expression._derivative(variable))
    except UnsupportedOperationError:
        return None
    if isinstance(slope, Literal) and is_number(slope.value) and slope.value != 0:
        return slope.value
    return None
