"""
Symbolic expressions.

Public API:
    parse(text) / try_parse(text) -> Expression
    Expression: Immutable tree with evaluate, differentiate, integrate,
        simplify, expand, substitute
    Literal, Variable, Add, Subtract, Multiply, Divide, Pow, Modulo, Negate,
        Function, Comparison, Conditional, Member, Call, Index: Node variants
    Polynomial, MultiVariablePolynomial, Term, RationalFunction: Polynomial nodes
    Simplifier: The four simplification passes, run once
    Limit / limit: Limits with L'Hopital's rule and numeric fallback
"""

from pyalgebra.expression.base import Expression, lift, variants
from pyalgebra.expression.basic import (
    Comparison,
    Conditional,
    Literal,
    Negate,
    Variable,
)
from pyalgebra.expression.operations import (
    Add,
    BinaryOperation,
    Divide,
    Modulo,
    Multiply,
    Pow,
    Subtract,
)
from pyalgebra.expression.functions import (
    FUNCTIONS,
    Function,
    absolute,
    acos,
    asin,
    atan,
    cos,
    cot,
    csc,
    exp,
    ln,
    log,
    sec,
    sin,
    sqrt,
    tan,
)
from pyalgebra.expression.calls import Call, Index, Member
from pyalgebra.expression.polynomial import (
    MultiVariablePolynomial,
    Polynomial,
    RationalFunction,
    Term,
)
from pyalgebra.expression.simplifier import (
    BASIC,
    EXPAND,
    FRACTIONS,
    RATIONAL,
    TRIGONOMETRY,
    RewritePass,
    Simplifier,
)
from pyalgebra.expression.trig import TrigSimplifier
from pyalgebra.expression.parser import parse, tokenize, try_parse
from pyalgebra.expression.limit import Limit, limit

__all__ = [
    "Expression",
    "lift",
    "variants",
    "Literal",
    "Variable",
    "Negate",
    "Comparison",
    "Conditional",
    "BinaryOperation",
    "Add",
    "Subtract",
    "Multiply",
    "Divide",
    "Pow",
    "Modulo",
    "Function",
    "FUNCTIONS",
    "sin",
    "cos",
    "tan",
    "sec",
    "csc",
    "cot",
    "asin",
    "acos",
    "atan",
    "exp",
    "ln",
    "log",
    "sqrt",
    "absolute",
    "Member",
    "Call",
    "Index",
    "Polynomial",
    "MultiVariablePolynomial",
    "Term",
    "RationalFunction",
    "RewritePass",
    "Simplifier",
    "TrigSimplifier",
    "BASIC",
    "FRACTIONS",
    "TRIGONOMETRY",
    "RATIONAL",
    "EXPAND",
    "parse",
    "try_parse",
    "tokenize",
    "Limit",
    "limit",
]
