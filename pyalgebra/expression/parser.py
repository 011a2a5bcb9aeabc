"""
Recursive-descent parser for formulas.

Grammar, loosest binding first:

    expression     := comparison ('?' expression ':' expression)?
    comparison     := additive (('<' | '>' | '<=' | '>=' | '==' | '!=') additive)?
    additive       := multiplicative (('+' | '-') multiplicative)*
    multiplicative := unary (('*' | '/' | '%') unary | unary)*
    unary          := ('-' | '+') unary | power
    power          := postfix ('^' unary)?
    postfix        := primary ('.' NAME | '[' expression ']' | '(' arguments ')')*
    primary        := NUMBER | STRING | NAME | '(' expression ')'

'**' is accepted for '^'. A bare juxtaposition such as "3x" or "2(x + 1)"
multiplies only directly after a number. A known function name applied
to one argument builds a Function; any other call builds a Call.

Every call to parse() builds a fresh parser, so parsing is reentrant.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pyalgebra.core.exceptions import ParseError
from pyalgebra.expression.base import Expression
from pyalgebra.expression.basic import COMPARISONS, Comparison, Conditional, Literal, Negate, Variable
from pyalgebra.expression.calls import Call, Index, Member
from pyalgebra.expression.functions import FUNCTIONS, Function
from pyalgebra.expression.operations import Add, Divide, Modulo, Multiply, Pow, Subtract


_TOKEN = re.compile(r"""
    (?P<space>\s+)
  | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?j?)
  | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
  | (?P<name>[A-Za-z_$][A-Za-z0-9_$]*)
  | (?P<op>\*\*|<=|>=|==|!=|[-+*/%^()<>?:,.\[\]])
""", re.VERBOSE)

_MULTIPLICATIVE = {'*': Multiply, '/': Divide, '%': Modulo}
_ADDITIVE = {'+': Add, '-': Subtract}
_KEYWORDS = {'true': True, 'false': False}
_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r'}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: int


def tokenize(source: str) -> list[Token]:
    """
    Split source into tokens.
    
    Raises:
        ParseError: On a character that starts no token
    """
    tokens = []
    position = 0
    while position < len(source):
        match = _TOKEN.match(source, position)
        if match is None:
            raise ParseError(
                f"unexpected character {source[position]!r} at position {position}",
                source=source, position=position, fragment=source[position],
            )
        kind = match.lastgroup
        text = match.group()
        if kind != 'space':
            if text == '**':
                text = '^'
            tokens.append(Token(kind, text, position))
        position = match.end()
    return tokens


def _number(text: str) -> int | float | complex:
    if text.endswith('j'):
        return complex(text)
    if any(c in text for c in '.eE'):
        return float(text)
    return int(text)


def _unquote(text: str) -> str:
    body = text[1:-1]
    return re.sub(r'\\(.)', lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


class _Parser:
    def __init__(self, source: str):
        self.source = source
        self.tokens = tokenize(source)
        self.index = 0
    
    # === Token helpers ===
    
    def _peek(self) -> Token | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None
    
    def _at(self, *texts: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == 'op' and token.text in texts
    
    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of input")
        self.index += 1
        return token
    
    def _expect(self, text: str) -> Token:
        if not self._at(text):
            raise self._error(f"expected {text!r}")
        return self._advance()
    
    def _error(self, message: str) -> ParseError:
        token = self._peek()
        if token is None:
            position = len(self.source)
            fragment = self.tokens[-1].text if self.tokens else ''
            where = "end of input"
        else:
            position = token.position
            fragment = token.text
            where = f"{fragment!r} at position {position}"
        if message == "unexpected end of input":
            text = message
        else:
            text = f"{message}, found {where}"
        return ParseError(text, source=self.source, position=position, fragment=fragment)
    
    # === Grammar ===
    
    def parse(self) -> Expression:
        if not self.tokens:
            raise ParseError("empty expression", source=self.source, position=0, fragment='')
        result = self._expression()
        if self._peek() is not None:
            raise self._error("unexpected token")
        return result
    
    def _expression(self) -> Expression:
        condition = self._comparison()
        if self._at('?'):
            self._advance()
            if_true = self._expression()
            self._expect(':')
            if_false = self._expression()
            return Conditional(condition, if_true, if_false)
        return condition
    
    def _comparison(self) -> Expression:
        left = self._additive()
        if self._at(*COMPARISONS):
            op = self._advance().text
            return Comparison(op, left, self._additive())
        return left
    
    def _additive(self) -> Expression:
        left = self._multiplicative()
        while self._at(*_ADDITIVE):
            node = _ADDITIVE[self._advance().text]
            left = node(left, self._multiplicative())
        return left
    
    def _implicit_product(self) -> bool:
        previous = self.tokens[self.index - 1] if self.index > 0 else None
        token = self._peek()
        if previous is None or token is None or previous.kind != 'number':
            return False
        return token.kind == 'name' or (token.kind == 'op' and token.text == '(')
    
    def _multiplicative(self) -> Expression:
        left = self._unary()
        while True:
            if self._at(*_MULTIPLICATIVE):
                node = _MULTIPLICATIVE[self._advance().text]
                left = node(left, self._unary())
            elif self._implicit_product():
                left = Multiply(left, self._unary())
            else:
                return left
    
    def _unary(self) -> Expression:
        if self._at('-'):
            self._advance()
            operand = self._unary()
            if isinstance(operand, Literal) and operand.is_numeric:
                return Literal(-operand.value)
            return Negate(operand)
        if self._at('+'):
            self._advance()
            return self._unary()
        return self._power()
    
    def _power(self) -> Expression:
        base = self._postfix()
        if self._at('^'):
            self._advance()
            return Pow(base, self._unary())
        return base
    
    def _postfix(self) -> Expression:
        node = self._primary()
        while True:
            if self._at('.'):
                self._advance()
                token = self._advance()
                if token.kind != 'name':
                    self.index -= 1
                    raise self._error("expected a member name")
                node = Member(node, token.text)
            elif self._at('['):
                self._advance()
                index = self._expression()
                self._expect(']')
                node = Index(node, index)
            elif self._at('(') and not self._implicit_product():
                self._advance()
                node = self._call(node, self._arguments())
            else:
                return node
    
    def _arguments(self) -> list[Expression]:
        arguments = []
        if not self._at(')'):
            arguments.append(self._expression())
            while self._at(','):
                self._advance()
                arguments.append(self._expression())
        self._expect(')')
        return arguments
    
    @staticmethod
    def _call(callee: Expression, arguments: list[Expression]) -> Expression:
        if isinstance(callee, Variable) and callee.name in FUNCTIONS and len(arguments) == 1:
            return Function(callee.name, arguments[0])
        return Call(callee, tuple(arguments))
    
    def _primary(self) -> Expression:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of input")
        if token.kind == 'number':
            self._advance()
            return Literal(_number(token.text))
        if token.kind == 'string':
            self._advance()
            return Literal(_unquote(token.text))
        if token.kind == 'name':
            self._advance()
            if token.text in _KEYWORDS:
                return Literal(_KEYWORDS[token.text])
            return Variable(token.text)
        if self._at('('):
            self._advance()
            inner = self._expression()
            self._expect(')')
            return inner
        raise self._error("unexpected token")


def parse(source: str) -> Expression:
    """
    Parse text into an expression tree.
    
    Raises:
        ParseError: With .source, .position and .fragment set
        
    Examples:
        >>> str(parse("2*x^2 + 3*x + 1"))
        '(((2 * (x ^ 2)) + (3 * x)) + 1)'
        >>> parse("2*x^2 + 3*x + 1").evaluate({'x': 2})
        15
    """
    if not isinstance(source, str):
        raise ParseError(
            f"expected a string, got {type(source).__name__}",
            source=None, position=None, fragment=None,
        )
    return _Parser(source).parse()


def try_parse(source: str) -> Expression | None:
    """parse(), returning None instead of raising ParseError."""
    try:
        return parse(source)
    except ParseError:
        return None
