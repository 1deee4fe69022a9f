"""
Marmoset AST model
Immutable statement and expression nodes plus the operator precedence table
"""

from typing import List, Tuple, Union
from dataclasses import dataclass
from enum import IntEnum

from lexing import TokenType


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Ident:
    name: str


@dataclass(frozen=True)
class Integer:
    value: int


@dataclass(frozen=True)
class Complex:
    re: int
    im: int


@dataclass(frozen=True)
class Boolean:
    value: bool


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class ArrayLiteral:
    elements: Tuple['Expression', ...]


@dataclass(frozen=True)
class Prefix:
    operator: TokenType
    right: 'Expression'


@dataclass(frozen=True)
class Infix:
    left: 'Expression'
    operator: TokenType
    right: 'Expression'


@dataclass(frozen=True)
class IfExpr:
    """An absent else branch is an empty alternative block"""
    condition: 'Expression'
    consequence: Tuple['Statement', ...]
    alternative: Tuple['Statement', ...] = ()


@dataclass(frozen=True)
class Function:
    params: Tuple[str, ...]
    body: Tuple['Statement', ...]


@dataclass(frozen=True)
class Call:
    function: 'Expression'
    args: Tuple['Expression', ...]


Expression = Union[
    Ident, Integer, Complex, Boolean, StringLiteral, ArrayLiteral,
    Prefix, Infix, IfExpr, Function, Call
]


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class LetStmt:
    name: str
    value: Expression


@dataclass(frozen=True)
class ReturnStmt:
    value: Expression


@dataclass(frozen=True)
class ExpressionStmt:
    expression: Expression


Statement = Union[LetStmt, ReturnStmt, ExpressionStmt]
BlockStmt = Tuple[Statement, ...]
Program = List[Statement]


# ============================================================================
# PRECEDENCE
# ============================================================================

class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2
    LESSGREATER = 3
    SUM = 4
    PRODUCT = 5
    POWER = 6
    PREFIX = 7
    CALL = 8


PRECEDENCES = {
    TokenType.EQ: Precedence.EQUALS,
    TokenType.NOTEQ: Precedence.EQUALS,
    TokenType.LT: Precedence.LESSGREATER,
    TokenType.GT: Precedence.LESSGREATER,
    TokenType.PLUS: Precedence.SUM,
    TokenType.MINUS: Precedence.SUM,
    TokenType.ASTERISK: Precedence.PRODUCT,
    TokenType.SLASH: Precedence.PRODUCT,
    TokenType.POWER: Precedence.POWER,
    TokenType.LPAREN: Precedence.CALL,
}


def take_precedence(token_type: TokenType) -> Precedence:
    """Infix binding power of a token kind"""
    return PRECEDENCES.get(token_type, Precedence.LOWEST)


# ============================================================================
# RENDERING
# ============================================================================

def expression_to_string(expr: Expression) -> str:
    """Render an expression back to fully parenthesized source form"""
    if isinstance(expr, Ident):
        return expr.name
    if isinstance(expr, Integer):
        return str(expr.value)
    if isinstance(expr, Complex):
        return f"{expr.im}i" if expr.re == 0 else f"({expr.re} + {expr.im}i)"
    if isinstance(expr, Boolean):
        return "true" if expr.value else "false"
    if isinstance(expr, StringLiteral):
        return f'"{expr.value}"'
    if isinstance(expr, ArrayLiteral):
        return "[" + ", ".join(expression_to_string(e) for e in expr.elements) + "]"
    if isinstance(expr, Prefix):
        return f"({expr.operator.value}{expression_to_string(expr.right)})"
    if isinstance(expr, Infix):
        return (f"({expression_to_string(expr.left)} {expr.operator.value} "
                f"{expression_to_string(expr.right)})")
    if isinstance(expr, IfExpr):
        text = f"if {expression_to_string(expr.condition)} {block_to_string(expr.consequence)}"
        if expr.alternative:
            text += f" else {block_to_string(expr.alternative)}"
        return text
    if isinstance(expr, Function):
        return f"fn({', '.join(expr.params)}) {block_to_string(expr.body)}"
    if isinstance(expr, Call):
        args = ", ".join(expression_to_string(a) for a in expr.args)
        return f"{expression_to_string(expr.function)}({args})"
    raise TypeError(f"not an expression node: {expr!r}")


def statement_to_string(stmt: Statement) -> str:
    if isinstance(stmt, LetStmt):
        return f"let {stmt.name} = {expression_to_string(stmt.value)};"
    if isinstance(stmt, ReturnStmt):
        return f"return {expression_to_string(stmt.value)};"
    return expression_to_string(stmt.expression)


def block_to_string(block: BlockStmt) -> str:
    return "{ " + " ".join(statement_to_string(s) for s in block) + " }"
