"""
Marmoset Parser
Top-down operator precedence (Pratt) parser turning tokens into an AST Program
"""

from typing import Callable, Dict, List, Optional, Tuple

from lexing import Token, TokenType, MarmosetTokenizer
from syntax_tree import (
    Program, Statement, BlockStmt, Expression,
    LetStmt, ReturnStmt, ExpressionStmt,
    Ident, Integer, Complex, Boolean, StringLiteral, ArrayLiteral,
    Prefix, Infix, IfExpr, Function, Call,
    Precedence, take_precedence, statement_to_string
)
from error_handling import MarmosetParseError, make_parse_error, get_context_lines, generate_suggestions


I64_MAX = 2 ** 63 - 1

PrefixParseFn = Callable[[], Expression]
InfixParseFn = Callable[[Expression], Expression]


class _StatementAborted(Exception):
    """Unwinds the statement being parsed once an error has been recorded"""
    pass


def describe_token(token: Token) -> str:
    """Human readable form of a token for error messages"""
    if token.type == TokenType.EOF:
        return "end of input"
    if token.type == TokenType.IDENT:
        return f"identifier '{token.value}'"
    if token.type in (TokenType.INT, TokenType.IMAG):
        return f"'{token.span.text}'"
    if token.type == TokenType.STRING:
        return f"string {token.span.text}"
    return f"'{token.type.value}'"


def describe_expected(token_type: TokenType) -> str:
    if token_type == TokenType.IDENT:
        return "identifier"
    return f"'{token_type.value}'"


class Parser:
    """Pratt parser over a token list produced by the tokenizer"""

    def __init__(self, tokens: List[Token], source: str = "", debug: bool = False):
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("token stream must end with an EOF token")
        self.tokens = tokens
        self.source = source
        self.debug = debug
        self.errors: List[Dict] = []
        self.position = 0

        self.prefix_parse_fns: Dict[TokenType, PrefixParseFn] = {
            TokenType.IDENT: self.parse_identifier,
            TokenType.INT: self.parse_integer_literal,
            TokenType.IMAG: self.parse_imaginary_literal,
            TokenType.STRING: self.parse_string_literal,
            TokenType.TRUE: self.parse_boolean,
            TokenType.FALSE: self.parse_boolean,
            TokenType.BANG: self.parse_prefix_expression,
            TokenType.MINUS: self.parse_prefix_expression,
            TokenType.LPAREN: self.parse_grouped_expression,
            TokenType.LBRACKET: self.parse_array_literal,
            TokenType.IF: self.parse_if_expression,
            TokenType.FUNCTION: self.parse_function_literal,
        }

        self.infix_parse_fns: Dict[TokenType, InfixParseFn] = {
            TokenType.PLUS: self.parse_infix_expression,
            TokenType.MINUS: self.parse_infix_expression,
            TokenType.ASTERISK: self.parse_infix_expression,
            TokenType.SLASH: self.parse_infix_expression,
            TokenType.POWER: self.parse_infix_expression,
            TokenType.EQ: self.parse_infix_expression,
            TokenType.NOTEQ: self.parse_infix_expression,
            TokenType.LT: self.parse_infix_expression,
            TokenType.GT: self.parse_infix_expression,
            TokenType.LPAREN: self.parse_call_expression,
        }

    # ------------------------------------------------------------------
    # Token cursor
    # ------------------------------------------------------------------

    @property
    def cur_token(self) -> Token:
        return self.tokens[self.position]

    @property
    def peek_token(self) -> Token:
        return self.tokens[min(self.position + 1, len(self.tokens) - 1)]

    def next_token(self) -> None:
        if self.position < len(self.tokens) - 1:
            self.position += 1

    def cur_token_is(self, token_type: TokenType) -> bool:
        return self.cur_token.type == token_type

    def peek_token_is(self, token_type: TokenType) -> bool:
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: TokenType) -> None:
        """Advance if the next token has the required kind, otherwise fail"""
        if self.peek_token_is(token_type):
            self.next_token()
        else:
            self.fail(
                f"expected next token to be {describe_expected(token_type)}, "
                f"got {describe_token(self.peek_token)} instead",
                self.peek_token,
                [describe_expected(token_type)]
            )

    def peek_precedence(self) -> Precedence:
        return take_precedence(self.peek_token.type)

    def cur_precedence(self) -> Precedence:
        return take_precedence(self.cur_token.type)

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def fail(self, message: str, token: Token, expected: Optional[List[str]] = None) -> None:
        """Record a parse error at token and abandon the current statement"""
        span = token.span
        got = describe_token(token)
        context = get_context_lines(self.source, span.start_line, span.start_col) if self.source else None
        self.errors.append(make_parse_error(
            message=message,
            location=self.position,
            line=span.start_line,
            column=span.start_col,
            expected=expected,
            got=got,
            context=context,
            suggestions=generate_suggestions(got, expected or [])
        ))
        raise _StatementAborted()

    def synchronize(self, start: int) -> None:
        """
        Skip past the first ';' after the failure that is not inside a block
        opened by the statement beginning at start
        """
        failed_at = self.position
        self.position = start
        depth = 0
        while not self.cur_token_is(TokenType.EOF):
            if self.cur_token_is(TokenType.LBRACE):
                depth += 1
            elif self.cur_token_is(TokenType.RBRACE):
                depth = max(0, depth - 1)
            elif self.cur_token_is(TokenType.SEMICOLON) and depth == 0 and self.position >= failed_at:
                self.next_token()
                return
            self.next_token()

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def parse_program(self) -> Program:
        """Parse the whole token stream; raises MarmosetParseError on any error"""
        program: Program = []
        while not self.cur_token_is(TokenType.EOF):
            start = self.position
            try:
                stmt = self.parse_statement()
            except _StatementAborted:
                self.synchronize(start)
                continue
            program.append(stmt)
            if self.debug:
                print(f"Parsed statement: {statement_to_string(stmt)}")
            self.next_token()

        if self.errors:
            raise MarmosetParseError(self.errors)
        if self.debug:
            print(f"Parsed {len(program)} statements")
        return program

    def parse_statement(self) -> Statement:
        if self.cur_token_is(TokenType.LET):
            return self.parse_let_statement()
        if self.cur_token_is(TokenType.RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> LetStmt:
        self.expect_peek(TokenType.IDENT)
        name = self.cur_token.value
        self.expect_peek(TokenType.ASSIGN)
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()
        return LetStmt(name, value)

    def parse_return_statement(self) -> ReturnStmt:
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()
        return ReturnStmt(value)

    def parse_expression_statement(self) -> ExpressionStmt:
        expression = self.parse_expression(Precedence.LOWEST)
        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()
        return ExpressionStmt(expression)

    def parse_block_statement(self) -> BlockStmt:
        """Parse statements up to the closing brace; cur_token is '{' on entry"""
        statements = []
        self.next_token()
        while not self.cur_token_is(TokenType.RBRACE):
            if self.cur_token_is(TokenType.EOF):
                self.fail("unterminated block, missing '}'", self.cur_token, ["'}'"])
            statements.append(self.parse_statement())
            self.next_token()
        return tuple(statements)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self, precedence: Precedence) -> Expression:
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self.fail(
                f"no prefix parse function for {describe_token(self.cur_token)} found",
                self.cur_token,
                ["expression"]
            )
        left = prefix()

        while not self.peek_token_is(TokenType.SEMICOLON) and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left
            self.next_token()
            left = infix(left)

        return left

    def parse_identifier(self) -> Expression:
        return Ident(self.cur_token.value)

    def parse_integer_literal(self) -> Expression:
        value = self.cur_token.value
        if value > I64_MAX:
            self.fail(f"integer literal {value} does not fit in 64 bits", self.cur_token)
        return Integer(value)

    def parse_imaginary_literal(self) -> Expression:
        value = self.cur_token.value
        if value > I64_MAX:
            self.fail(f"imaginary literal {value}i does not fit in 64 bits", self.cur_token)
        return Complex(0, value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token.value)

    def parse_boolean(self) -> Expression:
        return Boolean(self.cur_token_is(TokenType.TRUE))

    def parse_prefix_expression(self) -> Expression:
        operator = self.cur_token.type
        self.next_token()
        return Prefix(operator, self.parse_expression(Precedence.PREFIX))

    def parse_infix_expression(self, left: Expression) -> Expression:
        operator = self.cur_token.type
        precedence = self.cur_precedence()
        # '^' is right-associative
        if operator == TokenType.POWER:
            precedence = Precedence(precedence - 1)
        self.next_token()
        return Infix(left, operator, self.parse_expression(precedence))

    def parse_grouped_expression(self) -> Expression:
        self.next_token()
        expression = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TokenType.RPAREN)
        return expression

    def parse_if_expression(self) -> Expression:
        self.expect_peek(TokenType.LPAREN)
        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TokenType.RPAREN)
        self.expect_peek(TokenType.LBRACE)
        consequence = self.parse_block_statement()

        alternative: BlockStmt = ()
        if self.peek_token_is(TokenType.ELSE):
            self.next_token()
            self.expect_peek(TokenType.LBRACE)
            alternative = self.parse_block_statement()

        return IfExpr(condition, consequence, alternative)

    def parse_function_literal(self) -> Expression:
        self.expect_peek(TokenType.LPAREN)
        params = self.parse_function_parameters()
        self.expect_peek(TokenType.LBRACE)
        return Function(params, self.parse_block_statement())

    def parse_function_parameters(self) -> Tuple[str, ...]:
        if self.peek_token_is(TokenType.RPAREN):
            self.next_token()
            return ()

        self.expect_peek(TokenType.IDENT)
        params = [self.cur_token.value]
        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            self.expect_peek(TokenType.IDENT)
            params.append(self.cur_token.value)

        self.expect_peek(TokenType.RPAREN)
        return tuple(params)

    def parse_call_expression(self, function: Expression) -> Expression:
        return Call(function, self.parse_expression_list(TokenType.RPAREN))

    def parse_array_literal(self) -> Expression:
        return ArrayLiteral(self.parse_expression_list(TokenType.RBRACKET))

    def parse_expression_list(self, end: TokenType) -> Tuple[Expression, ...]:
        """Comma separated expressions up to end; cur_token is the opener"""
        if self.peek_token_is(end):
            self.next_token()
            return ()

        self.next_token()
        items = [self.parse_expression(Precedence.LOWEST)]
        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            self.next_token()
            items.append(self.parse_expression(Precedence.LOWEST))

        self.expect_peek(end)
        return tuple(items)


class MarmosetParser:
    """Front end combining the tokenizer and the Pratt parser"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def parse_file(self, filepath: str) -> Program:
        """Parse a Marmoset source file"""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.parse_string(content, filepath)

    def parse_string(self, text: str, filename: str = "<input>") -> Program:
        """Parse Marmoset source code from string"""
        tokens = self.tokenize(text, filename)
        if self.debug:
            print(f"Tokenized {len(tokens)} tokens")
        return Parser(tokens, text, self.debug).parse_program()

    def tokenize(self, text: str, filename: str = "<input>") -> List[Token]:
        """Tokenize Marmoset source code"""
        return MarmosetTokenizer(filename).tokenize(text)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> MarmosetParser:
    """Create a Marmoset parser"""
    return MarmosetParser(debug=debug)


def create_debug_parser() -> MarmosetParser:
    """Create a Marmoset parser with debug enabled"""
    return MarmosetParser(debug=True)


def parse(text: str, filename: str = "<input>") -> Program:
    """Tokenize and parse source text in one step"""
    return create_parser().parse_string(text, filename)


def pretty_print_ast(node, indent: int = 0) -> str:
    """Pretty print an AST node for debugging"""
    pad = "  " * indent
    if isinstance(node, (list, tuple)):
        return "".join(pretty_print_ast(child, indent) for child in node)

    fields = getattr(node, '__dataclass_fields__', None)
    if fields is None:
        return f"{pad}{node!r}\n"

    simple = []
    nested = []
    for name in fields:
        value = getattr(node, name)
        if hasattr(value, '__dataclass_fields__') or (
                isinstance(value, tuple) and value and hasattr(value[0], '__dataclass_fields__')):
            nested.append((name, value))
        elif isinstance(value, TokenType):
            simple.append(f"{name}={value.value!r}")
        else:
            simple.append(f"{name}={value!r}")

    result = f"{pad}{type(node).__name__}({', '.join(simple)})\n"
    for name, value in nested:
        result += f"{pad}  {name}:\n"
        result += pretty_print_ast(value, indent + 2)
    return result
