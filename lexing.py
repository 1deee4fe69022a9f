"""
Marmoset Tokenizer
Turns source text into a flat token list using pyparsing elements
"""

from typing import Any, Dict, List
from dataclasses import dataclass
from enum import Enum

from pyparsing import (
    Regex, ZeroOrMore, StringEnd, MatchFirst, ParseException, ParserElement,
    one_of, dbl_slash_comment, lineno, col
)

from error_handling import MarmosetLexError, enhance_parse_exception_dict


class TokenType(Enum):
    """Token kinds produced by the tokenizer"""
    EOF = "EOF"

    # Identifiers + literals
    IDENT = "IDENT"
    INT = "INT"
    IMAG = "IMAG"
    STRING = "STRING"

    # Operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    BANG = "!"
    ASTERISK = "*"
    SLASH = "/"
    POWER = "^"
    LT = "<"
    GT = ">"
    EQ = "=="
    NOTEQ = "!="

    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"

    # Keywords
    FUNCTION = "fn"
    LET = "let"
    IF = "if"
    ELSE = "else"
    RETURN = "return"
    TRUE = "true"
    FALSE = "false"


KEYWORDS: Dict[str, TokenType] = {
    "fn": TokenType.FUNCTION,
    "let": TokenType.LET,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "return": TokenType.RETURN,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
}

OPERATORS: Dict[str, TokenType] = {
    t.value: t for t in TokenType
    if t.value in "= + - ! * / ^ < > == != , ; ( ) { } [ ]".split()
}


@dataclass(frozen=True)
class SourceSpan:
    """Source location information for a token"""
    filename: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    text: str = ""

    def __str__(self) -> str:
        if self.start_line == self.end_line:
            return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_col}"
        return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


@dataclass(frozen=True)
class Token:
    """Marmoset token with source information"""
    type: TokenType
    value: Any
    span: SourceSpan

    def __str__(self) -> str:
        if self.value is None:
            return self.type.name
        return f"{self.type.name}({self.value!r})"


class MarmosetTokenizer:
    """Tokenizer built from pyparsing elements, one parse action per token kind"""

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        self._setup_token_patterns()

    def _setup_token_patterns(self):
        """Setup all token patterns"""
        imaginary = Regex(r"\d+i\b").set_parse_action(
            self._action(TokenType.IMAG, lambda text: int(text[:-1]))
        )
        integer = Regex(r"\d+").set_parse_action(
            self._action(TokenType.INT, int)
        )
        string = Regex(r'"(?:[^"\\\n]|\\.)*"').set_parse_action(
            self._action(TokenType.STRING, lambda text: self._process_string_escapes(text[1:-1]))
        )
        identifier = Regex(r"[A-Za-z_][A-Za-z0-9_]*").set_parse_action(self._identifier_action)

        # one_of reorders alternatives so '==' wins over '='
        operator = one_of(list(OPERATORS)).set_parse_action(self._operator_action)

        token = MatchFirst([imaginary, integer, string, identifier, operator])

        self.token_stream: ParserElement = ZeroOrMore(token) + StringEnd()
        self.token_stream.ignore(dbl_slash_comment)
        self.token_stream.parse_with_tabs()

    def _span(self, source: str, loc: int, text: str) -> SourceSpan:
        line = lineno(loc, source)
        column = col(loc, source)
        return SourceSpan(self.filename, line, column, line, column + len(text), text)

    def _action(self, token_type: TokenType, convert):
        def action(source, loc, toks):
            text = toks[0]
            return Token(token_type, convert(text), self._span(source, loc, text))
        return action

    def _identifier_action(self, source, loc, toks):
        text = toks[0]
        span = self._span(source, loc, text)
        if text in KEYWORDS:
            return Token(KEYWORDS[text], None, span)
        return Token(TokenType.IDENT, text, span)

    def _operator_action(self, source, loc, toks):
        text = toks[0]
        return Token(OPERATORS[text], None, self._span(source, loc, text))

    def _process_string_escapes(self, s: str) -> str:
        """Process escape sequences in strings"""
        escape_map = {
            'n': '\n', 't': '\t', 'r': '\r', '\\': '\\', '"': '"', '0': '\0'
        }

        result = []
        i = 0
        while i < len(s):
            if s[i] == '\\' and i + 1 < len(s) and s[i + 1] in escape_map:
                result.append(escape_map[s[i + 1]])
                i += 2
            else:
                result.append(s[i])
                i += 1

        return ''.join(result)

    def tokenize(self, text: str) -> List[Token]:
        """Tokenize source text; the result always ends with an EOF token"""
        try:
            tokens = list(self.token_stream.parse_string(text, parse_all=True))
        except ParseException as e:
            raise MarmosetLexError(enhance_parse_exception_dict(e, text)) from e

        lines = text.split('\n')
        end = SourceSpan(self.filename, len(lines), len(lines[-1]) + 1,
                         len(lines), len(lines[-1]) + 1, "")
        tokens.append(Token(TokenType.EOF, None, end))
        return tokens


def tokenize(text: str, filename: str = "<input>") -> List[Token]:
    """Tokenize Marmoset source code"""
    return MarmosetTokenizer(filename).tokenize(text)
