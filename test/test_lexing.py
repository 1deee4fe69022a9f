"""
Tokenizer tests for Marmoset
"""

import pytest
from lexing import tokenize, TokenType, MarmosetTokenizer
from error_handling import MarmosetLexError


def kinds(source):
  return [t.type for t in tokenize(source)]


class TestTokenKinds:
  """Test token classification"""

  def test_let_statement(self):
    assert kinds("let five = 5;") == [
        TokenType.LET, TokenType.IDENT, TokenType.ASSIGN,
        TokenType.INT, TokenType.SEMICOLON, TokenType.EOF
    ]

  def test_operators_prefer_longest_match(self):
    assert kinds("== != = ! < > ^") == [
        TokenType.EQ, TokenType.NOTEQ, TokenType.ASSIGN, TokenType.BANG,
        TokenType.LT, TokenType.GT, TokenType.POWER, TokenType.EOF
    ]

  def test_keywords(self):
    assert kinds("fn let if else return true false") == [
        TokenType.FUNCTION, TokenType.LET, TokenType.IF, TokenType.ELSE,
        TokenType.RETURN, TokenType.TRUE, TokenType.FALSE, TokenType.EOF
    ]

  def test_keyword_prefix_is_identifier(self):
    tokens = tokenize("letter iffy")
    assert tokens[0].type == TokenType.IDENT
    assert tokens[0].value == "letter"
    assert tokens[1].value == "iffy"

  def test_delimiters(self):
    assert kinds("(){}[],;") == [
        TokenType.LPAREN, TokenType.RPAREN, TokenType.LBRACE, TokenType.RBRACE,
        TokenType.LBRACKET, TokenType.RBRACKET, TokenType.COMMA,
        TokenType.SEMICOLON, TokenType.EOF
    ]

  def test_empty_source_is_just_eof(self):
    assert kinds("") == [TokenType.EOF]


class TestLiterals:
  """Test literal payloads"""

  def test_integer_value(self):
    token = tokenize("12345")[0]
    assert token.type == TokenType.INT
    assert token.value == 12345

  def test_imaginary_literal(self):
    token = tokenize("4i")[0]
    assert token.type == TokenType.IMAG
    assert token.value == 4

  def test_integer_followed_by_identifier(self):
    tokens = tokenize("4 i")
    assert tokens[0].type == TokenType.INT
    assert tokens[1].type == TokenType.IDENT

  def test_string_with_escapes(self):
    token = tokenize(r'"a\tb\"c"')[0]
    assert token.type == TokenType.STRING
    assert token.value == 'a\tb"c'

  def test_comments_are_skipped(self):
    assert kinds("1 // one\n2") == [TokenType.INT, TokenType.INT, TokenType.EOF]


class TestSpans:
  """Test source positions"""

  def test_line_and_column(self):
    tokens = MarmosetTokenizer("prog.mmt").tokenize("let x = 1;\n  x + 2")
    plus = tokens[6]
    assert plus.type == TokenType.PLUS
    assert plus.span.start_line == 2
    assert plus.span.start_col == 5
    assert plus.span.filename == "prog.mmt"


class TestLexErrors:
  """Test error reporting for bad input"""

  def test_unknown_character(self):
    with pytest.raises(MarmosetLexError) as info:
      tokenize("let x = 1;\nlet y = @;")
    assert info.value.line == 2
    assert info.value.column == 9
    assert "Error here" in str(info.value)

  def test_unterminated_string(self):
    with pytest.raises(MarmosetLexError):
      tokenize('"never closed')

  def test_single_quoted_string_suggestion(self):
    with pytest.raises(MarmosetLexError) as info:
      tokenize("let s = 'hi';")
    assert "Strings are written with double quotes" in info.value.error['suggestions']
