"""
Parser tests for Marmoset
Tests statement grammar, operator precedence and error collection
"""

import pytest
from lexing import tokenize, TokenType
from parsing import Parser, parse, create_parser, pretty_print_ast
from syntax_tree import (
    LetStmt, ReturnStmt, ExpressionStmt, Ident, Integer, Complex, Boolean,
    StringLiteral, ArrayLiteral, Prefix, Infix, IfExpr, Function, Call,
    expression_to_string
)
from error_handling import MarmosetParseError


def parse_expr(source):
  """Parse a single expression statement and return its expression"""
  program = parse(source)
  assert len(program) == 1
  assert isinstance(program[0], ExpressionStmt)
  return program[0].expression


class TestStatements:
  """Test statement parsing"""

  def test_let_statements(self):
    program = parse("let x = 5; let y = true; let foobar = y;")
    assert program == [
        LetStmt("x", Integer(5)),
        LetStmt("y", Boolean(True)),
        LetStmt("foobar", Ident("y")),
    ]

  def test_return_statements(self):
    program = parse("return 5; return x;")
    assert program == [ReturnStmt(Integer(5)), ReturnStmt(Ident("x"))]

  def test_semicolon_is_optional(self):
    assert parse("let a = 1\nlet b = 2") == [LetStmt("a", Integer(1)), LetStmt("b", Integer(2))]

  def test_empty_program(self):
    assert parse("") == []


class TestPrecedence:
  """Test operator precedence via fully parenthesized rendering"""

  @pytest.mark.parametrize("source, expected", [
      ("-a * b", "((-a) * b)"),
      ("!-a", "(!(-a))"),
      ("a + b + c", "((a + b) + c)"),
      ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
      ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))"),
      ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))"),
      ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)"),
      ("-(5 + 5)", "(-(5 + 5))"),
      ("2 ^ 3 ^ 2", "(2 ^ (3 ^ 2))"),
      ("2 * 3 ^ 2", "(2 * (3 ^ 2))"),
      ("a + add(b * c) + d", "((a + add((b * c))) + d)"),
      ("add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))",
       "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))"),
  ])
  def test_operator_precedence(self, source, expected):
    assert expression_to_string(parse_expr(source)) == expected


class TestExpressions:
  """Test individual expression forms"""

  def test_literals(self):
    assert parse_expr("5") == Integer(5)
    assert parse_expr("4i") == Complex(0, 4)
    assert parse_expr("false") == Boolean(False)
    assert parse_expr('"hello world"') == StringLiteral("hello world")

  def test_prefix(self):
    assert parse_expr("!5") == Prefix(TokenType.BANG, Integer(5))
    assert parse_expr("-15") == Prefix(TokenType.MINUS, Integer(15))

  def test_infix(self):
    assert parse_expr("5 != 5") == Infix(Integer(5), TokenType.NOTEQ, Integer(5))

  def test_if_expression(self):
    expr = parse_expr("if (x < y) { x }")
    assert expr == IfExpr(
        Infix(Ident("x"), TokenType.LT, Ident("y")),
        (ExpressionStmt(Ident("x")),),
        ()
    )

  def test_if_else_expression(self):
    expr = parse_expr("if (x < y) { x } else { y }")
    assert expr.alternative == (ExpressionStmt(Ident("y")),)

  def test_function_literal(self):
    expr = parse_expr("fn(x, y) { x + y; }")
    assert expr == Function(
        ("x", "y"),
        (ExpressionStmt(Infix(Ident("x"), TokenType.PLUS, Ident("y"))),)
    )

  @pytest.mark.parametrize("source, params", [
      ("fn() {}", ()),
      ("fn(x) {}", ("x",)),
      ("fn(x, y, z) {}", ("x", "y", "z")),
  ])
  def test_function_parameters(self, source, params):
    assert parse_expr(source).params == params

  def test_call_expression(self):
    expr = parse_expr("add(1, 2 * 3, 4 + 5)")
    assert expr == Call(Ident("add"), (
        Integer(1),
        Infix(Integer(2), TokenType.ASTERISK, Integer(3)),
        Infix(Integer(4), TokenType.PLUS, Integer(5)),
    ))

  def test_immediately_invoked_function(self):
    expr = parse_expr("fn(x) { x; }(5)")
    assert isinstance(expr, Call)
    assert isinstance(expr.function, Function)

  def test_array_literal(self):
    assert parse_expr("[1, 2 * 2]") == ArrayLiteral(
        (Integer(1), Infix(Integer(2), TokenType.ASTERISK, Integer(2)))
    )
    assert parse_expr("[]") == ArrayLiteral(())


class TestParseErrors:
  """Test error reporting and recovery"""

  def test_errors_are_collected_across_statements(self):
    with pytest.raises(MarmosetParseError) as info:
      parse("let = 5; let x 5; let y = 1;")
    errors = info.value.errors
    assert len(errors) == 2
    assert errors[0]['expected'] == ["identifier"]
    assert errors[1]['expected'] == ["'='"]

  def test_no_prefix_rule(self):
    with pytest.raises(MarmosetParseError) as info:
      parse("let x = ;")
    assert "no prefix parse function" in info.value.errors[0]['message']

  def test_missing_closing_paren(self):
    with pytest.raises(MarmosetParseError) as info:
      parse("(1 + 2")
    assert info.value.errors[0]['expected'] == ["')'"]
    assert info.value.errors[0]['got'] == "end of input"

  def test_unterminated_block(self):
    with pytest.raises(MarmosetParseError) as info:
      parse("if (true) { 1")
    assert info.value.errors[0]['expected'] == ["'}'"]

  def test_if_requires_parenthesized_condition(self):
    with pytest.raises(MarmosetParseError):
      parse("if true { 1 }")

  def test_integer_literal_out_of_range(self):
    with pytest.raises(MarmosetParseError):
      parse("9223372036854775808")

  def test_error_position(self):
    with pytest.raises(MarmosetParseError) as info:
      parse("let a = 1;\nlet 7 = 2;")
    error = info.value.errors[0]
    assert error['line'] == 2
    assert error['column'] == 5
    assert "Error here" in error['context']

  def test_parser_exposes_errors(self):
    parser = Parser(tokenize("let;"))
    with pytest.raises(MarmosetParseError):
      parser.parse_program()
    assert len(parser.errors) == 1

  def test_token_stream_must_end_with_eof(self):
    with pytest.raises(ValueError):
      Parser(tokenize("1")[:-1])

  def test_recovery_skips_semicolons_inside_blocks(self):
    with pytest.raises(MarmosetParseError) as info:
      parse("if (true) { let = 1; 2 }; 3")
    assert len(info.value.errors) == 1
    assert info.value.errors[0]['expected'] == ["identifier"]

  def test_recovery_resumes_after_nested_block(self):
    with pytest.raises(MarmosetParseError) as info:
      parse("let f = fn() { if (true) { let 1; } }; let g = ;")
    errors = info.value.errors
    assert len(errors) == 2
    assert "no prefix parse function for ';'" in errors[1]['message']

  def test_missing_assign_suggests_let_form(self):
    with pytest.raises(MarmosetParseError) as info:
      parse("let x 5;")
    assert "let bindings are written as: let name = value;" in info.value.errors[0]['suggestions']
    assert "Suggestions:" in str(info.value)

  def test_missing_name_suggestion(self):
    with pytest.raises(MarmosetParseError) as info:
      parse("let 7 = 2;")
    assert "Names must start with a letter or underscore" in info.value.errors[0]['suggestions']

  def test_unbalanced_delimiter_suggestion(self):
    with pytest.raises(MarmosetParseError) as info:
      parse("(1 + 2")
    assert "Check for an unbalanced parenthesis or brace" in info.value.errors[0]['suggestions']


class TestDebugOutput:
  """Test debug tracing and AST printing"""

  def test_debug_parser_traces(self, capsys):
    create_parser(debug=True).parse_string("let x = 1;")
    out = capsys.readouterr().out
    assert "Parsed statement: let x = 1;" in out
    assert "Parsed 1 statements" in out

  def test_pretty_print_ast(self):
    text = pretty_print_ast(parse("let x = 1 + 2;"))
    assert "LetStmt(name='x')" in text
    assert "Infix(operator='+')" in text
    assert "Integer(value=1)" in text
