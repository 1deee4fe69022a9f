"""
Marmoset Interpreter
Tree-walking evaluator: every step returns an Object or raises a runtime error
"""

import sys
import threading
from typing import Callable, List, Optional, Sequence, Tuple

import syntax_tree as st
from lexing import TokenType
from parsing import create_parser
from environment import Environment
from stdlib import lookup_builtin, call_builtin
from objects import (
    Object, Integer, Complex, String, Array, Function, BuiltIn, ReturnValue,
    NULL, TRUE, FALSE,
    type_name, to_complex, is_same_type, is_truthy, native_bool_to_boolean, check_i64
)
from error_handling import (
    IdentNotFound, UnknownPrefix, UnknownInfix, TypeMismatch, NotFunction,
    PowErr, ArityMismatch, DivisionByZero, IntegerOverflow
)


# ============================================================================
# PROGRAM AND STATEMENT EVALUATION
# ============================================================================

def eval_program(statements: Sequence[st.Statement], env: Environment, debug: bool = False) -> Object:
  """
  Evaluate statements in order. A return stops evaluation and its unwrapped
  value becomes the program result.
  """
  result: Object = NULL
  for statement in statements:
    result = eval_statement(statement, env, debug)
    if isinstance(result, ReturnValue):
      return result.value
  return result


def eval_block(statements: Sequence[st.Statement], env: Environment, debug: bool = False) -> Object:
  """Like eval_program, but a ReturnValue is handed back still wrapped"""
  result: Object = NULL
  for statement in statements:
    result = eval_statement(statement, env, debug)
    if isinstance(result, ReturnValue):
      return result
  return result


def eval_statement(statement: st.Statement, env: Environment, debug: bool = False) -> Object:
  """Evaluate a single statement"""
  if debug:
    print(f"Evaluating: {type(statement).__name__}")

  if isinstance(statement, st.LetStmt):
    value = eval_expression(statement.value, env, debug)
    if isinstance(value, ReturnValue):
      return value
    return env.set(statement.name, value)

  if isinstance(statement, st.ReturnStmt):
    value = eval_expression(statement.value, env, debug)
    if isinstance(value, ReturnValue):
      return value
    return ReturnValue(value)

  if isinstance(statement, st.ExpressionStmt):
    return eval_expression(statement.expression, env, debug)

  raise TypeError(f"not a statement node: {statement!r}")


# ============================================================================
# EXPRESSION EVALUATION
# ============================================================================

def eval_expression(expr: st.Expression, env: Environment, debug: bool = False) -> Object:
  """Evaluate an expression node"""
  if debug:
    print(f"Evaluating: {type(expr).__name__}")

  if isinstance(expr, st.Integer):
    return Integer(expr.value)
  elif isinstance(expr, st.Complex):
    return Complex(expr.re, expr.im)
  elif isinstance(expr, st.Boolean):
    return native_bool_to_boolean(expr.value)
  elif isinstance(expr, st.StringLiteral):
    return String(expr.value)
  elif isinstance(expr, st.Ident):
    return eval_identifier(expr.name, env)
  elif isinstance(expr, st.ArrayLiteral):
    elements, returned = eval_expressions(expr.elements, env, debug)
    if returned is not None:
      return returned
    return Array(tuple(elements))
  elif isinstance(expr, st.Prefix):
    right = eval_expression(expr.right, env, debug)
    if isinstance(right, ReturnValue):
      return right
    return eval_prefix_expression(expr.operator, right)
  elif isinstance(expr, st.Infix):
    left = eval_expression(expr.left, env, debug)
    if isinstance(left, ReturnValue):
      return left
    right = eval_expression(expr.right, env, debug)
    if isinstance(right, ReturnValue):
      return right
    return eval_infix_expression(expr.operator, left, right)
  elif isinstance(expr, st.IfExpr):
    return eval_if_expression(expr, env, debug)
  elif isinstance(expr, st.Function):
    return Function(expr.params, expr.body, env)
  elif isinstance(expr, st.Call):
    function = eval_expression(expr.function, env, debug)
    if isinstance(function, ReturnValue):
      return function
    args, returned = eval_expressions(expr.args, env, debug)
    if returned is not None:
      return returned
    return apply_function(function, args, debug)

  raise TypeError(f"not an expression node: {expr!r}")


def eval_expressions(exprs: Sequence[st.Expression], env: Environment,
                     debug: bool = False) -> Tuple[List[Object], Optional[ReturnValue]]:
  """Evaluate left to right; stops early if a nested block returned"""
  results = []
  for expr in exprs:
    value = eval_expression(expr, env, debug)
    if isinstance(value, ReturnValue):
      return results, value
    results.append(value)
  return results, None


def eval_identifier(name: str, env: Environment) -> Object:
  """Environment chain first, then the builtin registry"""
  value = env.get(name)
  if value is not None:
    return value
  builtin = lookup_builtin(name)
  if builtin is not None:
    return builtin
  raise IdentNotFound(name)


def eval_if_expression(expr: st.IfExpr, env: Environment, debug: bool = False) -> Object:
  condition = eval_expression(expr.condition, env, debug)
  if isinstance(condition, ReturnValue):
    return condition
  if is_truthy(condition):
    return eval_block(expr.consequence, env, debug)
  elif expr.alternative:
    return eval_block(expr.alternative, env, debug)
  return NULL


# ============================================================================
# FUNCTION APPLICATION
# ============================================================================

def apply_function(function: Object, args: List[Object], debug: bool = False) -> Object:
  """Call a closure or a builtin with already evaluated arguments"""
  if isinstance(function, Function):
    if len(args) != len(function.params):
      raise ArityMismatch(len(function.params), len(args))
    extended_env = extend_function_env(function, args)
    evaluated = eval_block(function.body, extended_env, debug)
    if isinstance(evaluated, ReturnValue):
      return evaluated.value
    return evaluated

  if isinstance(function, BuiltIn):
    if debug:
      print(f"Calling builtin {function.tag}")
    return call_builtin(function, args)

  raise NotFunction(type_name(function))


def extend_function_env(function: Function, args: List[Object]) -> Environment:
  """Fresh call frame enclosed by the closure's captured environment"""
  env = Environment.new_enclosed(function.env)
  for name, value in zip(function.params, args):
    env.set(name, value)
  return env


# ============================================================================
# PREFIX OPERATORS
# ============================================================================

def eval_prefix_expression(operator: TokenType, right: Object) -> Object:
  if operator == TokenType.BANG:
    return eval_bang_operator(right)
  if operator == TokenType.MINUS:
    return eval_minus_operator(right)
  raise UnknownPrefix(operator.value, type_name(right))


def eval_bang_operator(right: Object) -> Object:
  return FALSE if is_truthy(right) else TRUE


def eval_minus_operator(right: Object) -> Object:
  if isinstance(right, Integer):
    return Integer(check_i64(-right.value, "-"))
  if isinstance(right, Complex):
    return Complex(check_i64(-right.re, "-"), check_i64(-right.im, "-"))
  raise UnknownPrefix("-", type_name(right))


# ============================================================================
# INFIX OPERATORS
# ============================================================================

def eval_infix_expression(operator: TokenType, left: Object, right: Object) -> Object:
  """Numeric pairs use number rules; same-kind pairs only support == and !="""
  if to_complex(left) is not None and to_complex(right) is not None:
    return eval_numeric_infix(operator, left, right)

  if is_same_type(left, right):
    if operator == TokenType.EQ:
      return native_bool_to_boolean(left == right)
    if operator == TokenType.NOTEQ:
      return native_bool_to_boolean(left != right)
    raise UnknownInfix(type_name(left), operator.value, type_name(right))

  raise TypeMismatch(type_name(left), operator.value, type_name(right))


def eval_numeric_infix(operator: TokenType, left: Object, right: Object) -> Object:
  left_re, left_im = to_complex(left)
  right_re, right_im = to_complex(right)

  if left_im == 0 and right_im == 0:
    return eval_integer_infix(operator, left_re, right_re)

  result = eval_complex_infix(operator, left_re, left_im, right_re, right_im)
  if result is None:
    raise UnknownInfix(type_name(left), operator.value, type_name(right))
  return result


def truncating_div(left: int, right: int) -> int:
  """Integer division rounding toward zero"""
  quotient = abs(left) // abs(right)
  return quotient if (left < 0) == (right < 0) else -quotient


def integer_pow(base: int, exponent: int) -> int:
  if exponent < 0:
    raise PowErr(exponent)
  # |base| >= 2 overflows i64 well before exponent 64
  if abs(base) >= 2 and exponent >= 64:
    raise IntegerOverflow("^")
  return check_i64(base ** exponent, "^")


def eval_integer_infix(operator: TokenType, left: int, right: int) -> Object:
  if operator == TokenType.PLUS:
    return Integer(check_i64(left + right, "+"))
  elif operator == TokenType.MINUS:
    return Integer(check_i64(left - right, "-"))
  elif operator == TokenType.ASTERISK:
    return Integer(check_i64(left * right, "*"))
  elif operator == TokenType.SLASH:
    if right == 0:
      raise DivisionByZero()
    return Integer(check_i64(truncating_div(left, right), "/"))
  elif operator == TokenType.POWER:
    return Integer(integer_pow(left, right))
  elif operator == TokenType.LT:
    return native_bool_to_boolean(left < right)
  elif operator == TokenType.GT:
    return native_bool_to_boolean(left > right)
  elif operator == TokenType.EQ:
    return native_bool_to_boolean(left == right)
  elif operator == TokenType.NOTEQ:
    return native_bool_to_boolean(left != right)
  raise UnknownInfix("INTEGER", operator.value, "INTEGER")


def eval_complex_infix(operator: TokenType, left_re: int, left_im: int,
                       right_re: int, right_im: int) -> Optional[Object]:
  """None for operators complex numbers do not support (/ ^ < >)"""
  if operator == TokenType.PLUS:
    return Complex(check_i64(left_re + right_re, "+"), check_i64(left_im + right_im, "+"))
  elif operator == TokenType.MINUS:
    return Complex(check_i64(left_re - right_re, "-"), check_i64(left_im - right_im, "-"))
  elif operator == TokenType.ASTERISK:
    return Complex(
        check_i64(left_re * right_re - left_im * right_im, "*"),
        check_i64(left_re * right_im + left_im * right_re, "*"),
    )
  elif operator == TokenType.EQ:
    return native_bool_to_boolean(left_re == right_re and left_im == right_im)
  elif operator == TokenType.NOTEQ:
    return native_bool_to_boolean(left_re != right_re or left_im != right_im)
  return None


# ============================================================================
# EVALUATION STACK
# ============================================================================

# Every user-level call costs roughly ten Python frames
RECURSION_LIMIT = 100_000
EVAL_STACK_SIZE = 256 * 1024 * 1024


def run_with_deep_stack(func: Callable[..., Object], *args) -> Object:
  """
  Run func on a worker thread with a large stack and a raised recursion
  limit, re-raising whatever it raised in the calling thread
  """
  outcome = {}

  def target():
    try:
      outcome['value'] = func(*args)
    except BaseException as e:
      outcome['error'] = e

  old_limit = sys.getrecursionlimit()
  old_stack_size = threading.stack_size(EVAL_STACK_SIZE)
  sys.setrecursionlimit(max(old_limit, RECURSION_LIMIT))
  try:
    worker = threading.Thread(target=target, name="marmoset-eval")
    worker.start()
    worker.join()
  finally:
    threading.stack_size(old_stack_size)
    sys.setrecursionlimit(old_limit)

  if 'error' in outcome:
    raise outcome['error']
  return outcome['value']


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

class MarmosetInterpreter:
  """Parser front end plus a global environment that persists across runs"""

  def __init__(self, debug: bool = False):
    self.debug = debug
    self.parser = create_parser(debug)
    self.global_env = Environment()

  def run(self, source: str, filename: str = "<input>") -> Object:
    """Parse and evaluate source against the global environment"""
    return self.eval_program(self.parser.parse_string(source, filename))

  def run_file(self, filepath: str) -> Object:
    return self.eval_program(self.parser.parse_file(filepath))

  def eval_program(self, program: Sequence[st.Statement]) -> Object:
    return run_with_deep_stack(eval_program, program, self.global_env, self.debug)


def create_interpreter(debug: bool = False) -> MarmosetInterpreter:
  """Factory function returning an interpreter"""
  return MarmosetInterpreter(debug=debug)


def create_debug_interpreter() -> MarmosetInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)


def evaluate(source: str, env: Optional[Environment] = None) -> Object:
  """Parse and evaluate source in one step, in a fresh environment by default"""
  program = create_parser().parse_string(source)
  return run_with_deep_stack(eval_program, program, env if env is not None else Environment())
