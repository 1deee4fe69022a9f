"""
Utilities module for the Marmoset interpreter
Contains common helper functions shared by the evaluator and the builtins
"""

from typing import Callable, List, Sequence

from error_handling import EvalErr
from objects import Object, Array, type_name


# ==================== ERROR MESSAGE BUILDERS ====================

def arity_error(func_name: str, expected: int, got: int) -> EvalErr:
  """
  Generate builtin arity error

  Args:
    func_name: Builtin name
    expected: Expected number of arguments
    got: Actual number of arguments

  Returns:
    EvalErr with formatted message
  """
  return EvalErr(
    f"wrong number of arguments to `{func_name}`: want={expected}, got={got}"
  )


def unsupported_argument_error(func_name: str, actual: Object) -> EvalErr:
  """
  Generate error for an argument kind a builtin does not support

  Args:
    func_name: Builtin name
    actual: Offending argument value

  Returns:
    EvalErr naming the unsupported type
  """
  return EvalErr(
    f"argument to `{func_name}` not supported, got {type_name(actual)}"
  )


def array_required_error(func_name: str, actual: Object) -> EvalErr:
  """
  Generate error for a builtin that only accepts arrays

  Args:
    func_name: Builtin name
    actual: Offending argument value

  Returns:
    EvalErr naming the received type
  """
  return EvalErr(
    f"argument to `{func_name}` must be ARRAY, got {type_name(actual)}"
  )


# ==================== VALIDATION UTILITIES ====================

def validate_arg_count(func_name: str, args: Sequence[Object], expected: int) -> None:
  """
  Check a builtin received exactly the expected number of arguments

  Raises:
    EvalErr if the count differs
  """
  if len(args) != expected:
    raise arity_error(func_name, expected, len(args))


def require_array(func_name: str, value: Object) -> Array:
  """
  Return value as an Array or fail with a descriptive error

  Raises:
    EvalErr if value is not an Array
  """
  if not isinstance(value, Array):
    raise array_required_error(func_name, value)
  return value


def builtin(func_name: str, arity: int) -> Callable[[Callable], Callable]:
  """
  Decorator validating exact arity before a builtin body runs

  Examples:
    @builtin("first", 1)
    def marmoset_first(arr): ...
  """
  def decorate(func: Callable) -> Callable:
    def checked(args: List[Object]) -> Object:
      validate_arg_count(func_name, args, arity)
      return func(*args)
    checked.__name__ = func.__name__
    checked.__doc__ = func.__doc__
    checked.arity = arity
    return checked
  return decorate
