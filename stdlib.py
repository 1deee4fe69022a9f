"""
Marmoset Standard Library
Fixed set of builtin functions callable from user code
"""

from typing import Dict, List, Optional

from error_handling import EvalErr
from objects import Object, Integer, String, Array, BuiltIn, NULL
from utilities import builtin, require_array, unsupported_argument_error


# ============================================================================
# LIST FUNCTIONS
# ============================================================================

@builtin("len", 1)
def marmoset_len(value: Object) -> Object:
  """Length of a string (UTF-8 bytes) or an array (elements)"""
  if isinstance(value, String):
    return Integer(len(value.value.encode("utf-8")))
  if isinstance(value, Array):
    return Integer(len(value.elements))
  raise unsupported_argument_error("len", value)


@builtin("first", 1)
def marmoset_first(value: Object) -> Object:
  """First element of an array, null when empty"""
  array = require_array("first", value)
  if not array.elements:
    return NULL
  return array.elements[0]


@builtin("last", 1)
def marmoset_last(value: Object) -> Object:
  """Last element of an array, null when empty"""
  array = require_array("last", value)
  if not array.elements:
    return NULL
  return array.elements[-1]


@builtin("rest", 1)
def marmoset_rest(value: Object) -> Object:
  """New array of everything after the first element, null when empty"""
  array = require_array("rest", value)
  if not array.elements:
    return NULL
  return Array(array.elements[1:])


@builtin("push", 2)
def marmoset_push(value: Object, item: Object) -> Object:
  """New array with item appended; the argument array is left unchanged"""
  array = require_array("push", value)
  return Array(array.elements + (item,))


# ============================================================================
# BUILT-IN FUNCTION REGISTRY
# ============================================================================

def make_builtin_function(name: str, func, type_signature: str = "") -> Dict:
  """Create a built-in function entry"""
  return {
      'name': name,
      'func': func,
      'arity': func.arity,
      'type_signature': type_signature
  }


BUILTIN_FUNCTIONS: Dict[str, Dict] = {
    "len": make_builtin_function("len", marmoset_len, "String | Array -> Integer"),
    "first": make_builtin_function("first", marmoset_first, "Array -> a"),
    "last": make_builtin_function("last", marmoset_last, "Array -> a"),
    "rest": make_builtin_function("rest", marmoset_rest, "Array -> Array"),
    "push": make_builtin_function("push", marmoset_push, "Array -> a -> Array"),
}


def lookup_builtin(name: str) -> Optional[BuiltIn]:
  """BuiltIn tag object for name, or None if name is not a builtin"""
  if name in BUILTIN_FUNCTIONS:
    return BuiltIn(name)
  return None


def call_builtin(tag: BuiltIn, args: List[Object]) -> Object:
  """Dispatch a call to the native implementation behind tag"""
  entry = BUILTIN_FUNCTIONS.get(tag.tag)
  if entry is None:
    raise EvalErr(f"unknown builtin function: {tag.tag}")
  return entry['func'](args)


def list_builtin_functions() -> List[str]:
  """List all available built-in functions"""
  return list(BUILTIN_FUNCTIONS.keys())
