"""
Marmoset Object Model
Runtime values are frozen dataclasses compared by value, never by identity
"""

from typing import Any, Optional, Tuple, Union
from dataclasses import dataclass, field

from error_handling import IntegerOverflow


I64_MIN = -2 ** 63
I64_MAX = 2 ** 63 - 1


# ============================================================================
# DATA STRUCTURES (Immutable Values)
# ============================================================================

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
class Null:
  pass


@dataclass(frozen=True)
class ReturnValue:
  """Carries a returned value while a block unwinds"""
  value: 'Object'


@dataclass(frozen=True)
class Function:
  """A closure: parameters and body plus the environment it was defined in"""
  params: Tuple[str, ...]
  body: Tuple[Any, ...]
  env: Any = field(repr=False, compare=True)


@dataclass(frozen=True)
class String:
  value: str


@dataclass(frozen=True)
class Array:
  elements: Tuple['Object', ...] = ()


@dataclass(frozen=True)
class BuiltIn:
  tag: str


@dataclass(frozen=True)
class DeclareVariable:
  """Result of a let statement, distinct from the bound value"""
  pass


Object = Union[
    Integer, Complex, Boolean, Null, ReturnValue, Function,
    String, Array, BuiltIn, DeclareVariable
]

TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()
DECLARE_VARIABLE = DeclareVariable()


TYPE_NAMES = {
    Integer: "INTEGER",
    Complex: "COMPLEX",
    Boolean: "BOOLEAN",
    Null: "NULL",
    ReturnValue: "RETURN_VALUE",
    Function: "FUNCTION",
    String: "STRING",
    Array: "ARRAY",
    BuiltIn: "BUILTIN",
    DeclareVariable: "DECLARE",
}


# ============================================================================
# HELPERS
# ============================================================================

def type_name(obj: Object) -> str:
  """Type name used in error messages"""
  return TYPE_NAMES[type(obj)]


def to_complex(obj: Object) -> Optional[Tuple[int, int]]:
  """(re, im) for numeric values, None for everything else"""
  if isinstance(obj, Integer):
    return obj.value, 0
  if isinstance(obj, Complex):
    return obj.re, obj.im
  return None


def is_same_type(left: Object, right: Object) -> bool:
  return type(left) is type(right)


def is_truthy(obj: Object) -> bool:
  """Null and false are falsy; everything else, zero included, is truthy"""
  return obj != NULL and obj != FALSE


def native_bool_to_boolean(value: bool) -> Boolean:
  return TRUE if value else FALSE


def check_i64(value: int, operator: str) -> int:
  """Reject integer results that fall outside the signed 64-bit range"""
  if value < I64_MIN or value > I64_MAX:
    raise IntegerOverflow(operator)
  return value


def inspect(obj: Object) -> str:
  """Render a value the way the REPL shows it"""
  if isinstance(obj, Integer):
    return str(obj.value)
  if isinstance(obj, Complex):
    if obj.re == 0:
      return f"{obj.im}i"
    sign = "-" if obj.im < 0 else "+"
    return f"{obj.re}{sign}{abs(obj.im)}i"
  if isinstance(obj, Boolean):
    return "true" if obj.value else "false"
  if isinstance(obj, Null):
    return "null"
  if isinstance(obj, ReturnValue):
    return inspect(obj.value)
  if isinstance(obj, Function):
    return f"fn({', '.join(obj.params)}) {{...}}"
  if isinstance(obj, String):
    return f'"{obj.value}"'
  if isinstance(obj, Array):
    return "[" + ", ".join(inspect(e) for e in obj.elements) + "]"
  if isinstance(obj, BuiltIn):
    return f"builtin {obj.tag}"
  if isinstance(obj, DeclareVariable):
    return ""
  raise TypeError(f"not a runtime value: {obj!r}")
