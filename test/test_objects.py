"""
Object model tests for Marmoset
"""

import pytest
from objects import (
    Integer, Complex, Boolean, Null, String, Array, BuiltIn, ReturnValue, Function,
    TRUE, FALSE, NULL, DECLARE_VARIABLE,
    type_name, to_complex, is_same_type, is_truthy, check_i64, inspect, I64_MAX, I64_MIN
)
from error_handling import IntegerOverflow


class TestHelpers:
  """Test numeric conversion and type helpers"""

  def test_to_complex(self):
    assert to_complex(Integer(3)) == (3, 0)
    assert to_complex(Complex(1, -2)) == (1, -2)
    assert to_complex(TRUE) is None
    assert to_complex(String("1")) is None

  def test_type_names(self):
    assert type_name(Integer(1)) == "INTEGER"
    assert type_name(Complex(0, 1)) == "COMPLEX"
    assert type_name(NULL) == "NULL"
    assert type_name(Array()) == "ARRAY"
    assert type_name(BuiltIn("len")) == "BUILTIN"
    assert type_name(DECLARE_VARIABLE) == "DECLARE"

  def test_same_type(self):
    assert is_same_type(TRUE, FALSE)
    assert not is_same_type(Integer(1), Complex(1, 0))

  def test_truthiness(self):
    assert not is_truthy(NULL)
    assert not is_truthy(FALSE)
    assert is_truthy(TRUE)
    assert is_truthy(Integer(0))
    assert is_truthy(String(""))

  def test_canonical_values_compare_by_value(self):
    assert Boolean(True) == TRUE
    assert Null() == NULL

  def test_check_i64(self):
    assert check_i64(I64_MAX, "+") == I64_MAX
    assert check_i64(I64_MIN, "-") == I64_MIN
    with pytest.raises(IntegerOverflow):
      check_i64(I64_MAX + 1, "+")


class TestInspect:
  """Test value rendering"""

  @pytest.mark.parametrize("value, text", [
      (Integer(-5), "-5"),
      (Complex(0, 4), "4i"),
      (Complex(3, -4), "3-4i"),
      (Complex(17, 0), "17+0i"),
      (TRUE, "true"),
      (NULL, "null"),
      (String("hi"), '"hi"'),
      (Array((Integer(1), Array((TRUE,)))), "[1, [true]]"),
      (BuiltIn("push"), "builtin push"),
      (ReturnValue(Integer(2)), "2"),
  ])
  def test_inspect(self, value, text):
    assert inspect(value) == text

  def test_inspect_function(self, env):
    assert inspect(Function(("x", "y"), (), env)) == "fn(x, y) {...}"
