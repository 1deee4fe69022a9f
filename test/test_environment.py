"""
Environment tests for Marmoset
"""

from environment import Environment
from objects import Integer, DECLARE_VARIABLE


class TestEnvironment:
  """Test scope chaining and shadowing"""

  def test_set_returns_declare_sentinel(self, env):
    assert env.set("a", Integer(1)) == DECLARE_VARIABLE
    assert env.get("a") == Integer(1)

  def test_missing_name(self, env):
    assert env.get("missing") is None
    assert "missing" not in env

  def test_enclosed_reads_through_to_outer(self, env):
    env.set("a", Integer(1))
    inner = Environment.new_enclosed(env)
    assert inner.get("a") == Integer(1)
    assert "a" in inner

  def test_shadowing_never_touches_outer(self, env):
    env.set("a", Integer(1))
    inner = Environment.new_enclosed(env)
    inner.set("a", Integer(2))
    assert inner.get("a") == Integer(2)
    assert env.get("a") == Integer(1)

  def test_outer_never_sees_inner_bindings(self, env):
    inner = Environment.new_enclosed(env)
    inner.set("b", Integer(3))
    assert env.get("b") is None

  def test_later_outer_bindings_are_visible(self, env):
    inner = Environment.new_enclosed(env)
    env.set("late", Integer(9))
    assert inner.get("late") == Integer(9)

  def test_bindings_lists_current_layer_only(self, env):
    env.set("a", Integer(1))
    inner = Environment.new_enclosed(env)
    inner.set("b", Integer(2))
    assert list(inner.bindings()) == ["b"]
