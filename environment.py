"""
Marmoset Environment
Chained scope frames; closures keep their defining frame alive by reference
"""

from typing import Dict, Iterator, Optional

from objects import Object, DECLARE_VARIABLE


class Environment:
  """One scope layer plus an optional enclosing layer"""

  def __init__(self, outer: Optional['Environment'] = None):
    self.store: Dict[str, Object] = {}
    self.outer = outer

  @classmethod
  def new_enclosed(cls, outer: 'Environment') -> 'Environment':
    """Child environment that reads through to outer"""
    return cls(outer)

  def set(self, name: str, value: Object) -> Object:
    """Bind name in this layer only; the statement result is DeclareVariable"""
    self.store[name] = value
    return DECLARE_VARIABLE

  def get(self, name: str) -> Optional[Object]:
    """Look up name here, then outward through enclosing layers"""
    env = self
    while env is not None:
      if name in env.store:
        return env.store[name]
      env = env.outer
    return None

  def __contains__(self, name: str) -> bool:
    return self.get(name) is not None

  def bindings(self) -> Iterator[str]:
    """Names bound in this layer"""
    return iter(self.store)

  def __repr__(self) -> str:
    return f"<Environment {sorted(self.store)} outer={'yes' if self.outer else 'no'}>"
