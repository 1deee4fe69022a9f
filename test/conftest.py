"""
Test configuration for Marmoset tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import evaluate
from environment import Environment


@pytest.fixture
def env():
  """Fresh root environment"""
  return Environment()


@pytest.fixture
def run():
  """Evaluate source text in a fresh environment and return the result"""
  def _run(source):
    return evaluate(source)
  return _run
