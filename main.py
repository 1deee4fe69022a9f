"""
Marmoset Programming Language - Main Entry Point
Runs scripts, dumps tokens or the AST, or starts an interactive session
"""

import sys
import os
import argparse
from pathlib import Path

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import create_parser, pretty_print_ast
from interpreter import create_interpreter
from objects import DeclareVariable, inspect
from stdlib import BUILTIN_FUNCTIONS, list_builtin_functions
from error_handling import MarmosetLexError, MarmosetParseError, MarmosetRuntimeError


VERSION = "Marmoset v0.1.0"
HISTORY_FILE = "~/.marmoset_history"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='marmoset',
      description='Marmoset - a small expression language with closures and complex numbers',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.mmt             # Run a script
  %(prog)s -i                     # Interactive mode
  %(prog)s --tokens script.mmt    # Show the token stream
  %(prog)s --parse script.mmt     # Parse and show the AST
  %(prog)s --debug script.mmt     # Run with debug output
        """
  )

  parser.add_argument('script', nargs='?', help='Marmoset script file to execute')
  parser.add_argument('-i', '--interactive', action='store_true', help='Start interactive mode')
  parser.add_argument('--tokens', action='store_true', help='Tokenize file and show tokens')
  parser.add_argument('--parse', action='store_true', help='Parse file and show AST')
  parser.add_argument('--debug', action='store_true', help='Enable debug output for all stages')
  parser.add_argument('--version', action='version', version=VERSION)

  return parser


def format_result(value) -> str:
  """Render an evaluation result for display; let statements show nothing"""
  if isinstance(value, DeclareVariable):
    return ""
  return inspect(value)


def read_source(script_path: str) -> str:
  try:
    return Path(script_path).read_text(encoding='utf-8')
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
    sys.exit(1)


def tokenize_file(script_path: str, debug: bool = False) -> None:
  """Tokenize a script and print one token per line"""
  source = read_source(script_path)
  try:
    for token in create_parser(debug).tokenize(source, script_path):
      print(f"{token.span.start_line}:{token.span.start_col}\t{token}")
  except MarmosetLexError as e:
    print(f"Lex error in '{script_path}':\n{e}")
    sys.exit(1)


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a script and print its AST"""
  source = read_source(script_path)
  try:
    program = create_parser(debug).parse_string(source, script_path)
  except (MarmosetLexError, MarmosetParseError) as e:
    print(f"Parse error in '{script_path}':\n{e}")
    sys.exit(1)

  print(f"Parsed {len(program)} statements:")
  print("=" * 50)
  print(pretty_print_ast(program), end='')


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Run a script and print the program result"""
  source = read_source(script_path)
  interpreter = create_interpreter(debug)
  try:
    result = interpreter.run(source, script_path)
  except (MarmosetLexError, MarmosetParseError) as e:
    print(f"Parse error in '{script_path}':\n{e}")
    sys.exit(1)
  except MarmosetRuntimeError as e:
    print(f"Runtime error in '{script_path}': {e.message}")
    sys.exit(1)
  except RecursionError:
    print(f"Runtime error in '{script_path}': maximum recursion depth exceeded")
    sys.exit(1)
  except Exception as e:
    print(f"Unexpected error while running '{script_path}': {e}")
    if debug:
      import traceback
      traceback.print_exc()
    sys.exit(1)

  rendered = format_result(result)
  if rendered:
    print(rendered)


def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet

  readline.set_history_length(1000)

  completions = ["let", "fn", "if", "else", "return", "true", "false",
                 ":tokens", ":parse", ":env", ":help", "exit"]
  completions += list_builtin_functions()

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def print_help() -> None:
  print("REPL Commands:")
  print("  :tokens <code>    - Show tokens")
  print("  :parse <code>     - Show parsed AST")
  print("  :env              - Show global bindings")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language features:")
  print("  let x = 5;                       - Binding")
  print("  let add = fn(a, b) { a + b };    - Function")
  print("  add(1, 2)                        - Call")
  print("  (1 + 4i) * (1 - 4i)              - Complex numbers")
  print("  push([1, 2], 3)                  - Builtin call")
  print()
  print("Builtins:")
  for entry in BUILTIN_FUNCTIONS.values():
    print(f"  {entry['name']:<8} :: {entry['type_signature']}")


def run_interactive_mode(debug: bool = False) -> None:
  """Run an interactive session sharing one global environment"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()
  interpreter = create_interpreter(debug)

  while True:
    try:
      code = input("mmt> ")
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    stripped = code.strip()
    if stripped == "exit":
      break
    if not stripped:
      continue

    if stripped == ":help":
      print_help()
      continue

    if stripped == ":env":
      names = sorted(interpreter.global_env.bindings())
      if not names:
        print("  (no bindings)")
      for name in names:
        print(f"  {name} = {inspect(interpreter.global_env.get(name))}")
      continue

    try:
      if stripped.startswith(":tokens "):
        for token in interpreter.parser.tokenize(stripped[len(":tokens "):]):
          print(f"  {token}")
      elif stripped.startswith(":parse "):
        print(pretty_print_ast(interpreter.parser.parse_string(stripped[len(":parse "):])), end='')
      else:
        rendered = format_result(interpreter.run(code, "<repl>"))
        if rendered:
          print(rendered)
    except (MarmosetLexError, MarmosetParseError) as e:
      print(e)
    except MarmosetRuntimeError as e:
      print(f"Runtime error: {e.message}")
    except RecursionError:
      print("Runtime error: maximum recursion depth exceeded")


def main() -> None:
  """Main entry point for Marmoset"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.tokens:
      tokenize_file(args.script, debug=args.debug)
    elif args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug)

  elif args.interactive or len(sys.argv) == 1:
    run_interactive_mode(debug=args.debug)

  else:
    arg_parser.print_help()


if __name__ == "__main__":
  main()
