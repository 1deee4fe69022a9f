"""
Error handling for the Marmoset tokenizer, parser and evaluator
Parse errors are plain descriptor dicts; runtime errors are exceptions
"""

from typing import List, Optional, Dict
from pyparsing import ParseException


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"Parse error at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
        return "end of line"
    return "end of input"


def generate_suggestions(got: str, expected: List[str]) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if "'='" in expected:
        suggestions.append("let bindings are written as: let name = value;")

    if "')'" in expected or "'}'" in expected:
        suggestions.append("Check for an unbalanced parenthesis or brace")

    if "identifier" in expected:
        suggestions.append("Names must start with a letter or underscore")

    # got is quoted, so a stray single quote shows up doubled
    if got.startswith("''"):
        suggestions.append("Strings are written with double quotes")

    return suggestions


def enhance_parse_exception_dict(exc: ParseException, source_text: str) -> Dict:
    """Convert a pyparsing exception raised while tokenizing into an error dict"""
    line_num = exc.lineno
    col_num = exc.column
    got = extract_got(source_text, line_num, col_num)

    return make_parse_error(
        message=f"Unrecognised input {got}",
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=["token"],
        got=got,
        context=get_context_lines(source_text, line_num, col_num),
        suggestions=generate_suggestions(got, ["token"])
    )


# ============================================================================
# PARSE-TIME EXCEPTIONS
# ============================================================================

class MarmosetLexError(Exception):
    """Raised when the tokenizer meets input it cannot split into tokens"""
    def __init__(self, error: Dict):
        self.error = error
        self.line = error['line']
        self.column = error['column']
        super().__init__(error['message'])

    def __str__(self) -> str:
        return format_parse_error(self.error)


class MarmosetParseError(Exception):
    """Raised once parsing finishes with one or more collected errors"""
    def __init__(self, errors: List[Dict]):
        self.errors = list(errors)
        summary = self.errors[0]['message'] if self.errors else "parse failed"
        super().__init__(summary)

    def __str__(self) -> str:
        header = f"{len(self.errors)} parse error(s)\n"
        return header + "\n".join(format_parse_error(e) for e in self.errors)


# ============================================================================
# RUNTIME EXCEPTIONS
# ============================================================================

class MarmosetRuntimeError(Exception):
    """Base class of every evaluation failure"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class IdentNotFound(MarmosetRuntimeError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"identifier not found: {name}")


class UnknownPrefix(MarmosetRuntimeError):
    def __init__(self, operator: str, operand_type: str):
        self.operator = operator
        self.operand_type = operand_type
        super().__init__(f"unknown operator: {operator}{operand_type}")


class UnknownInfix(MarmosetRuntimeError):
    def __init__(self, left_type: str, operator: str, right_type: str):
        self.left_type = left_type
        self.operator = operator
        self.right_type = right_type
        super().__init__(f"unknown operator: {left_type} {operator} {right_type}")


class TypeMismatch(MarmosetRuntimeError):
    def __init__(self, left_type: str, operator: str, right_type: str):
        self.left_type = left_type
        self.operator = operator
        self.right_type = right_type
        super().__init__(f"type mismatch: {left_type} {operator} {right_type}")


class NotFunction(MarmosetRuntimeError):
    def __init__(self, value_type: str):
        self.value_type = value_type
        super().__init__(f"not a function: {value_type}")


class PowErr(MarmosetRuntimeError):
    def __init__(self, exponent: int):
        self.exponent = exponent
        super().__init__(f"exponent must be non-negative, got {exponent}")


class EvalErr(MarmosetRuntimeError):
    """Builtin argument failures (arity and type)"""
    pass


class ArityMismatch(MarmosetRuntimeError):
    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"wrong number of arguments: want={expected}, got={got}")


class DivisionByZero(MarmosetRuntimeError):
    def __init__(self):
        super().__init__("division by zero")


class IntegerOverflow(MarmosetRuntimeError):
    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"integer overflow in '{operator}'")
