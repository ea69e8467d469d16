"""Expression evaluation for card face values.

Expressions are parsed with Python's `ast` module after normalizing the
display glyphs and localized decimal commas, then walked node by node with
exact `Fraction` arithmetic. Nothing is ever passed to `eval`.
"""

import ast
import math
import re
from dataclasses import dataclass
from fractions import Fraction

# Largest exponent magnitude accepted for `^` / `**`
MAX_EXPONENT = 64

# Largest numerator or denominator, in bits, of any intermediate value
MAX_BITS = 4096

ALLOWED_NODES = (
    ast.Expression, ast.BinOp, ast.UnaryOp, ast.Constant,
    ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Pow, ast.USub, ast.UAdd,
)

# Display glyphs -> evaluable operators
_GLYPHS = {
    "×": "*",
    "x": "*",
    "X": "*",
    "·": "*",
    "÷": "/",
    ":": "/",
    "−": "-",
    "–": "-",
    "—": "-",
}

# A comma between digits is a decimal separator ("2,5" -> "2.5")
_DECIMAL_COMMA_RE = re.compile(r"(?<=\d),(?=\d)")


@dataclass(frozen=True)
class NumericResult:
    """Successful evaluation.

    `value` is None for the distinguished Infinity result produced by a
    division by zero.
    """

    value: Fraction | None

    @property
    def is_infinite(self) -> bool:
        """Check if this is the Infinity result."""
        return self.value is None

    def __str__(self) -> str:
        if self.value is None:
            return "Infinity"
        return format_value(self.value)


@dataclass(frozen=True)
class EvaluationError:
    """Failed evaluation with a human-readable diagnostic."""

    message: str

    def __str__(self) -> str:
        return self.message


INFINITY = NumericResult(value=None)


class _Rejected(Exception):
    """Internal signal for a disallowed construct."""


def to_evaluable(raw: str) -> str:
    """Normalize display glyphs and decimal commas into plain arithmetic."""
    s = raw.strip()
    for glyph, op in _GLYPHS.items():
        s = s.replace(glyph, op)
    s = _DECIMAL_COMMA_RE.sub(".", s)
    return s.replace("^", "**")


def to_display(expression: str) -> str:
    """Convert an evaluable expression to its display form (e.g. `2 × 3`)."""
    return (
        expression.replace("**", "^")
        .replace("*", "×")
        .replace("/", "÷")
    )


def evaluate(raw: str) -> NumericResult | EvaluationError:
    """Evaluate an arithmetic expression.

    Args:
        raw: Expression text, e.g. "2 + 2", "3 × 1,5" or "4".

    Returns:
        NumericResult (possibly INFINITY on division by zero), or
        EvaluationError if the text cannot be parsed.
    """
    if not isinstance(raw, str):
        return EvaluationError(f"Expression must be text, got {type(raw).__name__}")

    source = to_evaluable(raw)
    if not source:
        return EvaluationError("Expression is empty")

    try:
        tree = ast.parse(source, mode="eval")
        for node in ast.walk(tree):
            if not isinstance(node, ALLOWED_NODES):
                raise _Rejected(f"'{raw}' is not allowed: {type(node).__name__}")
        value = _walk(tree.body)
    except SyntaxError as e:
        return EvaluationError(f"Invalid expression '{raw}': {e.msg}")
    except _Rejected as e:
        return EvaluationError(str(e))
    except (RecursionError, MemoryError, ValueError):
        return EvaluationError(f"Expression '{raw}' is too complex")

    if value is None:
        return INFINITY
    return NumericResult(value=value)


def _walk(node: ast.AST) -> Fraction | None:
    """Compute a node's value. None stands for Infinity and propagates."""
    value = _compute(node)
    if value is not None and _bits(value) > MAX_BITS:
        raise _Rejected("Result is too large")
    return value


def _bits(value: Fraction) -> int:
    return max(value.numerator.bit_length(), value.denominator.bit_length())


def _compute(node: ast.AST) -> Fraction | None:
    if isinstance(node, ast.Constant):
        value = node.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise _Rejected(f"Unsupported value: {value!r}")
        if isinstance(value, float):
            if not math.isfinite(value):
                return None
            return Fraction(repr(value))
        return Fraction(value)

    if isinstance(node, ast.UnaryOp):
        operand = _walk(node.operand)
        if operand is None:
            return None
        return -operand if isinstance(node.op, ast.USub) else operand

    if isinstance(node, ast.BinOp):
        left = _walk(node.left)
        right = _walk(node.right)
        if left is None or right is None:
            return None
        if isinstance(node.op, ast.Add):
            return left + right
        if isinstance(node.op, ast.Sub):
            return left - right
        if isinstance(node.op, ast.Mult):
            return left * right
        if isinstance(node.op, ast.Div):
            if right == 0:
                return None
            return left / right
        return _power(left, right)

    raise _Rejected(f"Unsupported syntax: {type(node).__name__}")


def _power(base: Fraction, exponent: Fraction) -> Fraction | None:
    if exponent.denominator != 1:
        raise _Rejected("Exponent must be a whole number")
    if abs(exponent) > MAX_EXPONENT:
        raise _Rejected(f"Exponent must be between -{MAX_EXPONENT} and {MAX_EXPONENT}")
    if base == 0 and exponent < 0:
        return None
    # Checked before computing, the power itself could take minutes
    if abs(exponent) * _bits(base) > MAX_BITS:
        raise _Rejected("Result is too large")
    return base ** int(exponent)


def format_value(value: Fraction) -> str:
    """Format a value as result-card text.

    Integers print plainly, terminating decimals in decimal notation and any
    other rational as "n/d", so the text always evaluates back to `value`.
    """
    if value.denominator == 1:
        return str(value.numerator)

    denominator = value.denominator
    twos = fives = 0
    while denominator % 2 == 0:
        denominator //= 2
        twos += 1
    while denominator % 5 == 0:
        denominator //= 5
        fives += 1
    if denominator != 1:
        return f"{value.numerator}/{value.denominator}"

    places = max(twos, fives)
    scaled = abs(value.numerator) * 10**places // value.denominator
    digits = str(scaled).rjust(places + 1, "0")
    sign = "-" if value < 0 else ""
    return f"{sign}{digits[:-places]}.{digits[-places:]}"


def is_acceptable(result: NumericResult | EvaluationError) -> bool:
    """Check if a result may back a custom expression (finite and >= 1)."""
    return (
        isinstance(result, NumericResult)
        and not result.is_infinite
        and result.value >= 1
    )


def equivalent(a: str, b: str) -> bool:
    """Check if two face values evaluate to the same finite number."""
    first = evaluate(a)
    second = evaluate(b)
    if not isinstance(first, NumericResult) or not isinstance(second, NumericResult):
        return False
    if first.is_infinite or second.is_infinite:
        return False
    return first.value == second.value
