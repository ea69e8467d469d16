"""Board generation."""

from __future__ import annotations

import logging
import random
from fractions import Fraction
from typing import Any, Callable, Mapping

from mathmatch.models.card import Board
from mathmatch.models.preferences import Difficulty, Preferences

from .evaluator import EvaluationError, evaluate, format_value

logger = logging.getLogger(__name__)

# Operators the filler policy may use at each difficulty
FILLER_OPERATORS: dict[Difficulty, str] = {
    Difficulty.EASY: "+",
    Difficulty.MEDIUM: "+-",
    Difficulty.HARD: "+-*",
    Difficulty.IMPOSSIBLE: "+-*/",
}

ShuffleFunc = Callable[[list[str]], None]


class PreferenceError(ValueError):
    """Preferences that cannot produce a valid board."""


def check_custom_expression(raw: str) -> Fraction:
    """Validate a custom expression and return its value.

    Raises:
        PreferenceError: If the expression does not parse, divides by zero,
            or evaluates to less than 1.
    """
    result = evaluate(raw)
    if isinstance(result, EvaluationError):
        raise PreferenceError(result.message)
    if result.is_infinite:
        raise PreferenceError(f"Custom expression '{raw}' cannot divide by 0.")
    if result.value < 1:
        raise PreferenceError(f"Custom expression '{raw}' has a result less than 1.")
    return result.value


def make_filler_expression(result: int, difficulty: Difficulty, rng: random.Random) -> str:
    """Build a simple expression that evaluates to `result`.

    Args:
        result: Positive integer the expression must evaluate to.
        difficulty: Selects the operators that may be used.
        rng: Random source.

    Returns:
        Expression text using display glyphs (e.g. "3 × 4").
    """
    op = rng.choice(FILLER_OPERATORS[difficulty])

    if op == "-":
        b = rng.randint(1, 9)
        return f"{result + b} - {b}"
    if op == "*":
        divisors = [d for d in range(2, result) if result % d == 0]
        if divisors:
            d = rng.choice(divisors)
            return f"{d} × {result // d}"
        return f"1 × {result}"
    if op == "/":
        b = rng.randint(2, 9)
        return f"{result * b} ÷ {b}"

    a = rng.randint(1, result - 1) if result > 1 else 0
    return f"{a} + {result - a}"


class BoardGenerator:
    """Builds shuffled boards from preferences."""

    def __init__(
        self,
        rng: random.Random | None = None,
        shuffle: ShuffleFunc | None = None,
        seed: int | None = None,
    ):
        """Initialize generator.

        Args:
            rng: Random source (a new one is created if not provided)
            shuffle: In-place shuffle replacing `rng.shuffle`, for tests
            seed: Seed for the random source when `rng` is not given
        """
        self.rng = rng or random.Random(seed)
        self._shuffle = shuffle

    def generate(self, preferences: Preferences | Mapping[str, Any]) -> Board:
        """Generate a board.

        Raises:
            PreferenceError: If a custom expression is unusable.
        """
        if not isinstance(preferences, Preferences):
            preferences = Preferences.model_validate(preferences)

        total_pairs = preferences.total_pairs
        customs = preferences.custom_expressions
        if len(customs) > total_pairs:
            raise PreferenceError(
                f"{len(customs)} custom expressions given for {total_pairs} pairs"
            )

        values: list[str] = []
        used: set[Fraction] = set()

        for raw in customs:
            result = check_custom_expression(raw)
            if result in used:
                raise PreferenceError(
                    f"Custom expression '{raw}' has the same result as another expression."
                )
            used.add(result)
            values.extend([raw, format_value(result)])

        for _ in range(total_pairs - len(customs)):
            result = self._pick_filler_result(used, preferences.max_result)
            used.add(Fraction(result))
            expression = make_filler_expression(result, preferences.difficulty, self.rng)
            values.extend([expression, str(result)])

        if self._shuffle:
            self._shuffle(values)
        else:
            self.rng.shuffle(values)

        logger.debug(f"Generated board with {total_pairs} pairs ({len(customs)} custom)")
        return Board(values)

    def _pick_filler_result(self, used: set[Fraction], max_result: int) -> int:
        candidates = [n for n in range(1, max_result + 1) if Fraction(n) not in used]
        if candidates:
            return self.rng.choice(candidates)
        # Range exhausted: take the smallest free value above it
        n = max_result + 1
        while Fraction(n) in used:
            n += 1
        return n


def generate(
    preferences: Preferences | Mapping[str, Any],
    rng: random.Random | None = None,
    shuffle: ShuffleFunc | None = None,
    seed: int | None = None,
) -> Board:
    """Generate a board with a one-off generator."""
    return BoardGenerator(rng=rng, shuffle=shuffle, seed=seed).generate(preferences)
