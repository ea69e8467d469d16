"""Tests for board generator."""

import random
from collections import Counter

import pytest
from pydantic import ValidationError

from mathmatch.game.evaluator import equivalent, evaluate
from mathmatch.game.generator import (
    BoardGenerator,
    PreferenceError,
    check_custom_expression,
    generate,
    make_filler_expression,
)
from mathmatch.models.card import CardState
from mathmatch.models.preferences import Difficulty, Preferences


def no_shuffle(values: list[str]) -> None:
    """Keep generation order."""


def assert_one_partner(face_values: list[str]) -> None:
    """Every card has exactly one other card of equal value."""
    for i, value in enumerate(face_values):
        partners = [
            j for j, other in enumerate(face_values)
            if j != i and equivalent(value, other)
        ]
        assert len(partners) == 1, f"{value!r} has partners {partners}"


class TestGenerate:
    """Tests for BoardGenerator.generate()."""

    def test_example_board(self):
        """Test the two-pair board with one custom expression."""
        board = generate({"totalPairs": "2", "customExpressions": ["3+1"]}, seed=1)

        values = board.face_values()
        assert len(board) == 4
        assert "3+1" in values
        assert "4" in values
        fillers = [v for v in values if v not in ("3+1", "4")]
        assert len(fillers) == 2
        assert equivalent(fillers[0], fillers[1])
        assert not equivalent(fillers[0], "4")

    def test_custom_pair_order_without_shuffle(self):
        """Test that each custom expression is followed by its result."""
        board = generate(
            Preferences(total_pairs=3, custom_expressions=["2 × 3", "10 / 4", "10 / 3"]),
            shuffle=no_shuffle,
        )
        assert board.face_values() == ["2 × 3", "6", "10 / 4", "2.5", "10 / 3", "10/3"]

    @pytest.mark.parametrize("pairs", [1, 2, 5, 8, 20])
    def test_board_size(self, pairs):
        """Test that the board has 2 x pairs cards."""
        board = generate(Preferences(total_pairs=pairs), seed=pairs)
        assert len(board) == 2 * pairs
        assert board.pair_count == pairs

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_one_partner_invariant(self, difficulty):
        """Test that every value has exactly one partner."""
        for seed in range(10):
            board = generate(
                Preferences(total_pairs=8, custom_expressions=["7 + 5", "1,5 × 2"],
                            difficulty=difficulty),
                seed=seed,
            )
            assert_one_partner(board.face_values())

    def test_filler_overflows_max_result(self):
        """Test that fillers stay unique when max_result is too small."""
        board = generate(Preferences(total_pairs=6, max_result=3), seed=4)
        assert_one_partner(board.face_values())

    def test_fillers_avoid_custom_results(self):
        """Test that fillers never reuse a custom result."""
        customs = ["1", "1 + 1", "6 / 2"]
        board = generate(
            Preferences(total_pairs=4, custom_expressions=customs, max_result=4),
            shuffle=no_shuffle,
        )
        assert board.face_values()[-1] == "4"
        assert_one_partner(board.face_values())

    def test_default_pairs(self):
        """Test that 0 or missing pairs fall back to 2."""
        assert len(generate({"totalPairs": 0})) == 4
        assert len(generate({"totalPairs": ""})) == 4
        assert len(generate({})) == 4

    def test_seed_is_deterministic(self):
        """Test that the same seed yields the same board."""
        prefs = Preferences(total_pairs=6, difficulty=Difficulty.IMPOSSIBLE)
        assert generate(prefs, seed=42).face_values() == generate(prefs, seed=42).face_values()

    def test_injected_shuffle(self):
        """Test that an injected shuffle decides positions."""
        board = generate(
            Preferences(total_pairs=1, custom_expressions=["2+2"]),
            shuffle=lambda values: values.reverse(),
        )
        assert board.face_values() == ["4", "2+2"]

    def test_cards_start_hidden(self):
        """Test that all cards start face down with sequential ids."""
        board = generate(Preferences(total_pairs=3), seed=0)
        assert [c.card_id for c in board] == list(range(6))
        assert all(c.state == CardState.HIDDEN for c in board)


class TestPreferenceErrors:
    """Tests for rejected preferences."""

    @pytest.mark.parametrize("raw", ["5/0", "2 +", "1 - 1", "1/2", "abc"])
    def test_invalid_custom_expression(self, raw):
        """Test that unusable custom expressions block generation."""
        with pytest.raises(PreferenceError):
            generate(Preferences(total_pairs=2, custom_expressions=[raw]))

    def test_division_by_zero_message(self):
        """Test the division-by-zero diagnostic."""
        with pytest.raises(PreferenceError, match="divide by 0"):
            check_custom_expression("5/0")

    def test_oversized_result_message(self):
        """Test that a custom expression with a huge result is rejected."""
        with pytest.raises(PreferenceError, match="too large"):
            generate(Preferences(
                total_pairs=2,
                custom_expressions=["(10**64)**64 * (10**64)**5"],
            ))

    def test_less_than_one_message(self):
        """Test the less-than-one diagnostic."""
        with pytest.raises(PreferenceError, match="less than 1"):
            check_custom_expression("0,5")

    def test_duplicate_results(self):
        """Test that two customs with the same result are rejected."""
        with pytest.raises(PreferenceError, match="same result"):
            generate(Preferences(total_pairs=3, custom_expressions=["2+2", "8/2"]))

    def test_too_many_customs(self):
        """Test that customs beyond total_pairs are rejected."""
        with pytest.raises(PreferenceError):
            generate(Preferences(total_pairs=1, custom_expressions=["1+1", "1+2"]))

    def test_negative_pairs(self):
        """Test that a negative pair count fails validation."""
        with pytest.raises(ValidationError):
            Preferences(total_pairs=-1)


class TestFiller:
    """Tests for filler expressions."""

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_filler_evaluates_to_result(self, difficulty):
        """Test that filler expressions evaluate to their result."""
        rng = random.Random(7)
        for result in range(1, 40):
            expression = make_filler_expression(result, difficulty, rng)
            assert evaluate(expression).value == result

    def test_easy_uses_addition(self):
        """Test that easy fillers only add."""
        rng = random.Random(3)
        expressions = [make_filler_expression(n, Difficulty.EASY, rng) for n in range(1, 30)]
        assert all("+" in e for e in expressions)

    def test_impossible_uses_several_operators(self):
        """Test that harder difficulties mix operators."""
        rng = random.Random(3)
        ops = Counter()
        for n in range(2, 80):
            expression = make_filler_expression(n, Difficulty.IMPOSSIBLE, rng)
            ops.update(ch for ch in expression if ch in "+-×÷")
        assert len(ops) >= 3

    def test_generator_reuses_rng(self):
        """Test that one generator produces different boards over time."""
        generator = BoardGenerator(seed=5)
        boards = {tuple(generator.generate({"totalPairs": 8}).face_values()) for _ in range(5)}
        assert len(boards) > 1
