"""Player preferences for a match session."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_TOTAL_PAIRS = 2


class Difficulty(str, Enum):
    """Difficulty level, selects the operators used for filler pairs."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    IMPOSSIBLE = "impossible"


# Labels used by the Portuguese start form
DIFFICULTY_LABELS: dict[str, Difficulty] = {
    "fácil": Difficulty.EASY,
    "médio": Difficulty.MEDIUM,
    "difícil": Difficulty.HARD,
    "impossível": Difficulty.IMPOSSIBLE,
}


class Preferences(BaseModel):
    """Preferences supplied once at session start.

    Accepts both snake_case names and the camelCase keys used by the
    web start form (`totalPairs`, `flipTime`, ...). Empty strings from
    unfilled form fields fall back to the defaults.
    """

    model_config = ConfigDict(populate_by_name=True)

    total_pairs: int = Field(
        default=DEFAULT_TOTAL_PAIRS,
        ge=1,
        validation_alias=AliasChoices("total_pairs", "totalPairs"),
    )
    flip_time_seconds: float = Field(
        default=0,
        validation_alias=AliasChoices("flip_time_seconds", "flipTimeSeconds", "flipTime"),
    )
    highlight_revealed_cards: bool = Field(
        default=False,
        validation_alias=AliasChoices("highlight_revealed_cards", "highlightRevealedCards"),
    )
    custom_expressions: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("custom_expressions", "customExpressions"),
    )
    max_result: int = Field(
        default=20,
        ge=1,
        le=99,
        validation_alias=AliasChoices("max_result", "maxResult"),
    )
    difficulty: Difficulty = Difficulty.EASY

    @field_validator("total_pairs", mode="before")
    @classmethod
    def _default_pairs(cls, value: Any) -> Any:
        # 0 or unspecified means "minimum board"
        if value in (None, "", 0, "0"):
            return DEFAULT_TOTAL_PAIRS
        return value

    @field_validator("flip_time_seconds", mode="before")
    @classmethod
    def _default_flip_time(cls, value: Any) -> Any:
        if value in (None, ""):
            return 0
        return value

    @field_validator("max_result", mode="before")
    @classmethod
    def _default_max_result(cls, value: Any) -> Any:
        if value in (None, ""):
            return 20
        return value

    @field_validator("difficulty", mode="before")
    @classmethod
    def _translate_difficulty(cls, value: Any) -> Any:
        if value in (None, ""):
            return Difficulty.EASY
        if isinstance(value, str) and value.lower() in DIFFICULTY_LABELS:
            return DIFFICULTY_LABELS[value.lower()]
        return value

    @field_validator("custom_expressions", mode="before")
    @classmethod
    def _drop_blank_expressions(cls, value: Any) -> Any:
        # The form leaves a trailing "" when a row was added but not filled
        if isinstance(value, (list, tuple)):
            return [v for v in value if not (isinstance(v, str) and not v.strip())]
        return value

    @property
    def auto_hide(self) -> bool:
        """Check if revealed cards should flip back by themselves."""
        return self.flip_time_seconds > 0
