"""Card and Board models."""

from enum import Enum
from typing import Iterator

from pydantic import BaseModel


class CardState(str, Enum):
    """Per-card flip state."""

    HIDDEN = "hidden"
    REVEALED = "revealed"
    LOCKED_OPEN = "locked-open"  # Face up after a mismatch, waiting to be reset
    MATCHED = "matched"


class InvalidFlipRequest(LookupError):
    """Raised when a card id does not exist on the board."""


class Card(BaseModel):
    """Single card on the board.

    `card_id` and `face_value` are fixed when the board is generated;
    `state`, `highlighted` and `reveal_token` change during play.
    """

    card_id: int
    face_value: str
    state: CardState = CardState.HIDDEN
    highlighted: bool = False
    reveal_token: int = 0  # Incremented on every reveal

    @property
    def is_hidden(self) -> bool:
        """Check if the card is face down."""
        return self.state == CardState.HIDDEN

    @property
    def is_matched(self) -> bool:
        """Check if the card has been permanently resolved."""
        return self.state == CardState.MATCHED

    def reveal(self, highlight: bool = False) -> int:
        """Turn the card face up.

        Args:
            highlight: Whether to set the cosmetic highlight flag.

        Returns:
            The new reveal token.
        """
        self.state = CardState.REVEALED
        self.highlighted = highlight
        self.reveal_token += 1
        return self.reveal_token

    def hide(self) -> None:
        """Turn the card face down."""
        self.state = CardState.HIDDEN
        self.highlighted = False

    def __str__(self) -> str:
        if self.state == CardState.HIDDEN:
            return f"#{self.card_id}[?]"
        return f"#{self.card_id}[{self.face_value}]"


class Board:
    """Ordered sequence of cards addressed by position index.

    The structure (card identities and positions) never changes after
    construction; only card state does.
    """

    def __init__(self, face_values: list[str]):
        """Initialize board.

        Args:
            face_values: Card face values in board order.
        """
        if len(face_values) < 2 or len(face_values) % 2:
            raise ValueError("board needs an even number of cards, at least 2")
        self._cards = [
            Card(card_id=i, face_value=value) for i, value in enumerate(face_values)
        ]

    def get(self, card_id: int) -> Card:
        """Get a card by id.

        Raises:
            InvalidFlipRequest: If no card has that id.
        """
        if not isinstance(card_id, int) or not 0 <= card_id < len(self._cards):
            raise InvalidFlipRequest(f"Unknown card id: {card_id!r}")
        return self._cards[card_id]

    def face_values(self) -> list[str]:
        """Get all face values in board order."""
        return [c.face_value for c in self._cards]

    def states(self) -> list[CardState]:
        """Get all card states in board order."""
        return [c.state for c in self._cards]

    def matched_count(self) -> int:
        """Count matched cards."""
        return sum(1 for c in self._cards if c.is_matched)

    @property
    def pair_count(self) -> int:
        """Number of pairs on the board."""
        return len(self._cards) // 2

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __getitem__(self, card_id: int) -> Card:
        return self.get(card_id)

    def __str__(self) -> str:
        return " ".join(str(c) for c in self._cards)

    def __repr__(self) -> str:
        return f"Board({self.face_values()!r})"
