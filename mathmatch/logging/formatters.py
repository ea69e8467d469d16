"""Formatters for event log output."""

from mathmatch.models.card import Board, Card, CardState

# State codes for compact board strings
STATE_CODES: dict[CardState, str] = {
    CardState.HIDDEN: "H",
    CardState.REVEALED: "R",
    CardState.LOCKED_OPEN: "L",
    CardState.MATCHED: "M",
}


def format_card(card: Card) -> str:
    """Format a single card to string.

    Args:
        card: Card to format.

    Returns:
        Formatted string (e.g., "3:M:2 + 2").
    """
    return f"{card.card_id}:{STATE_CODES[card.state]}:{card.face_value}"


def format_states(board: Board) -> str:
    """Format card states to a compact string (e.g., "HHMRMH")."""
    return "".join(STATE_CODES[state] for state in board.states())
