"""Match event logging module."""

from .event_logger import EventLogger
from .formatters import format_card, format_states

__all__ = [
    "EventLogger",
    "format_card",
    "format_states",
]
