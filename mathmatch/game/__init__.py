"""Game logic."""

from .engine import MatchEngine
from .evaluator import EvaluationError, NumericResult, equivalent, evaluate
from .generator import BoardGenerator, PreferenceError, generate
from .machine import MatchStateMachine
from .scheduler import AsyncioScheduler, ManualScheduler, ScheduledTask, Scheduler

__all__ = [
    "MatchEngine",
    "EvaluationError",
    "NumericResult",
    "equivalent",
    "evaluate",
    "BoardGenerator",
    "PreferenceError",
    "generate",
    "MatchStateMachine",
    "AsyncioScheduler",
    "ManualScheduler",
    "ScheduledTask",
    "Scheduler",
]
