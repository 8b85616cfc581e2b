"""
RFI Trainer: adaptive drills for pre-flop opening ranges.

Components:
- StrategyIndex: Strategy table loading and per-hand evaluation
- StateStore: SQLite persistence (repetition state, attempts, settings)
- RepetitionStore: Due queries and the reset-or-double update rule
- HandSelector: Three-tier weighted lottery (due / boundary / random)
- DrillTrainer: Caller-facing facade
- SessionTelemetry: In-session streaks and accuracy
"""

from .errors import StrategyLoadError, TrainerError
from .scheduler import RepetitionConfig, RepetitionScheduler, RepetitionStore
from .selector import (
    HandSelector,
    Pick,
    SelectionMode,
    SelectionTier,
    SelectorConfig,
    SessionSettings,
)
from .state_store import AttemptRecord, RepetitionRecord, StateStore
from .strategy_deck import (
    ActionFrequencies,
    ActionType,
    HandEvaluation,
    StrategyIndex,
    StrategyTable,
    load_strategy_table,
)
from .telemetry import SessionTelemetry
from .trainer import DrillTrainer, Feedback

__all__ = [
    # Strategy
    "ActionType",
    "ActionFrequencies",
    "HandEvaluation",
    "StrategyIndex",
    "StrategyTable",
    "load_strategy_table",
    # Persistence
    "StateStore",
    "RepetitionRecord",
    "AttemptRecord",
    # Scheduling
    "RepetitionConfig",
    "RepetitionScheduler",
    "RepetitionStore",
    # Selection
    "HandSelector",
    "Pick",
    "SelectionMode",
    "SelectionTier",
    "SelectorConfig",
    "SessionSettings",
    # Facade
    "DrillTrainer",
    "Feedback",
    "SessionTelemetry",
    # Errors
    "TrainerError",
    "StrategyLoadError",
]
