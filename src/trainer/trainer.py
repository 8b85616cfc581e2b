"""
Drill Trainer: the caller-facing API.

Wires the StrategyIndex, StateStore, RepetitionStore and HandSelector
together and exposes:
- select_next(settings, now)   -> Pick | None
- evaluate(position, hand)     -> HandEvaluation | None
- record_answer(...)           -> RepetitionRecord
- submit_action(pick, action)  -> Feedback (grades, logs, reschedules)
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from .scheduler import RepetitionScheduler, RepetitionStore
from .selector import HandSelector, Pick, SelectionMode, SelectorConfig, SessionSettings
from .state_store import AttemptRecord, RepetitionRecord, StateStore, StoredSettings
from .strategy_deck import ActionFrequencies, ActionType, HandEvaluation, StrategyIndex

if TYPE_CHECKING:
    from config import Settings


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Feedback:
    """Outcome of answering a pick."""

    pick: Pick
    user_action: ActionType
    is_correct: bool
    record: RepetitionRecord

    @property
    def correct_action(self) -> ActionType:
        return self.pick.evaluation.best_action

    @property
    def frequencies(self) -> ActionFrequencies:
        return self.pick.evaluation.frequencies

    @property
    def boundary_score(self) -> float:
        return self.pick.evaluation.boundary_score


class DrillTrainer:
    """
    Facade over the selection and scheduling core.

    The strategy index is held by reference; the trainer never reloads it.
    """

    def __init__(
        self,
        index: StrategyIndex,
        store: StateStore,
        selector_config: SelectorConfig | None = None,
        scheduler: RepetitionScheduler | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the trainer.

        Args:
            index: Loaded StrategyIndex
            store: StateStore for persistence
            selector_config: Lottery configuration
            scheduler: Repetition update rule
            rng: Random source shared by selection
        """
        self.index = index
        self.store = store
        self.repetitions = RepetitionStore(store, scheduler)
        self.selector = HandSelector(index, self.repetitions, selector_config, rng)

    @classmethod
    def from_settings(cls, settings: Settings, rng: random.Random | None = None) -> DrillTrainer:
        """
        Build a trainer from application settings.

        Raises:
            StrategyLoadError: The strategy table could not be loaded
        """
        index = StrategyIndex.from_file(settings.strategy_path)
        store = StateStore(settings.database_path)
        return cls(index, store, selector_config=settings.get_selector_config(), rng=rng)

    # =========================================================================
    # Core API
    # =========================================================================

    def select_next(self, settings: SessionSettings, now: int | None = None) -> Pick | None:
        """Pick the next hand, or None if there is nothing to ask."""
        return self.selector.select_next(settings, now_ms() if now is None else now)

    def evaluate(self, position: str, hand: str) -> HandEvaluation | None:
        return self.index.evaluate(position, hand)

    def record_answer(
        self,
        position: str,
        hand: str,
        is_correct: bool,
        now: int | None = None,
    ) -> RepetitionRecord:
        """Update repetition state for a pair after an answer."""
        return self.repetitions.record_answer(
            position, hand, is_correct, now_ms() if now is None else now
        )

    def submit_action(
        self,
        pick: Pick,
        action: ActionType | str,
        now: int | None = None,
    ) -> Feedback:
        """
        Grade a user action for a presented pick.

        Correct means the action matches the most frequent action. The
        attempt is logged and the repetition record updated.

        Args:
            pick: The pick that was presented
            action: The user's action ("raise", "call" or "fold")
            now: Answer time in epoch milliseconds (current time if None)

        Returns:
            Feedback with correctness and the updated record

        Raises:
            ValueError: Unknown action
        """
        user_action = ActionType(action)
        now = now_ms() if now is None else now
        is_correct = user_action is pick.evaluation.best_action

        self.store.log_attempt(
            AttemptRecord(
                timestamp=now,
                position=pick.position,
                hand=pick.hand,
                user_action=user_action.value,
                is_correct=is_correct,
                boundary_score=pick.evaluation.boundary_score,
            )
        )
        record = self.record_answer(pick.position, pick.hand, is_correct, now)

        logger.debug(
            f"{pick.position} {pick.hand}: {user_action.value} "
            f"({'correct' if is_correct else 'incorrect'}, best={pick.evaluation.best_action.value})"
        )

        return Feedback(pick=pick, user_action=user_action, is_correct=is_correct, record=record)

    # =========================================================================
    # Settings
    # =========================================================================

    def load_session_settings(
        self,
        default_mode: SelectionMode | str = SelectionMode.BOUNDARY,
        default_question_count: int | None = None,
    ) -> SessionSettings:
        """Stored settings as an immutable value, or the defaults if none saved."""
        stored = self.store.get_settings()
        if stored is None:
            return SessionSettings.create(
                mode=default_mode, question_count=default_question_count
            )
        return SessionSettings.create(
            enabled_positions=stored.enabled_positions,
            mode=stored.mode,
            question_count=stored.question_count,
        )

    def save_session_settings(self, settings: SessionSettings) -> None:
        self.store.save_settings(
            StoredSettings(
                enabled_positions=sorted(settings.enabled_positions),
                mode=settings.mode.value,
                question_count=settings.question_count,
            )
        )

    def close(self) -> None:
        self.store.close()
