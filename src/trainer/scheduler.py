"""
Simplified Spaced Repetition Scheduler.

A Leitner/SM-2 hybrid that only ever resets or doubles:

Incorrect      -> streak 0, review again in 1 minute
Correct (1st)  -> 10 minutes
Correct (2nd)  -> 1 day
Correct (3rd+) -> previous interval x 2 (uncapped)

No easiness-factor multiplier is computed. The factor is carried on the
record so older databases and future rules keep working.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from loguru import logger

from .state_store import RepetitionRecord, StateStore

ONE_MINUTE_MS = 60 * 1000
ONE_DAY_MS = 24 * 60 * 60 * 1000

# =============================================================================
# Update Rule
# =============================================================================


@dataclass
class RepetitionConfig:
    """Interval constants for the update rule (milliseconds)."""

    incorrect_interval_ms: int = ONE_MINUTE_MS
    first_interval_ms: int = 10 * ONE_MINUTE_MS
    second_interval_ms: int = ONE_DAY_MS
    growth_factor: int = 2


class RepetitionScheduler:
    """Pure update rule: no randomness, no I/O."""

    def __init__(self, config: RepetitionConfig | None = None):
        self.config = config or RepetitionConfig()

    def calculate_next_review(
        self,
        record: RepetitionRecord,
        is_correct: bool,
        now: int,
    ) -> RepetitionRecord:
        """
        Calculate the next review for a record.

        Args:
            record: Current state (streak 0, interval 0 for a fresh record)
            is_correct: Whether the answer was correct
            now: Answer time in epoch milliseconds

        Returns:
            New RepetitionRecord with updated streak, interval and due time
        """
        if not is_correct:
            new_streak = 0
            new_interval = self.config.incorrect_interval_ms
        else:
            new_streak = record.streak + 1
            if new_streak == 1:
                new_interval = self.config.first_interval_ms
            elif new_streak == 2:
                new_interval = self.config.second_interval_ms
            else:
                new_interval = record.interval_ms * self.config.growth_factor

        return replace(
            record,
            streak=new_streak,
            interval_ms=new_interval,
            next_review_at=now + new_interval,
        )


# =============================================================================
# Repetition Store
# =============================================================================


class RepetitionStore:
    """
    Due queries and answer recording on top of the StateStore.

    The only writer of repetition records.
    """

    def __init__(
        self,
        store: StateStore,
        scheduler: RepetitionScheduler | None = None,
    ):
        """
        Initialize the repetition store.

        Args:
            store: StateStore for persistence
            scheduler: Update rule (creates default if None)
        """
        self.store = store
        self.scheduler = scheduler or RepetitionScheduler()

    def due_items(self, now: int) -> list[RepetitionRecord]:
        """Every record whose next review is at or before `now`."""
        return self.store.get_due_records(now)

    def seen_items(self) -> list[RepetitionRecord]:
        """Every record ever answered, due or not."""
        return self.store.get_all_records()

    def get_record(self, position: str, hand: str) -> RepetitionRecord | None:
        return self.store.get_record(position, hand)

    def record_answer(
        self,
        position: str,
        hand: str,
        is_correct: bool,
        now: int,
    ) -> RepetitionRecord:
        """
        Apply an answer and persist the updated record.

        Creates the record on first answer.

        Returns:
            Updated RepetitionRecord
        """
        current = self.store.get_record(position, hand)
        if current is None:
            current = RepetitionRecord(position=position, hand=hand)

        updated = self.scheduler.calculate_next_review(current, is_correct, now)
        self.store.save_record(updated)

        logger.debug(
            f"Recorded answer for {updated.key}: correct={is_correct}, "
            f"streak={updated.streak}, interval={updated.interval_ms}ms"
        )

        return updated
