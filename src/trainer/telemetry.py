"""
Session Telemetry.

Tracks in-session performance while drilling:
- Current and best correct streaks
- Accuracy overall and by position
- Average response time
- Leaks (hands missed repeatedly this session)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class AnswerEvent:
    """A single answered question in the session."""

    position: str
    hand: str
    user_action: str
    is_correct: bool
    boundary_score: float
    response_ms: int = 0
    timestamp: datetime = field(default_factory=datetime.now)


class SessionTelemetry:
    """Tracks metrics for a single drill session."""

    def __init__(self):
        self.started_at = datetime.now()
        self.events: list[AnswerEvent] = []
        self._current_streak = 0
        self._best_streak = 0

    def record(
        self,
        position: str,
        hand: str,
        user_action: str,
        is_correct: bool,
        boundary_score: float,
        response_ms: int = 0,
    ) -> None:
        """Record an answer and update the streaks."""
        self.events.append(
            AnswerEvent(
                position=position,
                hand=hand,
                user_action=user_action,
                is_correct=is_correct,
                boundary_score=boundary_score,
                response_ms=response_ms,
            )
        )

        if is_correct:
            self._current_streak += 1
            self._best_streak = max(self._best_streak, self._current_streak)
        else:
            self._current_streak = 0

    # =========================================================================
    # Basic Metrics
    # =========================================================================

    @property
    def total(self) -> int:
        return len(self.events)

    @property
    def correct_count(self) -> int:
        return sum(1 for e in self.events if e.is_correct)

    @property
    def accuracy(self) -> float:
        """Overall accuracy for the session (0-1)."""
        if not self.events:
            return 0.0
        return self.correct_count / len(self.events)

    @property
    def current_streak(self) -> int:
        """Consecutive correct answers, ending with the latest."""
        return self._current_streak

    @property
    def best_streak(self) -> int:
        return self._best_streak

    @property
    def duration_minutes(self) -> float:
        delta = datetime.now() - self.started_at
        return delta.total_seconds() / 60

    @property
    def average_boundary_score(self) -> float:
        """Mean difficulty of the hands seen this session."""
        if not self.events:
            return 0.0
        return sum(e.boundary_score for e in self.events) / len(self.events)

    @property
    def average_response_ms(self) -> float:
        if not self.events:
            return 0.0
        return sum(e.response_ms for e in self.events) / len(self.events)

    # =========================================================================
    # Analysis
    # =========================================================================

    def accuracy_by_position(self) -> dict[str, float]:
        totals: dict[str, list[int]] = {}
        for event in self.events:
            bucket = totals.setdefault(event.position, [0, 0])
            bucket[0] += 1
            bucket[1] += int(event.is_correct)
        return {position: correct / total for position, (total, correct) in totals.items()}

    def get_leaks(self, min_failures: int = 2) -> list[tuple[str, str]]:
        """
        Get (position, hand) pairs missed repeatedly.

        Args:
            min_failures: Minimum misses to count as a leak

        Returns:
            Pairs ordered by miss count, most missed first
        """
        failures: dict[tuple[str, str], int] = {}
        for event in self.events:
            if not event.is_correct:
                pair = (event.position, event.hand)
                failures[pair] = failures.get(pair, 0) + 1

        leaks = [pair for pair, count in failures.items() if count >= min_failures]
        leaks.sort(key=lambda pair: failures[pair], reverse=True)
        return leaks

    def get_stats(self) -> dict:
        """
        Get session statistics.

        Returns:
            Dictionary of session metrics
        """
        return {
            "duration_minutes": round(self.duration_minutes, 1),
            "total": self.total,
            "correct_count": self.correct_count,
            "accuracy_percent": round(self.accuracy * 100, 1),
            "current_streak": self._current_streak,
            "best_streak": self._best_streak,
            "avg_boundary_score": round(self.average_boundary_score, 3),
            "avg_response_ms": round(self.average_response_ms),
            "accuracy_by_position": self.accuracy_by_position(),
        }
