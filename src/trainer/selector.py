"""
Hand Selector: Three-Tier Weighted Lottery.

Each call draws one uniform value r in [0, 1) and walks an ordered list of
tiers until one produces a pick:

1. Due review  (r < 0.20) - a repetition record that is due
2. Boundary    (r < 0.90) - top slice of the pool by boundary score
3. Random      (fallback) - uniform position, then uniform hand

Modes bias the walk:
- boundary: the boundary tier runs regardless of r
- random:   the boundary tier is skipped
- review:   the due tier runs regardless of r, and the other tiers only
            draw from hands that have been answered before

Due review always comes first so spaced repetition is never starved.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from .scheduler import RepetitionStore
from .state_store import record_key
from .strategy_deck import HandEvaluation, StrategyIndex

# =============================================================================
# Settings & Results
# =============================================================================


class SelectionMode(str, Enum):
    """How the lottery is biased."""

    BOUNDARY = "boundary"
    RANDOM = "random"
    REVIEW = "review"


class SelectionTier(str, Enum):
    """Which tier produced a pick."""

    DUE_REVIEW = "due_review"
    BOUNDARY = "boundary"
    RANDOM = "random"


@dataclass(frozen=True)
class SessionSettings:
    """
    Immutable per-call session settings.

    An empty `enabled_positions` means every position in the table.
    """

    enabled_positions: frozenset[str] = frozenset()
    mode: SelectionMode = SelectionMode.BOUNDARY
    question_count: int | None = None  # None = unlimited

    @classmethod
    def create(
        cls,
        enabled_positions: list[str] | tuple[str, ...] | frozenset[str] = (),
        mode: SelectionMode | str = SelectionMode.BOUNDARY,
        question_count: int | None = None,
    ) -> SessionSettings:
        """Build settings from plain values (raises ValueError on an unknown mode)."""
        return cls(
            enabled_positions=frozenset(enabled_positions),
            mode=SelectionMode(mode),
            question_count=question_count,
        )

    def active_positions(self, known_positions: list[str]) -> list[str]:
        """Positions in play, in table order (unknown extras last)."""
        if not self.enabled_positions:
            return list(known_positions)
        ordered = [p for p in known_positions if p in self.enabled_positions]
        extras = sorted(self.enabled_positions.difference(known_positions))
        return ordered + extras


@dataclass(frozen=True)
class Pick:
    """A (position, hand) chosen for presentation."""

    position: str
    evaluation: HandEvaluation
    tier: SelectionTier

    @property
    def hand(self) -> str:
        return self.evaluation.hand


# =============================================================================
# Selector
# =============================================================================


@dataclass
class SelectorConfig:
    """Configuration for the selection lottery."""

    due_review_weight: float = 0.2  # [0, 0.2) -> due review
    boundary_cutoff: float = 0.9  # [0.2, 0.9) -> boundary, [0.9, 1) -> random
    boundary_slice_fraction: float = 0.2
    boundary_min_slice: int = 20


def boundary_slice_size(pool_size: int, config: SelectorConfig | None = None) -> int:
    """Size of the top boundary slice: max(min slice, floor(pool x fraction))."""
    config = config or SelectorConfig()
    return max(config.boundary_min_slice, math.floor(pool_size * config.boundary_slice_fraction))


@dataclass
class SelectionContext:
    """Everything a tier needs for one call."""

    mode: SelectionMode
    active_positions: list[str]
    draw: float
    now: int
    seen_keys: set[str] | None = None  # Set only in review mode
    active_set: set[str] = field(init=False)

    def __post_init__(self) -> None:
        self.active_set = set(self.active_positions)

    def allows(self, position: str, hand: str) -> bool:
        return self.seen_keys is None or record_key(position, hand) in self.seen_keys


Tier = Callable[[SelectionContext], Pick | None]


class HandSelector:
    """
    Picks the next (position, hand) to quiz.

    Stateless across calls: every call reads the current due set and
    the strategy index afresh.
    """

    def __init__(
        self,
        index: StrategyIndex,
        repetitions: RepetitionStore,
        config: SelectorConfig | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the selector.

        Args:
            index: StrategyIndex for evaluations and candidate pools
            repetitions: RepetitionStore for due and seen items
            config: Lottery configuration
            rng: Random source (a fresh random.Random if None)
        """
        self.index = index
        self.repetitions = repetitions
        self.config = config or SelectorConfig()
        self.rng = rng or random.Random()

    def select_next(self, settings: SessionSettings, now: int) -> Pick | None:
        """
        Select the next hand.

        Args:
            settings: Session settings for this call
            now: Current time in epoch milliseconds

        Returns:
            Pick, or None when no candidate exists (empty pool or a
            position with no hands)
        """
        active = settings.active_positions(self.index.positions)
        seen_keys = None
        if settings.mode is SelectionMode.REVIEW:
            seen_keys = {r.key for r in self.repetitions.seen_items()}

        context = SelectionContext(
            mode=settings.mode,
            active_positions=active,
            draw=self.rng.random(),
            now=now,
            seen_keys=seen_keys,
        )

        for tier in self._tiers_for(settings.mode):
            pick = tier(context)
            if pick is not None:
                logger.debug(
                    f"Selected {pick.position} {pick.hand} via {pick.tier.value} "
                    f"(draw={context.draw:.3f}, mode={settings.mode.value})"
                )
                return pick

        logger.warning(
            f"No candidates for positions {active} in {settings.mode.value} mode"
        )
        return None

    def _tiers_for(self, mode: SelectionMode) -> list[Tier]:
        """Ordered tier attempts for a mode."""
        if mode is SelectionMode.RANDOM:
            return [self._due_review_tier, self._random_tier]
        return [self._due_review_tier, self._boundary_tier, self._random_tier]

    # =========================================================================
    # Tiers
    # =========================================================================

    def _due_review_tier(self, context: SelectionContext) -> Pick | None:
        """Pick a due record in the active positions."""
        if context.mode is not SelectionMode.REVIEW and context.draw >= self.config.due_review_weight:
            return None

        relevant = [
            r for r in self.repetitions.due_items(context.now)
            if r.position in context.active_set
        ]
        if not relevant:
            return None

        record = self.rng.choice(relevant)
        evaluation = self.index.evaluate(record.position, record.hand)
        if evaluation is None:
            logger.warning(f"Due item {record.key} is not in the strategy table, skipping")
            return None

        return Pick(position=record.position, evaluation=evaluation, tier=SelectionTier.DUE_REVIEW)

    def _boundary_tier(self, context: SelectionContext) -> Pick | None:
        """Pick among the hardest hands (highest boundary score)."""
        if context.mode is not SelectionMode.BOUNDARY and context.draw >= self.config.boundary_cutoff:
            return None

        pool = [
            (position, evaluation)
            for position in context.active_positions
            for evaluation in self._candidates(context, position)
        ]
        if not pool:
            return None

        pool.sort(key=lambda candidate: candidate[1].boundary_score, reverse=True)
        top = pool[: boundary_slice_size(len(pool), self.config)]

        position, evaluation = self.rng.choice(top)
        return Pick(position=position, evaluation=evaluation, tier=SelectionTier.BOUNDARY)

    def _random_tier(self, context: SelectionContext) -> Pick | None:
        """Uniform position, then uniform hand."""
        positions = context.active_positions
        if context.seen_keys is not None:
            positions = [p for p in positions if self._candidates(context, p)]
        if not positions:
            return None

        position = self.rng.choice(positions)
        hands = self._candidates(context, position)
        if not hands:
            return None

        return Pick(position=position, evaluation=self.rng.choice(hands), tier=SelectionTier.RANDOM)

    def _candidates(self, context: SelectionContext, position: str) -> list[HandEvaluation]:
        return [
            e for e in self.index.all_evaluations(position)
            if context.allows(position, e.hand)
        ]
