"""
Strategy Deck: Opening-Range Loader and Index.

Loads the strategy table from JSON and answers, for any
(position, hand):
- Action frequencies (raise / call / fold)
- The dominant ("best") action
- The boundary score (1 - max frequency), a proxy for decision difficulty

The table is loaded once and held by the caller; the index is read-only.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import StrategyLoadError

# =============================================================================
# Table Schema
# =============================================================================


class ActionType(str, Enum):
    """Pre-flop actions, in tie-break priority order."""

    RAISE = "raise"
    CALL = "call"
    FOLD = "fold"


class ActionFrequencies(BaseModel):
    """Mixed-strategy frequencies for one hand. Sum to 1.0 by construction."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    raise_: float = Field(default=0.0, alias="raise", ge=0.0, le=1.0)
    call: float = Field(default=0.0, ge=0.0, le=1.0)
    fold: float = Field(default=0.0, ge=0.0, le=1.0)

    def of(self, action: ActionType) -> float:
        """Frequency of a single action."""
        if action is ActionType.RAISE:
            return self.raise_
        if action is ActionType.CALL:
            return self.call
        return self.fold

    def as_dict(self) -> dict[str, float]:
        return {"raise": self.raise_, "call": self.call, "fold": self.fold}


class StrategyMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    format: str = ""
    ante: bool = False
    stack_bb_label_seen: float | None = None
    note: str = ""
    created_at: str | None = None


class StrategySizes(BaseModel):
    model_config = ConfigDict(frozen=True)

    open_raise_bb: float | None = None
    sb_raise_bb: float | None = None
    all_in_label_seen_bb: float | None = None


class StrategyTable(BaseModel):
    """The raw strategy table: position -> hand -> frequencies."""

    model_config = ConfigDict(frozen=True)

    meta: StrategyMeta = Field(default_factory=StrategyMeta)
    sizes: StrategySizes = Field(default_factory=StrategySizes)
    strategies: dict[str, dict[str, ActionFrequencies]]


def load_strategy_table(path: Path | str) -> StrategyTable:
    """
    Load a strategy table from a JSON file.

    Args:
        path: JSON file shaped {meta, sizes, strategies}

    Returns:
        Validated StrategyTable

    Raises:
        StrategyLoadError: File missing, unreadable, not JSON, or wrong shape
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load strategy table {path}: {e}")
        raise StrategyLoadError(f"Failed to load strategy data from {path}: {e}") from e

    try:
        table = StrategyTable.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid strategy table {path}: {e.error_count()} errors")
        raise StrategyLoadError(f"Invalid strategy data in {path}: {e}") from e

    hand_count = sum(len(hands) for hands in table.strategies.values())
    logger.info(
        f"Strategy table loaded: {len(table.strategies)} positions, {hand_count} hands from {path.name}"
    )
    return table


# =============================================================================
# Hand Evaluation
# =============================================================================


def calculate_boundary_score(freqs: ActionFrequencies) -> float:
    """1 - max frequency. 0 for a pure decision, up to 2/3 for an even mix."""
    return 1 - max(freqs.raise_, freqs.call, freqs.fold)


def get_best_action(freqs: ActionFrequencies) -> ActionType:
    """Most frequent action; ties go raise > call > fold."""
    if freqs.raise_ >= freqs.call and freqs.raise_ >= freqs.fold:
        return ActionType.RAISE
    if freqs.call >= freqs.fold:
        return ActionType.CALL
    return ActionType.FOLD


@dataclass(frozen=True)
class HandEvaluation:
    """Derived view of one hand at one position."""

    hand: str
    frequencies: ActionFrequencies
    best_action: ActionType
    boundary_score: float

    @classmethod
    def from_frequencies(cls, hand: str, freqs: ActionFrequencies) -> HandEvaluation:
        return cls(
            hand=hand,
            frequencies=freqs,
            best_action=get_best_action(freqs),
            boundary_score=calculate_boundary_score(freqs),
        )


# =============================================================================
# Strategy Index
# =============================================================================


class StrategyIndex:
    """
    Read-only index over a loaded StrategyTable.

    Evaluations are computed once at construction so lookups are plain
    dictionary reads.
    """

    def __init__(self, table: StrategyTable):
        """
        Initialize the index.

        Args:
            table: Loaded strategy table (owned by the caller)
        """
        self.table = table
        self._by_position: dict[str, dict[str, HandEvaluation]] = {
            position: {
                hand: HandEvaluation.from_frequencies(hand, freqs)
                for hand, freqs in hands.items()
            }
            for position, hands in table.strategies.items()
        }

    @classmethod
    def from_file(cls, path: Path | str) -> StrategyIndex:
        """Load a table from JSON and index it."""
        return cls(load_strategy_table(path))

    @property
    def positions(self) -> list[str]:
        """Positions defined in the table, in table order."""
        return list(self._by_position.keys())

    def evaluate(self, position: str, hand: str) -> HandEvaluation | None:
        """
        Evaluate a hand at a position.

        Returns:
            HandEvaluation, or None if the position or hand is not in the table
        """
        hands = self._by_position.get(position)
        if hands is None:
            return None
        return hands.get(hand)

    def all_evaluations(self, position: str) -> list[HandEvaluation]:
        """All hand evaluations for a position (empty if unknown)."""
        return list(self._by_position.get(position, {}).values())

    def open_size_bb(self, position: str) -> float | None:
        """Open raise size in big blinds (the SB opens larger)."""
        if position == "RFI_SB":
            return self.table.sizes.sb_raise_bb
        return self.table.sizes.open_raise_bb

    def __len__(self) -> int:
        """Total (position, hand) pairs in the table."""
        return sum(len(hands) for hands in self._by_position.values())

    def get_stats(self) -> dict:
        """
        Get per-position statistics.

        Returns:
            Dictionary with hand counts, mean boundary score and the
            share of hands whose best action is raise
        """
        per_position = {}
        for position, hands in self._by_position.items():
            evaluations = list(hands.values())
            if not evaluations:
                per_position[position] = {"hands": 0, "avg_boundary": 0.0, "raise_pct": 0.0}
                continue
            raises = sum(1 for e in evaluations if e.best_action is ActionType.RAISE)
            per_position[position] = {
                "hands": len(evaluations),
                "avg_boundary": round(
                    sum(e.boundary_score for e in evaluations) / len(evaluations), 4
                ),
                "raise_pct": round(100.0 * raises / len(evaluations), 1),
            }

        return {
            "positions": len(self._by_position),
            "total_hands": len(self),
            "per_position": per_position,
        }
