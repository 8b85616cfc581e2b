"""
Hand Catalogue: positions, ranks and the 169 canonical starting hands.

Hands are labelled the usual way:
- Pairs: "AA", "77"
- Suited: "AKs" (higher rank first)
- Offsuit: "AKo"

The chart order is the standard 13x13 grid: pairs on the diagonal, suited
hands above it and offsuit hands below it.
"""

from __future__ import annotations

import random

POSITIONS: list[str] = [
    "RFI_UTG",
    "RFI_UTG+1",
    "RFI_LJ",
    "RFI_HJ",
    "RFI_CO",
    "RFI_BTN",
    "RFI_SB",
]

RANKS = "AKQJT98765432"
SUITS = "shdc"


def hand_at(row: int, col: int) -> str:
    """Return the hand label for a cell of the 13x13 chart."""
    if row == col:
        return RANKS[row] * 2
    if row < col:
        return f"{RANKS[row]}{RANKS[col]}s"
    return f"{RANKS[col]}{RANKS[row]}o"


def hand_grid() -> list[list[str]]:
    """Hand labels laid out as the 13x13 reference chart."""
    return [[hand_at(row, col) for col in range(len(RANKS))] for row in range(len(RANKS))]


ALL_HANDS: list[str] = [label for row in hand_grid() for label in row]
_HAND_SET = frozenset(ALL_HANDS)


def is_valid_hand(label: str) -> bool:
    """Check whether a label is one of the 169 canonical hands."""
    return label in _HAND_SET


def position_label(position: str) -> str:
    """Short seat name for display ("RFI_UTG+1" -> "UTG+1")."""
    return position.removeprefix("RFI_")


def deal_cards(hand: str, rng: random.Random | None = None) -> tuple[str, str]:
    """
    Deal two concrete cards matching a hand label.

    Suits are random but respect the label: suited hands share a suit,
    offsuit hands and pairs never do.

    Args:
        hand: Canonical hand label ("AKs", "72o", "QQ")
        rng: Random source (module-level random if None)

    Returns:
        Two card strings such as ("Ah", "Kh"), or ("??", "??") for a
        malformed label
    """
    if len(hand) < 2:
        return ("??", "??")

    rng = rng or random.Random()
    first, second = hand[0], hand[1]
    kind = hand[2] if len(hand) > 2 else ""

    suit_one = rng.choice(SUITS)
    if kind == "s":
        suit_two = suit_one
    else:
        suit_two = rng.choice([s for s in SUITS if s != suit_one])

    return (f"{first}{suit_one}", f"{second}{suit_two}")
