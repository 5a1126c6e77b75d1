"""Weighted entry selection — pure, no I/O."""
from __future__ import annotations

import random
from collections.abc import Collection, Sequence
from typing import TypeVar

from table_roller.exceptions import EmptyTableError
from table_roller.models.entry import ItemSet

T = TypeVar("T")


def filter_by_rarity(entries: Sequence[T], eligible: Collection[str]) -> list[T]:
    """Keep set wrappers plus entries whose rarity is eligible.

    Falls back to the full list when nothing weighted survives, so a table always
    produces a selection regardless of the rolled rarity band.
    """
    kept = [
        e for e in entries
        if isinstance(e, ItemSet) or getattr(e, "rarity", "common") in eligible
    ]
    return kept if total_weight(kept) > 0 else list(entries)


def total_weight(entries: Sequence[T]) -> int:
    return sum(getattr(e, "weight", 1) for e in entries)


def select_entry(
    entries: Sequence[T],
    eligible_rarities: Collection[str] | None = None,
    rng: random.Random | None = None,
) -> T:
    """Pick one entry with probability weight / total weight.

    Draws an integer in [0, total) and walks the cumulative intervals left to
    right, so earlier entries win at interval boundaries.
    """
    if not entries:
        raise EmptyTableError("Cannot select from an empty table")
    rng = rng or random

    pool = list(entries) if eligible_rarities is None else filter_by_rarity(entries, eligible_rarities)
    total = total_weight(pool)
    if total <= 0:
        raise EmptyTableError("Table entries have no positive weight")

    draw = rng.randrange(total)
    cumulative = 0
    for entry in pool:
        cumulative += getattr(entry, "weight", 1)
        if draw < cumulative:
            return entry
    # Unreachable with a well-formed rng
    return pool[-1]
