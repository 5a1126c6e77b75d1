"""Rarity tier selection — one percentile draw per table roll, no I/O."""
from __future__ import annotations

import random

from table_roller.models.config import RarityPolicy

COMMON = "common"
UNCOMMON = "uncommon"
RARE = "rare"

# Tiers admitted by each band under the cumulative policy
_CUMULATIVE_BANDS: dict[str, frozenset[str]] = {
    RARE: frozenset({RARE, UNCOMMON, COMMON}),
    UNCOMMON: frozenset({UNCOMMON, COMMON}),
    COMMON: frozenset({COMMON}),
}


def band_for_roll(percentile: float, rare_chance: float, uncommon_chance: float) -> str:
    """Map a draw in [0, 100) to the band it falls in."""
    if percentile < rare_chance:
        return RARE
    if percentile < rare_chance + uncommon_chance:
        return UNCOMMON
    return COMMON


def select_eligible_rarities(
    rare_chance: float,
    uncommon_chance: float,
    policy: RarityPolicy = RarityPolicy.EXCLUSIVE,
    rng: random.Random | None = None,
) -> frozenset[str]:
    """Draw which rarity tiers may be selected on this table roll.

    EXCLUSIVE: each band admits only its own tier.
    CUMULATIVE: landing in a rarer band also admits every commoner tier.
    """
    rng = rng or random
    band = band_for_roll(rng.random() * 100, rare_chance, uncommon_chance)
    if policy == RarityPolicy.CUMULATIVE:
        return _CUMULATIVE_BANDS[band]
    return frozenset({band})
