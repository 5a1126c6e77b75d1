"""Special material augmentation applied after a leaf item is resolved."""
from __future__ import annotations

import logging
import math
import random
import re

from table_roller.mechanics.dice import evaluate
from table_roller.mechanics.selection import select_entry
from table_roller.models.entry import SPECIAL_MATERIAL_TAG
from table_roller.storage.table_repo import TableRepository

logger = logging.getLogger(__name__)

_MULTIPLIER_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*x\s*$", re.IGNORECASE)


def parse_multiplier(value: object) -> float | None:
    """Return the factor of a multiplier string like '2x', else None."""
    if not isinstance(value, str):
        return None
    m = _MULTIPLIER_RE.match(value)
    return float(m.group(1)) if m else None


class MaterialAugmenter:
    def __init__(
        self,
        repository: TableRepository,
        material_table: str = SPECIAL_MATERIAL_TAG,
        rng: random.Random | None = None,
    ) -> None:
        self.repository = repository
        self.material_table = material_table
        self.rng = rng

    def augment(
        self,
        terminal_table: str | None,
        running_value: float,
        modifiers: tuple[str, ...],
        pending: tuple[str, ...],
    ) -> tuple[float, tuple[str, ...]]:
        """Pick a compatible material for each pending tag and apply its effect.

        Additive effects all apply. Multipliers are held back and only the last
        one is applied, to the final total, which is then floored.
        """
        tags = [t for t in pending if t == SPECIAL_MATERIAL_TAG]
        if not tags:
            return running_value, modifiers

        compatible = [
            m for m in self.repository.get_materials(self.material_table)
            if m.applies_to(terminal_table)
        ]
        if not compatible:
            logger.debug("No special material fits table %s", terminal_table)
            return running_value, modifiers

        value = running_value
        names = list(modifiers)
        multiplier: float | None = None
        for _ in tags:
            material = select_entry(compatible, None, self.rng)
            names.append(material.name)
            effect = material.value[terminal_table]
            factor = parse_multiplier(effect)
            if factor is not None:
                multiplier = factor
            else:
                value += max(0, evaluate(effect, self.rng))
            logger.debug("Applied material %s (%s) to %s", material.name, effect, terminal_table)

        if multiplier is not None:
            value = math.floor(value * multiplier)
        return value, tuple(names)
