"""Recursive table resolution: origin table -> table references -> leaf item."""
from __future__ import annotations

import logging
import random
from collections.abc import Sequence

from table_roller.engine.materials import MaterialAugmenter
from table_roller.exceptions import CycleOrTooDeepError
from table_roller.mechanics.dice import evaluate
from table_roller.mechanics.economy import normalize_unit, to_canonical_value
from table_roller.mechanics.rarity import select_eligible_rarities
from table_roller.mechanics.selection import select_entry
from table_roller.models.config import RollerConfig
from table_roller.models.entry import Entry, ItemSet, LeafItem, TableReference
from table_roller.models.result import (
    Exceeded,
    ResolutionState,
    ResolveResult,
    SetResult,
    SingleResult,
)
from table_roller.storage.table_repo import TableRepository

logger = logging.getLogger(__name__)

# Table hops allowed in one resolution before assuming a reference cycle
MAX_DEPTH = 64


def closest_tier(entries: Sequence[Entry], ceiling: float) -> list[Entry]:
    """Restrict entries to the greatest max_value tier not above the ceiling.

    Returns the entries unchanged when no entry declares a qualifying tier.
    """
    tiers = [e.max_value for e in entries if e.max_value is not None and e.max_value <= ceiling]
    if not tiers:
        return list(entries)
    best = max(tiers)
    return [e for e in entries if e.max_value == best]


class TableResolver:
    def __init__(
        self,
        repository: TableRepository,
        config: RollerConfig,
        rng: random.Random | None = None,
        max_depth: int = MAX_DEPTH,
        augmenter: MaterialAugmenter | None = None,
    ) -> None:
        self.repository = repository
        self.config = config
        self.rng = rng
        self.max_depth = max_depth
        self.augmenter = augmenter or MaterialAugmenter(repository, config.material_table, rng)

    def resolve(
        self,
        table_name: str,
        budget: float | None = None,
        state: ResolutionState | None = None,
    ) -> ResolveResult:
        """Roll on a table and follow references down to a leaf or item set.

        ``budget`` is the caller's remaining budget, or None when unconstrained.
        Budget violations come back as an Exceeded result, never as an error.
        """
        state = (state or ResolutionState()).visit(table_name)
        if state.depth > self.max_depth:
            raise CycleOrTooDeepError(state.breadcrumb, self.max_depth)

        entries: Sequence[Entry] = self.repository.get(table_name)
        if self.config.filter_by_max and budget is not None and state.depth == 1:
            entries = closest_tier(entries, budget)

        eligible = select_eligible_rarities(
            self.config.rare_chance,
            self.config.uncommon_chance,
            self.config.rarity_policy,
            self.rng,
        )
        entry = select_entry(entries, eligible, self.rng)
        logger.debug("Rolled on %s (eligible=%s): %r", table_name, sorted(eligible), entry)

        if isinstance(entry, ItemSet):
            return self._expand_set(entry, state, budget)
        return self._resolve_entry(entry, state, budget)

    def _resolve_entry(
        self,
        entry: LeafItem | TableReference,
        state: ResolutionState,
        budget: float | None,
    ) -> ResolveResult:
        reason = self._budget_violation(entry, budget)
        if reason:
            logger.debug("Rejected %s: %s", entry.name, reason)
            return Exceeded(reason=reason, breadcrumb=state.breadcrumb)

        if isinstance(entry, TableReference):
            value = evaluate(entry.value, self.rng) if entry.modifier else 0
            return self.resolve(entry.name, budget, state.follow(entry, value))
        return self._finish_leaf(entry, state)

    def _expand_set(
        self,
        item_set: ItemSet,
        state: ResolutionState,
        budget: float | None,
    ) -> ResolveResult:
        """Resolve every member on its own branch; reject the set as a whole."""
        members: list[SingleResult] = []
        for member in item_set.items:
            branch = state.zeroed()
            if isinstance(member, ItemSet):
                outcome = self._expand_set(member, branch, budget)
            else:
                outcome = self._resolve_entry(member, branch, budget)
            if outcome.exceeded:
                return Exceeded(reason=f"set member rejected: {outcome.reason}", breadcrumb=state.breadcrumb)
            members.extend(outcome.items)

        total = sum(r.total_value for r in members)
        if item_set.max_value is not None:
            limit = item_set.max_value if budget is None else max(item_set.max_value, budget)
            if total > limit:
                return Exceeded(
                    reason=f"set total {total} over limit {limit}",
                    breadcrumb=state.breadcrumb,
                )
        return SetResult(items=tuple(members))

    def _finish_leaf(self, leaf: LeafItem, state: ResolutionState) -> SingleResult:
        quantity = None
        unit = None
        if leaf.display_value is not None:
            quantity = evaluate(leaf.display_value, self.rng)
            unit = normalize_unit(leaf.unit)
            value = to_canonical_value(quantity, unit)
        else:
            value = evaluate(leaf.value, self.rng)
        state = state.add_value(value)

        total, modifiers = self.augmenter.augment(
            state.terminal_table,
            state.running_value,
            state.modifiers,
            state.pending_materials,
        )
        return SingleResult(
            item=leaf,
            breadcrumb=state.breadcrumb,
            modifiers=modifiers,
            total_value=total,
            active_max_value=state.active_max_value,
            terminal_table=state.terminal_table,
            display_quantity=quantity,
            display_unit=unit,
        )

    def _budget_violation(self, entry: LeafItem | TableReference, budget: float | None) -> str:
        if budget is None:
            return ""
        if entry.max_value is not None and entry.max_value > budget:
            return f"max_value {entry.max_value} above budget {budget}"
        if (
            self.config.budget_gates_min_value
            and entry.min_value is not None
            and entry.min_value > budget
        ):
            return f"min_value {entry.min_value} above budget {budget}"
        return ""
