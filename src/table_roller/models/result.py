"""Resolution state and result types — immutable, shared by engine and display."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Union

from table_roller.models.entry import SPECIAL_MATERIAL_TAG, LeafItem, TableReference


@dataclass(frozen=True)
class ResolutionState:
    breadcrumb: tuple[str, ...] = ()
    modifiers: tuple[str, ...] = ()
    pending_materials: tuple[str, ...] = ()
    running_value: float = 0
    active_max_value: Optional[float] = None
    terminal_table: Optional[str] = None
    depth: int = 0

    def visit(self, table_name: str) -> ResolutionState:
        """Enter a table: extend the breadcrumb (no consecutive duplicates)."""
        crumbs = self.breadcrumb
        if not crumbs or crumbs[-1] != table_name:
            crumbs = crumbs + (table_name,)
        return replace(
            self,
            breadcrumb=crumbs,
            terminal_table=table_name,
            depth=self.depth + 1,
        )

    def follow(self, ref: TableReference, value: float = 0) -> ResolutionState:
        """Apply a table reference's modifiers, value and ceiling."""
        modifiers = list(self.modifiers)
        pending = list(self.pending_materials)
        for tag in ref.modifier:
            if tag == SPECIAL_MATERIAL_TAG:
                pending.append(tag)
            else:
                modifiers.append(tag)

        active_max = self.active_max_value
        if ref.max_value is not None:
            active_max = ref.max_value if active_max is None else min(active_max, ref.max_value)

        crumbs = self.breadcrumb
        if not crumbs or crumbs[-1] != ref.name:
            crumbs = crumbs + (ref.name,)

        return replace(
            self,
            breadcrumb=crumbs,
            modifiers=tuple(modifiers),
            pending_materials=tuple(pending),
            running_value=self.running_value + (max(0, value) if ref.modifier else 0),
            active_max_value=active_max,
            terminal_table=ref.name,
        )

    def add_value(self, value: float) -> ResolutionState:
        return replace(self, running_value=self.running_value + max(0, value))

    def zeroed(self) -> ResolutionState:
        """Branch for a set member: same path, fresh value accumulator."""
        return replace(self, running_value=0)


@dataclass(frozen=True)
class SingleResult:
    item: LeafItem
    breadcrumb: tuple[str, ...]
    modifiers: tuple[str, ...] = ()
    total_value: float = 0
    active_max_value: Optional[float] = None
    terminal_table: Optional[str] = None
    display_quantity: Optional[float] = None
    display_unit: Optional[str] = None

    exceeded = False

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def rarity(self) -> str:
        return self.item.rarity

    @property
    def items(self) -> tuple[SingleResult, ...]:
        return (self,)

    def over_ceiling(self) -> bool:
        return self.active_max_value is not None and self.total_value > self.active_max_value


@dataclass(frozen=True)
class SetResult:
    items: tuple[SingleResult, ...] = ()

    exceeded = False

    @property
    def total_value(self) -> float:
        return sum(r.total_value for r in self.items)


@dataclass(frozen=True)
class Exceeded:
    """Rejection signal: the draw broke a budget or tier ceiling."""

    reason: str = ""
    breadcrumb: tuple[str, ...] = ()
    items: tuple[SingleResult, ...] = field(default=(), init=False)

    exceeded = True
    total_value = 0


ResolveResult = Union[SingleResult, SetResult, Exceeded]


@dataclass(frozen=True)
class RolledItem:
    result: SingleResult
    set_index: int
