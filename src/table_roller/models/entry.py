from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from table_roller.exceptions import InvalidTableError

# Modifier tag that routes a table reference into special-material augmentation
SPECIAL_MATERIAL_TAG = "special_materials"

NumberOrDice = Union[int, float, str]


class _TableRow(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    weight: int = Field(default=1, ge=0)
    rarity: str = "common"
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    @field_validator("rarity", mode="before")
    @classmethod
    def _normalize_rarity(cls, v: Any) -> str:
        if v is None:
            return "common"
        return str(v).strip().lower()


class LeafItem(_TableRow):
    name: str
    value: Optional[NumberOrDice] = None
    display_value: Optional[NumberOrDice] = None
    unit: Optional[str] = None


class TableReference(_TableRow):
    type: str = "table"
    name: str
    modifier: list[str] = Field(default_factory=list)
    value: Optional[NumberOrDice] = None

    @field_validator("modifier", mode="before")
    @classmethod
    def _modifier_as_list(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return list(v)


class ItemSet(_TableRow):
    items: list[Entry] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _parse_members(cls, v: Any) -> list[Entry]:
        return [parse_entry(raw) for raw in v or []]


Entry = Union[LeafItem, TableReference, ItemSet]
ItemSet.model_rebuild()


class SpecialMaterial(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    weight: int = Field(default=1, ge=0)
    rarity: str = "common"
    value: dict[str, NumberOrDice] = Field(default_factory=dict)

    def applies_to(self, table_name: str | None) -> bool:
        return table_name is not None and table_name in self.value


def parse_entry(raw: Any) -> Entry:
    """Convert one raw JSON row into its Entry variant.

    A bare list is an item set; a dict with ``type == "table"`` is a table
    reference; a dict with ``items`` is a wrapped item set; anything else with
    a name is a leaf item.
    """
    if isinstance(raw, (LeafItem, TableReference, ItemSet)):
        return raw
    if isinstance(raw, list):
        return ItemSet(items=raw)
    if not isinstance(raw, dict):
        raise InvalidTableError(f"Unsupported table row: {raw!r}")
    try:
        if raw.get("type") == "table":
            return TableReference.model_validate(raw)
        if "items" in raw:
            return ItemSet.model_validate(raw)
        return LeafItem.model_validate(raw)
    except ValidationError as exc:
        raise InvalidTableError(str(exc)) from exc


def parse_table(table_name: str, rows: Any) -> list[Entry]:
    if not isinstance(rows, list):
        raise InvalidTableError(f"Table '{table_name}' must be a JSON array")
    return [parse_entry(row) for row in rows]


def parse_materials(table_name: str, rows: Any) -> list[SpecialMaterial]:
    if not isinstance(rows, list):
        raise InvalidTableError(f"Table '{table_name}' must be a JSON array")
    try:
        return [SpecialMaterial.model_validate(row) for row in rows]
    except ValidationError as exc:
        raise InvalidTableError(str(exc)) from exc
