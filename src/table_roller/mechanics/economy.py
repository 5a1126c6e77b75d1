"""Currency mechanics — pure conversions between coin units and gold, no I/O."""
from __future__ import annotations

# Gold value of one coin of each unit
COIN_VALUES: dict[str, float] = {
    "cp": 0.01,
    "sp": 0.1,
    "gp": 1.0,
    "pp": 10.0,
}

_UNIT_ALIASES: dict[str, str] = {
    "copper": "cp",
    "silver": "sp",
    "gold": "gp",
    "platinum": "pp",
}

DEFAULT_UNIT = "sp"


def normalize_unit(unit: str | None) -> str:
    """Return the two-letter abbreviation for a unit name.

    Unknown or missing units follow the silver rule.
    """
    if not unit:
        return DEFAULT_UNIT
    key = unit.strip().lower()
    key = _UNIT_ALIASES.get(key, key)
    return key if key in COIN_VALUES else DEFAULT_UNIT


def to_canonical_value(quantity: float, unit: str | None) -> float:
    """Convert a coin count to its gold value.

    Silver divides by 10, copper by 100, platinum multiplies by 10.
    """
    abbr = normalize_unit(unit)
    if abbr == "cp":
        return quantity / 100
    if abbr == "sp":
        return quantity / 10
    if abbr == "pp":
        return quantity * 10
    return quantity


def format_value(gp_value: float | None) -> str:
    """Format a gold value into gp/sp/cp denominations, e.g. '12 gp 5 sp'."""
    if gp_value is None:
        return ""
    cp_total = int(round(float(gp_value) * 100))
    gp, rem = divmod(cp_total, 100)
    sp, cp = divmod(rem, 10)
    parts = []
    if gp:
        parts.append(f"{gp} gp")
    if sp:
        parts.append(f"{sp} sp")
    if cp:
        parts.append(f"{cp} cp")
    return " ".join(parts) if parts else "0 gp"


def format_quantity(quantity: float, unit: str | None) -> str:
    """Format a displayed coin count in its own unit, e.g. '35 sp'."""
    amount = int(quantity) if float(quantity).is_integer() else quantity
    return f"{amount} {normalize_unit(unit)}"
