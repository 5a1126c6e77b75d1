"""Dice rolling engine — pure math, no I/O."""
from __future__ import annotations

import logging
import math
import random
import re
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# Pattern: NdM, NdMkhK, NdMklK, optional +/-X
_DICE_RE = re.compile(
    r"^(\d+)d(\d+)"
    r"(?:kh(\d+)|kl(\d+))?"
    r"([+-]\d+)?$",
    re.IGNORECASE,
)

# Pattern: NdM*S or NdM/S, S may be fractional
_SCALED_RE = re.compile(r"^(\d+d\d+)([*/])(\d+(?:\.\d+)?|\.\d+)$", re.IGNORECASE)


@dataclass
class DiceResult:
    expression: str
    individual_rolls: list[int]
    modifier: int = 0
    total: int = 0


def roll(expression: str, rng: random.Random | None = None) -> DiceResult:
    """Roll dice from an expression like '2d6+3', '1d20', '4d6kh3'."""
    rng = rng or random
    expr = expression.replace(" ", "")
    m = _DICE_RE.match(expr)
    if not m:
        raise ValueError(f"Invalid dice expression: {expression}")

    num_dice = int(m.group(1))
    die_size = int(m.group(2))
    if die_size < 1:
        raise ValueError(f"Invalid die size in: {expression}")
    keep_highest = int(m.group(3)) if m.group(3) else None
    keep_lowest = int(m.group(4)) if m.group(4) else None
    modifier = int(m.group(5)) if m.group(5) else 0

    rolls = [rng.randint(1, die_size) for _ in range(num_dice)]

    if keep_highest is not None:
        kept = sorted(rolls, reverse=True)[:keep_highest]
    elif keep_lowest is not None:
        kept = sorted(rolls)[:keep_lowest]
    else:
        kept = rolls

    total = sum(kept) + modifier
    return DiceResult(
        expression=expression,
        individual_rolls=rolls,
        modifier=modifier,
        total=total,
    )


def evaluate(expr: Any, rng: random.Random | None = None) -> int | float:
    """Evaluate a table value: a number, a dice string, or a numeric string.

    ``"2d6"`` rolls, ``"2d6*10"`` and ``"3d4/2"`` roll then scale, ``"12.5"``
    parses as a float. Anything else evaluates to 0 so that one malformed
    table row never aborts a roll.
    """
    if expr is None or isinstance(expr, bool):
        return 0
    if isinstance(expr, (int, float)):
        return expr
    if not isinstance(expr, str):
        return 0

    text = expr.replace(" ", "")
    scaled = _SCALED_RE.match(text)
    if scaled:
        base = evaluate(scaled.group(1), rng)
        scalar = float(scaled.group(3))
        if scaled.group(2) == "*":
            result = base * scalar
        elif scalar == 0:
            logger.debug("Division by zero in %r, using 0", expr)
            return 0
        else:
            result = base / scalar
        return int(result) if float(result).is_integer() else result

    try:
        if _DICE_RE.match(text):
            return roll(text, rng).total
        number = float(text)
    except ValueError:
        logger.debug("Unparsable value %r, using 0", expr)
        return 0
    return number if math.isfinite(number) else 0
