from __future__ import annotations

from table_roller.engine.controller import SamplingController
from table_roller.engine.materials import MaterialAugmenter
from table_roller.engine.resolver import TableResolver

__all__ = [
    "SamplingController",
    "MaterialAugmenter",
    "TableResolver",
]
