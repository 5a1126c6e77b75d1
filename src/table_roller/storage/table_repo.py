"""Repositories that serve parsed tables by name."""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from table_roller.content.loader import TABLES_DIR, list_table_names, load_json, table_path
from table_roller.exceptions import InvalidTableError, TableNotFoundError
from table_roller.models.entry import Entry, SpecialMaterial, parse_materials, parse_table

logger = logging.getLogger(__name__)


class TableRepository(ABC):
    """Lookup of tables by name. Parsed tables are cached per name."""

    def __init__(self) -> None:
        self._tables: dict[str, list[Entry]] = {}
        self._materials: dict[str, list[SpecialMaterial]] = {}

    @abstractmethod
    def _load_raw(self, table_name: str) -> Any:
        """Return the raw rows for a table or raise TableNotFoundError."""

    @abstractmethod
    def table_names(self) -> list[str]: ...

    def get(self, table_name: str) -> list[Entry]:
        if table_name not in self._tables:
            self._tables[table_name] = parse_table(table_name, self._load_raw(table_name))
            logger.debug("Loaded table %s (%d entries)", table_name, len(self._tables[table_name]))
        return self._tables[table_name]

    def get_materials(self, table_name: str) -> list[SpecialMaterial]:
        if table_name not in self._materials:
            self._materials[table_name] = parse_materials(table_name, self._load_raw(table_name))
        return self._materials[table_name]

    def has_table(self, table_name: str) -> bool:
        return table_name in self.table_names()


class JsonTableRepository(TableRepository):
    """Tables stored as ``<data_dir>/<name>.json`` files."""

    def __init__(self, data_dir: str | Path | None = None) -> None:
        super().__init__()
        self.data_dir = Path(data_dir) if data_dir else TABLES_DIR

    def _load_raw(self, table_name: str) -> Any:
        path = table_path(table_name, self.data_dir)
        if not path.is_file():
            raise TableNotFoundError(table_name)
        try:
            return load_json(path)
        except json.JSONDecodeError as exc:
            raise InvalidTableError(f"Table '{table_name}' is not valid JSON: {exc}") from exc

    def table_names(self) -> list[str]:
        return list_table_names(self.data_dir)


class InMemoryTableRepository(TableRepository):
    """Tables held in a dict of name -> raw rows."""

    def __init__(self, tables: dict[str, Any] | None = None) -> None:
        super().__init__()
        self._raw = dict(tables or {})

    def _load_raw(self, table_name: str) -> Any:
        try:
            return self._raw[table_name]
        except KeyError:
            raise TableNotFoundError(table_name) from None

    def table_names(self) -> list[str]:
        return sorted(self._raw)
