from __future__ import annotations
import json
from pathlib import Path
from typing import Any

CONTENT_DIR = Path(__file__).parent
TABLES_DIR = CONTENT_DIR / "tables"

def load_json(filepath: Path) -> Any:
    with open(filepath, "r", encoding="utf-8") as f:
        return json.load(f)

def table_path(table_name: str, tables_dir: Path = TABLES_DIR) -> Path:
    return tables_dir / f"{table_name}.json"

def list_table_names(tables_dir: Path = TABLES_DIR) -> list[str]:
    """Names of every table file in a directory, sorted."""
    if not tables_dir.exists():
        return []
    return sorted(f.stem for f in tables_dir.glob("*.json"))


def load_all_tables(tables_dir: Path = TABLES_DIR) -> dict[str, Any]:
    """Load every table file in a directory, keyed by table name."""
    return {name: load_json(table_path(name, tables_dir)) for name in list_table_names(tables_dir)}
