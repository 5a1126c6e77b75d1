"""Application bootstrap — wires config, repository, controller and display."""
from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from table_roller.exceptions import TableRollerError
from table_roller.models.config import RollerConfig

logger = logging.getLogger(__name__)


def _load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load config.toml from project root."""
    import tomllib

    config_path = config_path or Path(__file__).parent.parent.parent / "config.toml"
    if config_path.exists():
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    return {}


def configure_logging(level: str | int = "WARNING") -> None:
    """Send log records to stderr through rich, away from the result output."""
    from rich.logging import RichHandler

    from table_roller.cli.display import error_console

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


class RollerApp:
    """Main application class: builds a RollerConfig and runs the controller."""

    def __init__(self, config_path: Path | None = None, data_dir: str | None = None):
        self.config = _load_config(config_path)
        self.data_dir_override = data_dir

        # Lazy-initialized components
        self._repository = None
        self._display = None

    # -- Component initialization (lazy) --

    @property
    def repository(self):
        if self._repository is None:
            from table_roller.storage.table_repo import JsonTableRepository

            data_dir = self.data_dir_override or self.config.get("storage", {}).get("data_dir") or None
            self._repository = JsonTableRepository(data_dir)
        return self._repository

    @property
    def display(self):
        if self._display is None:
            from table_roller.cli.display import Display

            display_cfg = self.config.get("display", {})
            self._display = Display(
                width=display_cfg.get("width"),
                plain=display_cfg.get("plain", False),
            )
        return self._display

    @property
    def log_level(self) -> str:
        return str(self.config.get("logging", {}).get("level", "WARNING")).upper()

    def build_config(self, **overrides: Any) -> RollerConfig:
        """Merge [roller] defaults from config.toml with non-None overrides."""
        settings = dict(self.config.get("roller", {}))
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return RollerConfig.model_validate(settings)

    # -- Commands --

    def roll(self, seed: int | None = None, **overrides: Any) -> int:
        """Roll and print results. Returns a process exit code."""
        from table_roller.engine import SamplingController

        try:
            config = self.build_config(**overrides)
        except ValidationError as exc:
            self.display.show_error(f"Invalid configuration: {exc}")
            return 2

        rng = random.Random(seed) if seed is not None else None
        controller = SamplingController(self.repository, rng=rng)
        try:
            rolled = controller.produce_results(config)
        except TableRollerError as exc:
            logger.debug("Roll aborted", exc_info=True)
            self.display.show_error(str(exc))
            return 1

        self.display.show_results(rolled, budget=config.user_max_value)
        return 0

    def list_tables(self) -> int:
        names = self.repository.table_names()
        if not names:
            self.display.show_error(f"No tables found in {self.repository.data_dir}")
            return 1
        self.display.show_tables(names)
        return 0
