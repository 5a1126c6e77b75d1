"""Shared fixtures for the table-roller test suite."""
from __future__ import annotations

import random
from typing import Any

import pytest

from table_roller.models.config import RollerConfig
from table_roller.storage.table_repo import InMemoryTableRepository


class FirstPickRng(random.Random):
    """Random source that always lands on the lowest value of every draw."""

    def random(self) -> float:
        return 0.0

    def randrange(self, start, stop=None, step=1):
        return 0 if stop is None else start

    def randint(self, a, b):
        return a


ARMOR_TABLES: dict[str, Any] = {
    "armor": [{"type": "table", "name": "light_armor", "weight": 1}],
    "light_armor": [{"name": "Leather Armor", "value": 10, "weight": 1}],
}


@pytest.fixture
def first_pick_rng() -> FirstPickRng:
    return FirstPickRng()


@pytest.fixture
def armor_repo() -> InMemoryTableRepository:
    return InMemoryTableRepository(ARMOR_TABLES)


@pytest.fixture
def make_repo():
    def _make(tables: dict[str, Any]) -> InMemoryTableRepository:
        return InMemoryTableRepository(tables)
    return _make


@pytest.fixture
def default_config() -> RollerConfig:
    return RollerConfig()


@pytest.fixture
def seeded_rng():
    state = random.getstate()
    random.seed(42)
    yield
    random.setstate(state)
