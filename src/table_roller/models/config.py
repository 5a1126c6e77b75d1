from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RarityPolicy(str, Enum):
    EXCLUSIVE = "exclusive"
    CUMULATIVE = "cumulative"


class RollerConfig(BaseModel):
    """Settings for one run of the sampling controller.

    Built once (from config.toml plus CLI overrides) and passed explicitly into
    the controller and resolver. Frozen: nothing mutates it after construction.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    origin_table: str = "armor"
    result_count: int = Field(default=1, ge=1)
    user_max_value: Optional[float] = Field(default=None, ge=0)
    rare_chance: float = Field(default=10, ge=0, le=100)
    uncommon_chance: float = Field(default=20, ge=0, le=100)
    filter_by_max: bool = False
    rarity_policy: RarityPolicy = RarityPolicy.EXCLUSIVE
    budget_gates_min_value: bool = False
    material_table: str = "special_materials"

    @property
    def has_budget(self) -> bool:
        return self.user_max_value is not None
