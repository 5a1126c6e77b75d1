"""Budget-constrained sampling: reroll the resolver until a roll fits."""
from __future__ import annotations

import logging
import random

from table_roller.engine.resolver import MAX_DEPTH, TableResolver
from table_roller.models.config import RollerConfig
from table_roller.models.result import ResolveResult, RolledItem
from table_roller.storage.table_repo import TableRepository

logger = logging.getLogger(__name__)

# Attempt ceiling per result-set without a budget
SINGLE_ATTEMPTS = 100
# Attempt ceiling for the aggregate result-set when a budget is set
AGGREGATE_ATTEMPTS = 1000
# Hard cap on emitted items and result-sets per run
MAX_RESULTS = 100


def rejection_reason(result: ResolveResult, remaining: float | None) -> str:
    """Why a roll must be rerolled, or an empty string if it is acceptable."""
    if result.exceeded:
        return result.reason or "exceeded"
    for item in result.items:
        if item.over_ceiling():
            return f"{item.name} worth {item.total_value} over ceiling {item.active_max_value}"
    if remaining is not None and result.total_value > remaining:
        return f"roll worth {result.total_value} over remaining budget {remaining}"
    return ""


class SamplingController:
    """Builds result-sets by repeatedly resolving the origin table.

    Without a budget every requested result is its own set holding one
    accepted roll. With a budget there is one aggregate set that keeps
    accepting rolls until it holds ``result_count`` items or the attempt
    ceiling is reached. A set that accepts nothing is a soft failure: it is
    logged and recorded in ``failures``, never raised.
    """

    def __init__(
        self,
        repository: TableRepository,
        rng: random.Random | None = None,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        self.repository = repository
        self.rng = rng
        self.max_depth = max_depth
        self.failures: list[str] = []

    def produce_results(self, config: RollerConfig) -> list[RolledItem]:
        resolver = TableResolver(self.repository, config, self.rng, self.max_depth)
        self.failures = []

        requested = min(config.result_count, MAX_RESULTS)
        if config.has_budget:
            set_count, target, ceiling = 1, requested, AGGREGATE_ATTEMPTS
        else:
            set_count, target, ceiling = requested, 1, SINGLE_ATTEMPTS

        output: list[RolledItem] = []
        set_index = 0
        for slot in range(set_count):
            items, set_index, attempts = self._fill_set(resolver, config, target, ceiling, set_index)
            if not items:
                message = (
                    f"Could not generate a valid result for set {slot + 1} "
                    f"from '{config.origin_table}' after {attempts} attempt{'s' if attempts != 1 else ''}"
                )
                logger.warning(message)
                self.failures.append(message)
            output.extend(items)
            if len(output) >= MAX_RESULTS:
                break
        return output[:MAX_RESULTS]

    def _fill_set(
        self,
        resolver: TableResolver,
        config: RollerConfig,
        target: int,
        ceiling: int,
        set_index: int,
    ) -> tuple[list[RolledItem], int, int]:
        budget = config.user_max_value
        accumulated = 0.0
        added = 0
        attempts = 0
        items: list[RolledItem] = []

        while added < target and attempts < ceiling:
            attempts += 1
            remaining = None if budget is None else budget - accumulated
            result = resolver.resolve(config.origin_table, remaining)
            reason = rejection_reason(result, remaining)
            if reason:
                logger.debug("Reroll %d/%d: %s", attempts, ceiling, reason)
                continue

            for single in result.items:
                items.append(RolledItem(result=single, set_index=set_index))
            accumulated += result.total_value
            added += len(result.items)
            set_index += 1
            if budget is None:
                break

        if items and added < target:
            logger.info(
                "Stopped after %d attempts with %d of %d items (%.2f of %.2f gp)",
                attempts, added, target, accumulated, budget or 0,
            )
        return items, set_index, attempts
