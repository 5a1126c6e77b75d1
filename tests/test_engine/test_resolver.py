"""Tests for src/table_roller/engine/resolver.py."""
from __future__ import annotations

import random

import pytest

from table_roller.engine.resolver import TableResolver, closest_tier
from table_roller.exceptions import CycleOrTooDeepError, TableNotFoundError
from table_roller.models.config import RollerConfig
from table_roller.models.entry import parse_table
from table_roller.models.result import Exceeded, ResolutionState, SetResult, SingleResult


def _resolver(repo, rng, **config):
    return TableResolver(repo, RollerConfig(**config), rng=rng)


def _chain(length: int) -> dict:
    """t0 -> t1 -> ... -> t{length-1} -> leaf."""
    tables = {f"t{i}": [{"type": "table", "name": f"t{i + 1}"}] for i in range(length - 1)}
    tables[f"t{length - 1}"] = [{"name": "Bottom", "value": 1}]
    return tables


class TestEndToEnd:
    def test_armor_to_leather(self, armor_repo, first_pick_rng):
        result = _resolver(armor_repo, first_pick_rng).resolve("armor")
        assert isinstance(result, SingleResult)
        assert result.breadcrumb == ("armor", "light_armor")
        assert result.name == "Leather Armor"
        assert result.total_value == 10
        assert result.terminal_table == "light_armor"

    def test_special_material_multiplier(self, make_repo, first_pick_rng):
        repo = make_repo({
            "armory": [{"type": "table", "name": "weapons", "modifier": "special_materials"}],
            "weapons": [{"name": "Longsword", "value": 50}],
            "special_materials": [{"name": "Silvered", "value": {"weapons": "2x"}}],
        })
        result = _resolver(repo, first_pick_rng).resolve("armory")
        assert result.total_value == 100
        assert result.modifiers == ("Silvered",)
        assert result.terminal_table == "weapons"

    def test_missing_table_propagates(self, make_repo, first_pick_rng):
        repo = make_repo({"armor": [{"type": "table", "name": "nowhere"}]})
        with pytest.raises(TableNotFoundError):
            _resolver(repo, first_pick_rng).resolve("armor")


class TestTableReferences:
    def test_value_ignored_without_modifier(self, make_repo, first_pick_rng):
        repo = make_repo({
            "armor": [{"type": "table", "name": "light_armor", "value": 500}],
            "light_armor": [{"name": "Leather Armor", "value": 10}],
        })
        result = _resolver(repo, first_pick_rng).resolve("armor")
        assert result.total_value == 10
        assert result.modifiers == ()

    def test_value_added_with_modifier(self, make_repo, first_pick_rng):
        repo = make_repo({
            "armor": [{"type": "table", "name": "light_armor", "modifier": "+1", "value": 1000}],
            "light_armor": [{"name": "Leather Armor", "value": 10}],
        })
        result = _resolver(repo, first_pick_rng).resolve("armor")
        assert result.total_value == 1010
        assert result.modifiers == ("+1",)

    def test_modifiers_accumulate_in_order(self, make_repo, first_pick_rng):
        repo = make_repo({
            "a": [{"type": "table", "name": "b", "modifier": ["Masterwork", "+1"]}],
            "b": [{"type": "table", "name": "c", "modifier": "Flaming"}],
            "c": [{"name": "Sword", "value": 15}],
        })
        result = _resolver(repo, first_pick_rng).resolve("a")
        assert result.modifiers == ("Masterwork", "+1", "Flaming")
        assert result.breadcrumb == ("a", "b", "c")

    def test_dice_value_on_reference(self, make_repo, first_pick_rng):
        repo = make_repo({
            "a": [{"type": "table", "name": "b", "modifier": "Gilded", "value": "2d6*10"}],
            "b": [{"name": "Cup", "value": 1}],
        })
        assert _resolver(repo, first_pick_rng).resolve("a").total_value == 21

    @pytest.mark.parametrize("outer, inner, expected", [
        (20, 50, 20),
        (50, 20, 20),
        (None, 30, 30),
        (30, None, 30),
    ])
    def test_active_max_keeps_tighter_ceiling(self, make_repo, first_pick_rng, outer, inner, expected):
        repo = make_repo({
            "a": [{"type": "table", "name": "b", "max_value": outer}],
            "b": [{"type": "table", "name": "c", "max_value": inner}],
            "c": [{"name": "Ring", "value": 5}],
        })
        result = _resolver(repo, first_pick_rng).resolve("a")
        assert result.active_max_value == expected

    def test_repeated_table_not_duplicated_in_breadcrumb(self, armor_repo, first_pick_rng):
        seeded = ResolutionState(breadcrumb=("armor",))
        result = _resolver(armor_repo, first_pick_rng).resolve("armor", state=seeded)
        assert result.breadcrumb == ("armor", "light_armor")


class TestLeafValues:
    def test_display_value_converted(self, make_repo, first_pick_rng):
        repo = make_repo({
            "coins": [{"name": "Silver Pieces", "display_value": "2d6*10", "unit": "silver"}],
        })
        result = _resolver(repo, first_pick_rng).resolve("coins")
        assert result.display_quantity == 20
        assert result.display_unit == "sp"
        assert result.total_value == pytest.approx(2)

    def test_unknown_unit_uses_silver_rule(self, make_repo, first_pick_rng):
        repo = make_repo({"coins": [{"name": "Shells", "display_value": "40"}]})
        assert _resolver(repo, first_pick_rng).resolve("coins").total_value == pytest.approx(4)

    def test_numeric_display_value(self, make_repo, first_pick_rng):
        repo = make_repo({
            "coins": [{"name": "Silver Pieces", "display_value": 40, "unit": "silver"}],
        })
        result = _resolver(repo, first_pick_rng).resolve("coins")
        assert result.display_quantity == 40
        assert result.total_value == pytest.approx(4)

    def test_malformed_value_is_zero(self, make_repo, first_pick_rng):
        repo = make_repo({"junk": [{"name": "Odd Stone", "value": "banana"}]})
        assert _resolver(repo, first_pick_rng).resolve("junk").total_value == 0

    def test_leaf_without_value(self, make_repo, first_pick_rng):
        repo = make_repo({"junk": [{"name": "Pebble"}]})
        assert _resolver(repo, first_pick_rng).resolve("junk").total_value == 0


class TestItemSets:
    def test_bare_list_expands(self, make_repo, first_pick_rng):
        repo = make_repo({
            "hoard": [[
                {"name": "Silver Pieces", "value": 3},
                {"type": "table", "name": "gems"},
            ]],
            "gems": [{"name": "Azurite", "value": 10}],
        })
        result = _resolver(repo, first_pick_rng).resolve("hoard")
        assert isinstance(result, SetResult)
        assert [r.name for r in result.items] == ["Silver Pieces", "Azurite"]
        assert result.total_value == 13

    def test_members_do_not_share_state(self, make_repo, first_pick_rng):
        repo = make_repo({
            "hoard": [[
                {"type": "table", "name": "gems", "modifier": "Cut", "value": 5},
                {"name": "Silver Pieces", "value": 3},
            ]],
            "gems": [{"name": "Azurite", "value": 10}],
        })
        first, second = _resolver(repo, first_pick_rng).resolve("hoard").items
        assert first.breadcrumb == ("hoard", "gems")
        assert first.modifiers == ("Cut",)
        assert first.total_value == 15
        assert second.breadcrumb == ("hoard",)
        assert second.modifiers == ()
        assert second.total_value == 3

    def test_wrapped_set_over_limit_rejected(self, make_repo, first_pick_rng):
        repo = make_repo({
            "hoard": [{"items": [{"name": "Gem", "value": 60}, {"name": "Gem", "value": 60}], "max_value": 100}],
        })
        result = _resolver(repo, first_pick_rng).resolve("hoard")
        assert isinstance(result, Exceeded)
        assert result.items == ()

    def test_budget_raises_set_limit(self, make_repo, first_pick_rng):
        repo = make_repo({
            "hoard": [{"items": [{"name": "Gem", "value": 60}, {"name": "Gem", "value": 60}], "max_value": 100}],
        })
        result = _resolver(repo, first_pick_rng).resolve("hoard", budget=150)
        assert isinstance(result, SetResult)
        assert result.total_value == 120

    def test_rejected_member_rejects_whole_set(self, make_repo, first_pick_rng):
        repo = make_repo({
            "hoard": [[{"name": "Coin", "value": 1}, {"name": "Crown", "value": 900, "max_value": 1000}]],
        })
        result = _resolver(repo, first_pick_rng).resolve("hoard", budget=50)
        assert result.exceeded
        assert result.items == ()


class TestBudgetGating:
    def test_reference_max_above_budget_exceeds(self, make_repo, first_pick_rng):
        repo = make_repo({
            "treasure": [{"type": "table", "name": "hoard", "max_value": 1000}],
            "hoard": [{"name": "Crown", "value": 900}],
        })
        result = _resolver(repo, first_pick_rng).resolve("treasure", budget=100)
        assert isinstance(result, Exceeded)
        assert "max_value" in result.reason

    def test_no_budget_no_gating(self, make_repo, first_pick_rng):
        repo = make_repo({
            "treasure": [{"type": "table", "name": "hoard", "max_value": 1000}],
            "hoard": [{"name": "Crown", "value": 900}],
        })
        assert isinstance(_resolver(repo, first_pick_rng).resolve("treasure"), SingleResult)

    def test_min_value_gated_only_when_enabled(self, make_repo, first_pick_rng):
        repo = make_repo({
            "treasure": [{"type": "table", "name": "hoard", "min_value": 500}],
            "hoard": [{"name": "Crown", "value": 50}],
        })
        gated = _resolver(repo, first_pick_rng, budget_gates_min_value=True)
        open_ = _resolver(repo, first_pick_rng, budget_gates_min_value=False)
        assert gated.resolve("treasure", budget=100).exceeded
        assert not open_.resolve("treasure", budget=100).exceeded


class TestFilterByMax:
    TIERS = {
        "treasure": [
            {"type": "table", "name": "minor", "max_value": 100},
            {"type": "table", "name": "moderate", "max_value": 1000},
            {"type": "table", "name": "major", "max_value": 10000},
        ],
        "minor": [{"name": "Copper Ring", "value": 5}],
        "moderate": [{"name": "Silver Ring", "value": 50}],
        "major": [{"name": "Gold Ring", "value": 500}],
    }

    def test_closest_tier_helper(self):
        entries = parse_table("treasure", self.TIERS["treasure"])
        assert [e.name for e in closest_tier(entries, 5000)] == ["moderate"]
        assert [e.name for e in closest_tier(entries, 1000)] == ["moderate"]
        assert closest_tier(entries, 50) == entries

    def test_picks_closest_tier_under_budget(self, make_repo):
        repo = make_repo(self.TIERS)
        resolver = _resolver(repo, random.Random(4), filter_by_max=True)
        for _ in range(50):
            result = resolver.resolve("treasure", budget=5000)
            assert result.breadcrumb == ("treasure", "moderate")

    def test_no_qualifying_tier_skips_restriction(self, make_repo, first_pick_rng):
        repo = make_repo(self.TIERS)
        result = _resolver(repo, first_pick_rng, filter_by_max=True).resolve("treasure", budget=50)
        # First tier (max 100) is drawn and then rejected against the budget
        assert result.exceeded


class TestDepth:
    def test_five_hops_within_cap(self, make_repo, first_pick_rng):
        repo = make_repo(_chain(5))
        resolver = TableResolver(repo, RollerConfig(), rng=first_pick_rng, max_depth=5)
        result = resolver.resolve("t0")
        assert len(result.breadcrumb) == 5
        assert result.name == "Bottom"

    def test_too_deep_raises(self, make_repo, first_pick_rng):
        repo = make_repo(_chain(6))
        resolver = TableResolver(repo, RollerConfig(), rng=first_pick_rng, max_depth=5)
        with pytest.raises(CycleOrTooDeepError):
            resolver.resolve("t0")

    def test_cycle_raises(self, make_repo, first_pick_rng):
        repo = make_repo({
            "a": [{"type": "table", "name": "b"}],
            "b": [{"type": "table", "name": "a"}],
        })
        with pytest.raises(CycleOrTooDeepError) as excinfo:
            _resolver(repo, first_pick_rng).resolve("a")
        assert excinfo.value.max_depth == 64


class TestStateIsolation:
    def test_caller_state_untouched(self, armor_repo, first_pick_rng):
        state = ResolutionState(breadcrumb=("start",), modifiers=("Old",))
        _resolver(armor_repo, first_pick_rng).resolve("armor", state=state)
        assert state.breadcrumb == ("start",)
        assert state.modifiers == ("Old",)
        assert state.running_value == 0
