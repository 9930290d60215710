"""
Tests for power rating and node difficulty recalculation.
"""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from domain.models.node_difficulty import DifficultySettings, NodeDifficulty
from domain.models.player import Player
from domain.models.war_stats import AllianceTotals, BattlegroupDeathEntry, NodeEntry
from rating_system import WarRatingSystem, solo_rate


@pytest.fixture
def rating_system():
    return WarRatingSystem(solo_rate_multiplier=1.6, node_count=50)


@pytest.fixture
def settings():
    return DifficultySettings(adjustment_factor=0.1, min_value=0.1, max_value=5.0, update_threshold=10)


def node(value, death_penalty=0.0, kill_bonus=0.0):
    return NodeDifficulty.from_value(value, kill_bonus, death_penalty)


@pytest.fixture
def uniform_nodes():
    return {n: node(1.5, death_penalty=0.1, kill_bonus=0.1) for n in range(1, 51)}


class TestSoloRate:
    def test_zero_fights_is_zero(self):
        assert solo_rate(0, 0) == 0

    def test_all_kills(self):
        assert solo_rate(10, 0) == 1.0

    def test_mixed(self):
        assert solo_rate(20, 5) == pytest.approx(0.8)


class TestPowerRating:
    def test_player_with_no_fights_rates_zero(self, rating_system):
        player = Player(name="Empty", battlegroup="BG1")
        result = rating_system.compute_power_rating(
            player, {1: node(1.5, 0.5)}, AllianceTotals(kills=100, deaths=50)
        )
        assert result.power_rating == 0.0
        assert result.difficulty_rating_per_fight == 0.0
        assert result.solo_rate == 0

    def test_kills_times_node_value_with_no_bonus(self, rating_system, uniform_nodes):
        """Matching the alliance solo rate gives no bonus."""
        player = Player(name="Ace", kills_per_node={1: 10})
        result = rating_system.compute_power_rating(
            player, uniform_nodes, AllianceTotals(kills=10, deaths=0)
        )
        assert result.power_rating == 15.0
        assert result.difficulty_rating_per_fight == 1.5

    def test_deaths_only_player_has_no_difficulty_per_fight(self, rating_system, uniform_nodes):
        player = Player(name="Fodder", deaths_per_node={3: 4})
        result = rating_system.compute_power_rating(
            player, uniform_nodes, AllianceTotals(kills=100, deaths=50)
        )
        kill_rating = -0.1 * 4
        # Solo rate 0 against an alliance rate of 2/3 flips the penalty into a small bonus
        expected = round(kill_rating + kill_rating * (0 - 100 / 150) * 1.6, 2)
        assert result.power_rating == pytest.approx(expected)
        assert result.power_rating == pytest.approx(0.03)
        assert result.difficulty_rating_per_fight == 0.0
        assert result.kills == 0
        assert result.deaths == 4

    def test_end_to_end_example(self, rating_system):
        """20 kills / 5 deaths on a 1.5 node in a 100/50 alliance rates 36.4."""
        player = Player(name="Ace", kills_per_node={1: 20}, deaths_per_node={1: 5})
        result = rating_system.compute_power_rating(
            player, {1: node(1.5)}, AllianceTotals(kills=100, deaths=50)
        )
        assert result.power_rating == 36.4
        assert result.difficulty_rating_per_fight == 1.5
        assert result.kills == 20
        assert result.deaths == 5

    def test_below_alliance_solo_rate_is_penalized(self, rating_system):
        player = Player(name="Low", kills_per_node={1: 5}, deaths_per_node={1: 5})
        result = rating_system.compute_power_rating(
            player, {1: node(2.0)}, AllianceTotals(kills=100, deaths=50)
        )
        # 10 * (0.5 - 2/3) * 1.6 = -2.67
        assert result.power_rating == pytest.approx(7.33, abs=0.01)

    def test_death_penalty_reduces_kill_rating(self, rating_system):
        player = Player(name="Tank", kills_per_node={1: 4}, deaths_per_node={1: 2})
        result = rating_system.compute_power_rating(
            player, {1: node(2.0, death_penalty=0.5)}, AllianceTotals(kills=4, deaths=2)
        )
        assert result.power_rating == 7.0
        # Difficulty per fight ignores the penalty
        assert result.difficulty_rating_per_fight == 2.0

    def test_counts_on_unknown_nodes_add_to_totals_only(self, rating_system):
        player = Player(name="Roamer", kills_per_node={1: 2, 99: 3})
        result = rating_system.compute_power_rating(
            player, {1: node(1.0)}, AllianceTotals(kills=5, deaths=0)
        )
        assert result.kills == 5
        assert result.power_rating == 2.0
        assert result.difficulty_rating_per_fight == 0.4

    def test_unusable_node_contributes_nothing(self, rating_system):
        player = Player(name="Ace", kills_per_node={1: 5, 2: 3})
        nodes = {1: replace(NodeDifficulty(), current_value="abc"), 2: node(2.0)}
        result = rating_system.compute_power_rating(player, nodes, AllianceTotals(kills=8, deaths=0))
        assert result.power_rating == 6.0

    def test_empty_node_table_rates_zero(self, rating_system):
        player = Player(name="Ace", kills_per_node={1: 5})
        result = rating_system.compute_power_rating(player, {}, AllianceTotals(kills=5, deaths=0))
        assert result.power_rating == 0.0
        assert result.kills == 5

    def test_ratings_keep_input_order_and_flags(self, rating_system):
        players = [
            Player(name="B", kills_per_node={1: 1}, hidden=True),
            Player(name="A", kills_per_node={1: 3}, is_custom=True),
        ]
        ratings = rating_system.compute_power_ratings(players, {1: node(1.0)})
        assert [r.name for r in ratings] == ["B", "A"]
        assert ratings[0].hidden is True
        assert ratings[1].is_custom is True

    def test_broken_player_degrades_to_zero_rating(self, rating_system):
        players = [Player(name="Bad", kills_per_node=None), Player(name="Good", kills_per_node={1: 2})]
        ratings = rating_system.compute_power_ratings(
            players, {1: node(1.0)}, AllianceTotals(kills=2, deaths=0)
        )
        assert ratings[0].power_rating == 0.0
        assert ratings[0].kills == 0
        assert ratings[1].power_rating == 2.0


class TestAllianceTotals:
    def test_includes_hidden_players_and_battlegroup_deaths(self, rating_system):
        players = [
            Player(name="A", kills_per_node={1: 10}, deaths_per_node={1: 2}),
            Player(name="B", kills_per_node={2: 5}, deaths_per_node={2: 3}, hidden=True),
        ]
        bg_deaths = [
            BattlegroupDeathEntry(battlegroup="BG1", deaths=4),
            BattlegroupDeathEntry(battlegroup="BG2", deaths=1),
        ]
        totals = rating_system.compute_alliance_totals(players, bg_deaths)
        assert totals == AllianceTotals(kills=15, deaths=10)


class TestNodeStats:
    def test_aggregates_kills_and_deaths_per_node(self, rating_system):
        entries = [
            NodeEntry(player="A", node=1, deaths=2),
            NodeEntry(player="B", node=1, deaths=0),
            NodeEntry(player="A", node=7, deaths=1),
        ]
        stats = rating_system.aggregate_node_stats(entries)
        assert len(stats) == 50
        assert stats[1] == (2, 2)
        assert stats[7] == (1, 1)
        assert stats[2] == (0, 0)

    def test_skips_carry_over_and_nodeless_entries(self, rating_system):
        entries = [
            NodeEntry(player="A", node=1, carry_over=True),
            NodeEntry(player="A", node=None, deaths=3),
            NodeEntry(player="A", node=51, deaths=1),
        ]
        stats = rating_system.aggregate_node_stats(entries)
        assert sum(k for k, _ in stats.values()) == 0
        assert sum(d for _, d in stats.values()) == 0


class TestDifficultyRecalculation:
    def test_formula_and_clamping(self, rating_system, settings):
        stats = {1: (10, 30), 2: (5, 10)}
        updated = rating_system.recalculate_node_difficulty(stats, {}, settings)

        total_difficulty = 40 / (150 * 419)
        expected_node2 = ((10 / (150 * 431)) / total_difficulty) * 10 + 1
        assert updated[1].current_value == 5.0  # 8.29 before clamping
        assert updated[2].current_value == pytest.approx(expected_node2)
        assert updated[3].current_value == 1.0
        assert updated[1].total_kills == 10
        assert updated[1].total_deaths == 30
        assert len(updated) == 50

    def test_is_idempotent(self, rating_system, settings):
        stats = {1: (10, 3), 2: (5, 10), 30: (1, 1)}
        first = rating_system.recalculate_node_difficulty(stats, {}, settings)
        second = rating_system.recalculate_node_difficulty(stats, first, settings)
        assert {n: d.current_value for n, d in first.items()} == {
            n: d.current_value for n, d in second.items()
        }

    def test_zero_deaths_falls_back_to_clamped_base(self, rating_system, settings):
        nodes = {1: node(7.0), 2: node(0.01), 3: node(2.5)}
        updated = rating_system.recalculate_node_difficulty({}, nodes, settings)
        assert updated[1].current_value == 5.0
        assert updated[2].current_value == 0.1
        assert updated[3].current_value == 2.5
        assert updated[4].current_value == 1.0
        for difficulty in updated.values():
            assert difficulty.current_value == difficulty.current_value  # not NaN

    def test_results_always_within_bounds(self, rating_system):
        settings = DifficultySettings(min_value=1.5, max_value=2.0)
        stats = {n: (1, n % 4) for n in range(1, 51)}
        updated = rating_system.recalculate_node_difficulty(stats, {}, settings)
        assert all(1.5 <= d.current_value <= 2.0 for d in updated.values())

    def test_keeps_other_parameters_and_input_untouched(self, rating_system, settings):
        nodes = {1: NodeDifficulty.from_value(2.0, 0.3, 0.4)}
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        updated = rating_system.recalculate_node_difficulty({1: (1, 2)}, nodes, settings, now=now)
        assert updated[1].base_value == 2.0
        assert updated[1].kill_bonus == 0.3
        assert updated[1].death_penalty == 0.4
        assert updated[1].last_updated == now.isoformat()
        assert nodes[1].current_value == 2.0
        assert nodes[1].last_updated is None

    def test_nodes_outside_range_are_preserved(self, rating_system, settings):
        extra = node(3.3)
        updated = rating_system.recalculate_node_difficulty({}, {99: extra}, settings)
        assert updated[99] is extra
