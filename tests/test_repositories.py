"""
Tests for the SQLite repositories.
"""

import sqlite3
from unittest.mock import patch

import pytest

from domain.models.node_difficulty import DifficultySettings, NodeDifficulty
from domain.models.season import Season, SeasonArchive
from domain.models.war_stats import BattlegroupDeathEntry, NodeEntry, StreakResult
from repositories.player_repository import PlayerRepository


class TestPlayerRepository:
    def test_add_and_lookup_case_insensitive(self, repos):
        player_repo = repos["player_repo"]
        player_repo.add("Ace", "BG1", is_custom=True)

        player = player_repo.get_by_name("ACE")
        assert player.name == "Ace"
        assert player.battlegroup == "BG1"
        assert player.is_custom is True
        assert player_repo.exists("ace")

    def test_add_duplicate_raises(self, repos):
        repos["player_repo"].add("Ace", "BG1")
        with pytest.raises(ValueError):
            repos["player_repo"].add("ace", "BG2")

    def test_add_empty_name_raises(self, repos):
        with pytest.raises(ValueError):
            repos["player_repo"].add("   ", "BG1")

    def test_hidden_players_filtered(self, repos):
        player_repo = repos["player_repo"]
        player_repo.add("Ace", "BG1")
        player_repo.add("Bee", "BG2")
        assert player_repo.set_hidden("Bee", True, hidden_at="2024-01-01")
        assert not player_repo.set_hidden("Nobody", True)

        assert [p.name for p in player_repo.get_all(include_hidden=False)] == ["Ace"]
        assert [p.name for p in player_repo.get_all()] == ["Ace", "Bee"]

    def test_delete_purges_entries_and_imported_stats(self, repos):
        player_repo = repos["player_repo"]
        entry_repo = repos["entry_repo"]
        player_repo.add("Ace", "BG1")
        player_repo.save_imported_stats("Ace", {1: 3}, {1: 1})
        entry_repo.add_entry(NodeEntry(player="Ace", node=2))
        entry_repo.add_entry(NodeEntry(player="Bee", node=2))

        assert player_repo.delete("ace")
        assert player_repo.get_by_name("Ace") is None
        assert player_repo.get_imported_stats() == {}
        assert [e.player for e in entry_repo.get_entries()] == ["Bee"]

    def test_imported_stats_keyed_by_lower_name(self, repos):
        player_repo = repos["player_repo"]
        player_repo.save_imported_stats("Ace", {1: 3, 2: 0}, {2: 4})
        player_repo.save_imported_stats("Ace", {1: 5}, {})
        assert player_repo.get_imported_stats() == {"ace": ({1: 5}, {1: 0})}

    def test_mark_import_deleted(self, repos):
        player_repo = repos["player_repo"]
        player_repo.add("Ace", "BG1")
        assert player_repo.mark_import_deleted("Ace")
        assert not player_repo.mark_import_deleted("ACE")
        assert player_repo.get_deleted_import_names() == {"ace"}
        assert not player_repo.exists("Ace")

        assert player_repo.restore_import_player("ace")
        assert player_repo.get_deleted_import_names() == set()
        assert not player_repo.restore_import_player("ace")

    def test_mark_import_deleted_rolls_back_when_purge_fails(self, repos):
        player_repo = repos["player_repo"]
        player_repo.add("Ace", "BG1")

        with patch.object(PlayerRepository, "_purge", side_effect=sqlite3.OperationalError("locked")):
            with pytest.raises(sqlite3.OperationalError):
                player_repo.mark_import_deleted("Ace")

        assert player_repo.get_deleted_import_names() == set()
        assert player_repo.exists("Ace")


class TestNodeEntryRepository:
    def test_entries_in_logged_order(self, repos):
        entry_repo = repos["entry_repo"]
        first = entry_repo.add_entry(NodeEntry(player="Ace", node=3, deaths=1, war=2))
        entry_repo.add_entry(NodeEntry(player="Ace", node=1, carry_over=True))
        entry_repo.add_entry(NodeEntry(player="Bee", node=5))

        entries = entry_repo.get_entries()
        assert [e.node for e in entries] == [3, 1, 5]
        assert entries[0].entry_id == first
        assert entries[0].deaths == 1
        assert entries[1].carry_over is True

        assert len(entry_repo.get_entries(player="ace")) == 2
        assert len(entry_repo.get_entries(include_carry_over=False)) == 2

    def test_assign_war_only_touches_unassigned_live_entries(self, repos):
        entry_repo = repos["entry_repo"]
        entry_repo.add_entry(NodeEntry(player="Ace", node=1))
        entry_repo.add_entry(NodeEntry(player="Ace", node=2, war=1))
        entry_repo.add_entry(NodeEntry(player="Ace", node=1, carry_over=True))
        entry_repo.add_entry(NodeEntry(player="Bee", node=1))

        assert entry_repo.assign_war("Ace", 4) == 1
        wars = [(e.player, e.war, e.carry_over) for e in entry_repo.get_entries()]
        assert wars == [("Ace", 4, False), ("Ace", 1, False), ("Ace", None, True), ("Bee", None, False)]

    def test_replace_all_and_clear(self, repos):
        entry_repo = repos["entry_repo"]
        entry_repo.add_entry(NodeEntry(player="Ace", node=1))
        entry_repo.replace_all([NodeEntry(player="Bee", node=2), NodeEntry(player="Cat", node=3)])
        assert [e.player for e in entry_repo.get_entries()] == ["Bee", "Cat"]
        assert entry_repo.clear() == 2
        assert entry_repo.get_entries() == []


class TestBattlegroupDeathRepository:
    def test_filters(self, repos):
        bg_repo = repos["bg_death_repo"]
        bg_repo.add(BattlegroupDeathEntry(battlegroup="BG1", deaths=3, war=1, season=60))
        bg_repo.add(BattlegroupDeathEntry(battlegroup="BG1", deaths=2, war=2, season=60))
        bg_repo.add(BattlegroupDeathEntry(battlegroup="BG2", deaths=5, war=1, season=61))

        assert len(bg_repo.get_entries()) == 3
        assert [e.deaths for e in bg_repo.get_entries(battlegroup="BG1")] == [3, 2]
        assert [e.deaths for e in bg_repo.get_entries(season=60, war=1)] == [3]
        assert bg_repo.clear() == 3


class TestDifficultyRepository:
    def test_settings_default_then_saved(self, repos):
        difficulty_repo = repos["difficulty_repo"]
        assert difficulty_repo.get_settings() == DifficultySettings()
        saved = DifficultySettings(adjustment_factor=0.2, min_value=0.5, max_value=4.0, update_threshold=5)
        difficulty_repo.save_settings(saved)
        assert difficulty_repo.get_settings() == saved

    def test_save_nodes_replaces_table(self, repos):
        difficulty_repo = repos["difficulty_repo"]
        assert difficulty_repo.get_nodes() == {}
        difficulty_repo.save_nodes({1: NodeDifficulty.from_value(1.5, 0.1, 0.2), 2: NodeDifficulty()})
        difficulty_repo.save_nodes({3: NodeDifficulty.from_value(2.0, 0.0, 0.0)})
        nodes = difficulty_repo.get_nodes()
        assert list(nodes) == [3]
        assert nodes[3].current_value == 2.0

    def test_update_node_upserts(self, repos):
        difficulty_repo = repos["difficulty_repo"]
        difficulty_repo.update_node(7, NodeDifficulty.from_value(1.2, 0.1, 0.1))
        difficulty_repo.update_node(7, NodeDifficulty.from_value(3.4, 0.1, 0.3))
        node = difficulty_repo.get_node(7)
        assert node.current_value == 3.4
        assert node.death_penalty == 0.3
        assert difficulty_repo.get_node(8) is None


class TestSeasonRepository:
    def test_current_defaults_to_spreadsheet_season(self, repos):
        season_repo = repos["season_repo"]
        current = season_repo.get_current()
        assert current.season_number == 60
        assert current.season_name == "Season 60"

        season_repo.set_current(61, "Season 61")
        assert season_repo.get_current().season_number == 61

    def test_season_calendar_round_trip(self, repos):
        season_repo = repos["season_repo"]
        season = Season.with_wars(61, 12, start_date="2024-01-01")
        season.wars[2].is_active = True
        season_repo.save_season(season)

        loaded = season_repo.get_season(61)
        assert len(loaded.wars) == 12
        assert loaded.active_war().war == 3
        assert season_repo.get_season(99) is None
        assert [s.season for s in season_repo.get_all_seasons()] == [61]

    def test_archives(self, repos):
        season_repo = repos["season_repo"]
        payload = {"node_entries": [{"player": "Ace", "node": 1}], "battlegroup_deaths": []}
        season_repo.save_archive(
            SeasonArchive(season_number=60, season_name="Season 60", payload=payload, total_kills=1)
        )
        archive = season_repo.get_archive(60)
        assert archive.payload == payload
        assert archive.total_kills == 1
        assert [a.season_number for a in season_repo.list_archives()] == [60]

        assert season_repo.delete_archive(60)
        assert not season_repo.delete_archive(60)
        assert season_repo.get_archive(60) is None

    def test_backups_get_ids(self, repos):
        season_repo = repos["season_repo"]
        first = season_repo.save_backup("test", {"node_entries": []}, "2024-01-01")
        second = season_repo.save_backup("test", {"node_entries": []}, "2024-01-02")
        assert second > first


class TestStreakRepository:
    def test_baselines_upsert(self, repos):
        streak_repo = repos["streak_repo"]
        streak_repo.upsert_baseline("Ace", 12, 4)
        streak_repo.upsert_baseline("Ace", 15, 0)
        assert streak_repo.get_baselines() == {"Ace": (15, 0)}

    def test_all_time_highs_replaced_and_sorted(self, repos):
        streak_repo = repos["streak_repo"]
        results = [
            StreakResult("Ace", 3, 3, 10, False, 20, 5, "BG1"),
            StreakResult("Bee", 1, 4, 25, True, 30, 2, "BG2"),
        ]
        assert streak_repo.save_all_time_highs(results, "2024-01-01") == 2
        highs = streak_repo.get_all_time_highs()
        assert [h["name"] for h in highs] == ["Bee", "Ace"]
        assert highs[0]["high_streak"] == 25

        streak_repo.save_all_time_highs(results[:1], "2024-01-02")
        assert [h["name"] for h in streak_repo.get_all_time_highs()] == ["Ace"]
