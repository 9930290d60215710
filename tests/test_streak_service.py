"""
Tests for StreakService.
"""

import pytest

from domain.models.war_stats import NodeEntry
from services.streak_service import StreakService, carry_over_streaks


@pytest.fixture
def streak_service(repos):
    return StreakService(
        repos["player_repo"],
        repos["entry_repo"],
        repos["streak_repo"],
        season_repo=repos["season_repo"],
        centennial_streak=10,
    )


def log_kills(entry_repo, name, count, war=1, deaths_at_end=False):
    for _ in range(count):
        entry_repo.add_entry(NodeEntry(player=name, node=2, war=war))
    if deaths_at_end:
        entry_repo.add_entry(NodeEntry(player=name, node=2, deaths=1, war=war))


def test_carry_over_streaks_omits_zero():
    entries = [
        NodeEntry(player="Ace", node=1, war=1),
        NodeEntry(player="Ace", node=1, war=2),
        NodeEntry(player="Bee", node=1, deaths=1, war=1),
    ]
    assert carry_over_streaks(entries) == {"Ace": 2}


class TestStreakService:
    def test_ladder_seeds_spreadsheet_season(self, repos, streak_service):
        repos["player_repo"].add("Ace", "BG1")
        repos["streak_repo"].upsert_baseline("Ace", 12, 5)
        log_kills(repos["entry_repo"], "Ace", 2)

        (result,) = streak_service.compute_all()

        assert result.current_streak == 7
        assert result.high_streak == 12
        assert result.battlegroup == "BG1"

    def test_ladder_current_ignored_after_rollover(self, repos, streak_service):
        repos["player_repo"].add("Ace", "BG1")
        repos["streak_repo"].upsert_baseline("Ace", 12, 5)
        repos["season_repo"].set_current(61, "Season 61")
        log_kills(repos["entry_repo"], "Ace", 2)

        (result,) = streak_service.compute_all()

        assert result.current_streak == 2
        assert result.high_streak == 12

    def test_baseline_matched_case_insensitively(self, repos, streak_service):
        repos["player_repo"].add("Ace", "BG1")
        repos["streak_repo"].upsert_baseline("ACE", 4, 0)
        assert streak_service.compute_all()[0].high_streak == 4

    def test_hidden_players_excluded_by_default(self, repos, streak_service):
        repos["player_repo"].add("Ace", "BG1")
        repos["player_repo"].add("Bee", "BG1")
        repos["player_repo"].set_hidden("Bee", True)

        assert [r.name for r in streak_service.compute_all()] == ["Ace"]
        assert len(streak_service.compute_all(include_hidden=True)) == 2

    def test_active_streaks_ranked(self, repos, streak_service):
        for name in ("Cat", "Ace", "Bee"):
            repos["player_repo"].add(name, "BG1")
        log_kills(repos["entry_repo"], "Bee", 3)
        log_kills(repos["entry_repo"], "Cat", 1)
        log_kills(repos["entry_repo"], "Ace", 1)

        ranked = [(r.name, r.current_streak) for r in streak_service.get_active_streaks()]
        assert ranked == [("Bee", 3), ("Ace", 1), ("Cat", 1)]

    def test_centennial_club(self, repos, streak_service):
        repos["player_repo"].add("Ace", "BG1")
        repos["player_repo"].add("Bee", "BG1")
        repos["player_repo"].add("Cat", "BG1")
        repos["streak_repo"].upsert_baseline("Bee", 10, 0)
        log_kills(repos["entry_repo"], "Ace", 11, deaths_at_end=True)
        log_kills(repos["entry_repo"], "Cat", 9)

        club = streak_service.get_centennial_club()

        assert [(r.name, r.high_streak) for r in club] == [("Ace", 11), ("Bee", 10)]

    def test_all_time_highs_live_then_saved(self, repos, streak_service):
        repos["player_repo"].add("Ace", "BG1")
        repos["player_repo"].add("Bee", "BG2")
        repos["player_repo"].set_hidden("Bee", True)
        repos["streak_repo"].upsert_baseline("Bee", 8, 0)
        log_kills(repos["entry_repo"], "Ace", 3)

        live = streak_service.get_all_time_highs()
        assert [h["name"] for h in live] == ["Ace"]
        assert live[0]["updated_at"] is None

        result = streak_service.save_all_time_highs()
        assert result["success"] is True
        assert result["new_highs"] == ["Ace"]

        saved = streak_service.get_all_time_highs()
        assert [(h["name"], h["high_streak"]) for h in saved] == [("Bee", 8), ("Ace", 3)]
        assert saved[0]["updated_at"] is not None
