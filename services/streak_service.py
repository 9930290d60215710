"""
Service for kill streaks across the roster.
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone

from config import CENTENNIAL_STREAK, CSV_SEASON_NUMBER
from domain.models.war_stats import NodeEntry, StreakResult
from repositories.interfaces import (
    INodeEntryRepository,
    IPlayerRepository,
    ISeasonRepository,
    IStreakRepository,
)
from utils.streaks import compute_streak

logger = logging.getLogger("war_tracker.services.streak")


def carry_over_streaks(entries: list[NodeEntry]) -> dict[str, int]:
    """
    Current streak per player computed from fights alone, starting at zero.

    Used at season rollover; players whose streak is zero are omitted.
    """
    by_player: dict[str, list[NodeEntry]] = defaultdict(list)
    for entry in entries:
        by_player[entry.player].append(entry)

    carried = {}
    for name, player_entries in by_player.items():
        current = compute_streak(name, player_entries).current_streak
        if current > 0:
            carried[name] = current
    return carried


class StreakService:
    """
    Replays every player's fights against the historical streak ladder.

    The ladder's current streak only seeds the spreadsheet season; later
    seasons start from the carry-over entries written at rollover. The
    ladder's high streak always applies.
    """

    def __init__(
        self,
        player_repo: IPlayerRepository,
        entry_repo: INodeEntryRepository,
        streak_repo: IStreakRepository,
        season_repo: ISeasonRepository | None = None,
        centennial_streak: int = CENTENNIAL_STREAK,
    ):
        self.player_repo = player_repo
        self.entry_repo = entry_repo
        self.streak_repo = streak_repo
        self.season_repo = season_repo
        self.centennial_streak = centennial_streak

    def _seed_from_ladder(self) -> bool:
        if self.season_repo is None:
            return True
        return self.season_repo.get_current().season_number == CSV_SEASON_NUMBER

    def compute_all(self, include_hidden: bool = False) -> list[StreakResult]:
        baselines = {name.lower(): v for name, v in self.streak_repo.get_baselines().items()}
        seed_current = self._seed_from_ladder()

        entries_by_player: dict[str, list[NodeEntry]] = defaultdict(list)
        for entry in self.entry_repo.get_entries():
            entries_by_player[entry.player.lower()].append(entry)

        results = []
        for player in self.player_repo.get_all(include_hidden=include_hidden):
            key = player.name.lower()
            high, current = baselines.get(key, (0, 0))
            results.append(
                compute_streak(
                    player.name,
                    entries_by_player.get(key, []),
                    baseline_current=current if seed_current else 0,
                    baseline_high=high,
                    battlegroup=player.battlegroup,
                )
            )
        return results

    def get_active_streaks(self) -> list[StreakResult]:
        """Visible players ranked by current streak."""
        results = self.compute_all()
        results.sort(key=lambda r: (-r.current_streak, r.name.lower()))
        return results

    def get_centennial_club(self) -> list[StreakResult]:
        """Players whose best streak has reached the centennial mark."""
        return [
            r
            for r in sorted(self.compute_all(), key=lambda r: -r.high_streak)
            if r.high_streak >= self.centennial_streak
        ]

    def get_all_time_highs(self) -> list[dict]:
        """
        Saved all-time highs, ranked by high streak.

        Falls back to a live computation when nothing has been saved.
        """
        saved = self.streak_repo.get_all_time_highs()
        if saved:
            return saved
        results = sorted(self.compute_all(), key=lambda r: (-r.high_streak, r.name.lower()))
        return [
            {
                "name": r.name,
                "battlegroup": r.battlegroup,
                "high_streak": r.high_streak,
                "current_streak": r.current_streak,
                "total_kills": r.total_kills,
                "total_deaths": r.total_deaths,
                "updated_at": None,
            }
            for r in results
        ]

    def save_all_time_highs(self) -> dict:
        results = self.compute_all(include_hidden=True)
        count = self.streak_repo.save_all_time_highs(
            results, datetime.now(timezone.utc).isoformat()
        )
        new_highs = [r.name for r in results if r.is_new_high]
        logger.info(f"Saved all-time highs for {count} players ({len(new_highs)} new highs)")
        return {
            "success": True,
            "message": f"Saved all-time highs for {count} players",
            "new_highs": new_highs,
        }
