"""
Service for season rollover, archives and the war calendar.
"""

import logging
from datetime import datetime, timezone

from config import CSV_SEASON_NUMBER, WARS_PER_SEASON
from domain.models.season import CurrentSeason, Season, SeasonArchive
from domain.models.war_stats import BattlegroupDeathEntry, NodeEntry
from repositories.interfaces import (
    IBattlegroupDeathRepository,
    INodeEntryRepository,
    IPlayerRepository,
    ISeasonRepository,
)
from services.streak_service import carry_over_streaks

logger = logging.getLogger("war_tracker.services.season")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def season_display_name(season_number: int) -> str:
    if season_number == CSV_SEASON_NUMBER:
        return f"Season {season_number} (CSV Data)"
    return f"Season {season_number}"


class SeasonService:
    """
    Handles season boundaries.

    Starting a season archives the working data (logged fights, battlegroup
    deaths, custom and hidden roster) under the current season number, then
    resets the logs. Kill streaks survive as carry-over entries. The
    spreadsheet season can never be deleted.
    """

    def __init__(
        self,
        season_repo: ISeasonRepository,
        player_repo: IPlayerRepository,
        entry_repo: INodeEntryRepository,
        bg_death_repo: IBattlegroupDeathRepository,
        wars_per_season: int = WARS_PER_SEASON,
    ):
        self.season_repo = season_repo
        self.player_repo = player_repo
        self.entry_repo = entry_repo
        self.bg_death_repo = bg_death_repo
        self.wars_per_season = wars_per_season

    def get_current_season(self) -> CurrentSeason:
        return self.season_repo.get_current()

    def switch_season(self, season_number: int) -> dict:
        """Point the tracker at another season without touching any data."""
        if season_number < 1:
            return {"success": False, "error": "Season number must be positive"}
        name = season_display_name(season_number)
        self.season_repo.set_current(season_number, name)
        logger.info(f"Switched current season to {name}")
        return {"success": True, "message": f"Switched to {name}"}

    def _snapshot(self) -> dict:
        players = self.player_repo.get_all(include_hidden=True)
        return {
            "node_entries": [e.to_dict() for e in self.entry_repo.get_entries()],
            "battlegroup_deaths": [e.to_dict() for e in self.bg_death_repo.get_entries()],
            "custom_players": [
                {"name": p.name, "battlegroup": p.battlegroup} for p in players if p.is_custom
            ],
            "hidden_players": [p.name for p in players if p.hidden],
        }

    def start_new_season(
        self,
        season_number: int,
        season_name: str | None = None,
        description: str | None = None,
    ) -> dict:
        current = self.season_repo.get_current()
        if season_number < 1:
            return {"success": False, "error": "Season number must be positive"}
        if season_number == current.season_number:
            return {"success": False, "error": f"Season {season_number} is already current"}

        entries = self.entry_repo.get_entries()
        payload = self._snapshot()
        live = [e for e in entries if not e.carry_over]
        archive = SeasonArchive(
            season_number=current.season_number,
            season_name=current.season_name,
            payload=payload,
            total_kills=sum(e.kills for e in live),
            total_deaths=sum(e.deaths for e in live)
            + sum(d["deaths"] for d in payload["battlegroup_deaths"]),
            archived_at=_now(),
            description=description,
        )
        self.season_repo.save_archive(archive)

        carried = carry_over_streaks(entries)
        now = _now()
        carry_entries = [
            NodeEntry(player=name, node=1, deaths=0, war=None, carry_over=True, recorded_at=now)
            for name, streak in carried.items()
            for _ in range(streak)
        ]
        self.entry_repo.replace_all(carry_entries)
        self.bg_death_repo.clear()

        name = season_name or season_display_name(season_number)
        self.season_repo.set_current(season_number, name)
        if self.season_repo.get_season(season_number) is None:
            self.season_repo.save_season(
                Season.with_wars(season_number, self.wars_per_season, start_date=now)
            )

        logger.info(
            f"Archived {current.season_name} and started {name}; "
            f"carried over streaks for {len(carried)} players"
        )
        return {
            "success": True,
            "message": f"Started {name}. {current.season_name} archived.",
            "archived_season": current.season_number,
            "carried_over": carried,
        }

    def restore_season(self, season_number: int) -> dict:
        """
        Replace the working data with an archived season.

        The current working data is saved as a backup first. The roster,
        custom players and hidden flags included, is left as it is.
        """
        archive = self.season_repo.get_archive(season_number)
        if archive is None:
            return {"success": False, "error": f"Season {season_number} archive not found"}

        entries = []
        for raw in archive.node_entries:
            try:
                entries.append(NodeEntry.from_dict(raw))
            except ValueError as exc:
                logger.warning(f"Skipping malformed archived entry in season {season_number}: {exc}")
        bg_deaths = []
        for raw in archive.battlegroup_deaths:
            try:
                bg_deaths.append(BattlegroupDeathEntry.from_dict(raw))
            except ValueError as exc:
                logger.warning(f"Skipping malformed archived death entry in season {season_number}: {exc}")

        backup_id = self.season_repo.save_backup(
            f"before restoring season {season_number}", self._snapshot(), _now()
        )

        self.entry_repo.replace_all(entries)
        self.bg_death_repo.replace_all(bg_deaths)
        self.season_repo.set_current(archive.season_number, archive.season_name)

        logger.info(f"Restored {archive.season_name} (backup {backup_id})")
        return {
            "success": True,
            "message": f"Restored {archive.season_name}",
            "backup_id": backup_id,
        }

    def delete_season(self, season_number: int) -> dict:
        if season_number == CSV_SEASON_NUMBER:
            return {"success": False, "error": f"Season {CSV_SEASON_NUMBER} cannot be deleted"}
        if not self.season_repo.delete_archive(season_number):
            return {"success": False, "error": f"Season {season_number} archive not found"}
        logger.info(f"Deleted archive for season {season_number}")
        return {"success": True, "message": f"Deleted season {season_number}"}

    def list_available_seasons(self) -> list[dict]:
        """The spreadsheet season plus every archive, one row per season number."""
        current = self.season_repo.get_current()
        seasons = {
            CSV_SEASON_NUMBER: {
                "season_number": CSV_SEASON_NUMBER,
                "season_name": season_display_name(CSV_SEASON_NUMBER),
                "archived_at": None,
                "total_kills": None,
                "total_deaths": None,
            }
        }
        for archive in self.season_repo.list_archives():
            seasons[archive.season_number] = {
                "season_number": archive.season_number,
                "season_name": archive.season_name,
                "archived_at": archive.archived_at,
                "total_kills": archive.total_kills,
                "total_deaths": archive.total_deaths,
            }
        result = []
        for number in sorted(seasons):
            row = seasons[number]
            row["is_current"] = number == current.season_number
            result.append(row)
        return result

    def create_season(self, season_number: int, start_date: str | None = None) -> dict:
        if season_number < 1:
            return {"success": False, "error": "Season number must be positive"}
        if self.season_repo.get_season(season_number) is not None:
            return {"success": False, "error": f"Season {season_number} already exists"}
        season = Season.with_wars(season_number, self.wars_per_season, start_date=start_date or _now())
        self.season_repo.save_season(season)
        return {
            "success": True,
            "message": f"Created season {season_number} with {len(season.wars)} wars",
            "season": season,
        }

    def get_season(self, season_number: int | None = None) -> Season | None:
        if season_number is None:
            season_number = self.season_repo.get_current().season_number
        return self.season_repo.get_season(season_number)

    def start_war(self, season_number: int, war_number: int) -> dict:
        """Start a war; any war already active in the season is ended first."""
        season = self.season_repo.get_season(season_number)
        if season is None:
            return {"success": False, "error": f"Season {season_number} not found"}
        war = season.get_war(war_number)
        if war is None:
            return {"success": False, "error": f"War {war_number} not found in season {season_number}"}

        now = _now()
        for other in season.wars:
            if other.is_active and other.war != war_number:
                other.is_active = False
                other.end_date = now
        war.is_active = True
        war.start_date = now
        war.end_date = None
        self.season_repo.save_season(season)
        logger.info(f"Started war {war_number} of season {season_number}")
        return {"success": True, "message": f"War {war_number} started"}

    def end_war(self, season_number: int, war_number: int) -> dict:
        season = self.season_repo.get_season(season_number)
        if season is None:
            return {"success": False, "error": f"Season {season_number} not found"}
        war = season.get_war(war_number)
        if war is None:
            return {"success": False, "error": f"War {war_number} not found in season {season_number}"}
        war.is_active = False
        war.end_date = _now()
        self.season_repo.save_season(season)
        logger.info(f"Ended war {war_number} of season {season_number}")
        return {"success": True, "message": f"War {war_number} ended"}
