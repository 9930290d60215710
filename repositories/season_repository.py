"""
Repository for the current season, war calendar and season archives.
"""

import json
import logging

from config import CSV_SEASON_NUMBER
from domain.models.season import CurrentSeason, Season, SeasonArchive, War
from repositories.base_repository import BaseRepository
from repositories.interfaces import ISeasonRepository

logger = logging.getLogger("war_tracker.repositories.season")


class SeasonRepository(BaseRepository, ISeasonRepository):
    """
    Handles season state.

    Responsibilities:
    - The current season pointer (defaults to the spreadsheet season)
    - War calendar per season
    - Immutable archives and pre-restore backups, stored as JSON payloads
    """

    def get_current(self) -> CurrentSeason:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT season_number, season_name FROM current_season WHERE id = 1")
            row = cursor.fetchone()
            if not row:
                return CurrentSeason(
                    season_number=CSV_SEASON_NUMBER,
                    season_name=f"Season {CSV_SEASON_NUMBER}",
                )
            return CurrentSeason(season_number=row["season_number"], season_name=row["season_name"])

    def set_current(self, season_number: int, season_name: str) -> None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO current_season (id, season_number, season_name)
                VALUES (1, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    season_number = excluded.season_number,
                    season_name = excluded.season_name
                """,
                (season_number, season_name),
            )

    def get_season(self, season: int) -> Season | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM seasons WHERE season = ?", (season,))
            row = cursor.fetchone()
            return self._row_to_season(row) if row else None

    def get_all_seasons(self) -> list[Season]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM seasons ORDER BY season")
            return [self._row_to_season(row) for row in cursor.fetchall()]

    def save_season(self, season: Season) -> None:
        wars_json = json.dumps(
            [
                {
                    "war": w.war,
                    "start_date": w.start_date,
                    "end_date": w.end_date,
                    "is_active": w.is_active,
                }
                for w in season.wars
            ]
        )
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO seasons (season, start_date, end_date, wars)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(season) DO UPDATE SET
                    start_date = excluded.start_date,
                    end_date = excluded.end_date,
                    wars = excluded.wars
                """,
                (season.season, season.start_date, season.end_date, wars_json),
            )

    def save_archive(self, archive: SeasonArchive) -> None:
        """Store an archive; an existing archive for the same season is overwritten."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO season_archives
                (season_number, season_name, payload, total_kills, total_deaths, archived_at, description)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(season_number) DO UPDATE SET
                    season_name = excluded.season_name,
                    payload = excluded.payload,
                    total_kills = excluded.total_kills,
                    total_deaths = excluded.total_deaths,
                    archived_at = excluded.archived_at,
                    description = excluded.description
                """,
                (
                    archive.season_number,
                    archive.season_name,
                    json.dumps(archive.payload),
                    archive.total_kills,
                    archive.total_deaths,
                    archive.archived_at,
                    archive.description,
                ),
            )

    def get_archive(self, season_number: int) -> SeasonArchive | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM season_archives WHERE season_number = ?", (season_number,)
            )
            row = cursor.fetchone()
            return self._row_to_archive(row) if row else None

    def list_archives(self) -> list[SeasonArchive]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM season_archives ORDER BY season_number")
            archives = []
            for row in cursor.fetchall():
                try:
                    archives.append(self._row_to_archive(row))
                except (TypeError, ValueError) as exc:
                    logger.error(f"Error reading archive for season {row['season_number']}: {exc}")
            return archives

    def delete_archive(self, season_number: int) -> bool:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM season_archives WHERE season_number = ?", (season_number,)
            )
            return cursor.rowcount > 0

    def save_backup(self, reason: str, payload: dict, created_at: str) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO season_backups (reason, payload, created_at) VALUES (?, ?, ?)",
                (reason, json.dumps(payload), created_at),
            )
            return cursor.lastrowid

    def _row_to_season(self, row) -> Season:
        wars = [War.from_dict(w) for w in json.loads(row["wars"] or "[]")]
        return Season(
            season=row["season"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            wars=wars,
        )

    def _row_to_archive(self, row) -> SeasonArchive:
        return SeasonArchive(
            season_number=row["season_number"],
            season_name=row["season_name"],
            payload=json.loads(row["payload"]),
            total_kills=row["total_kills"] or 0,
            total_deaths=row["total_deaths"] or 0,
            archived_at=row["archived_at"],
            description=row["description"],
        )
