"""
Repository for deaths logged against a whole battlegroup.
"""

from domain.models.war_stats import BattlegroupDeathEntry
from repositories.base_repository import BaseRepository
from repositories.interfaces import IBattlegroupDeathRepository


class BattlegroupDeathRepository(BaseRepository, IBattlegroupDeathRepository):
    def add(self, entry: BattlegroupDeathEntry) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO battlegroup_deaths (battlegroup, deaths, war, season, timestamp)
                VALUES (?, ?, ?, ?, ?)
                """,
                (entry.battlegroup, entry.deaths, entry.war, entry.season, entry.timestamp),
            )
            return cursor.lastrowid

    def get_entries(
        self,
        battlegroup: str | None = None,
        season: int | None = None,
        war: int | None = None,
    ) -> list[BattlegroupDeathEntry]:
        query = "SELECT * FROM battlegroup_deaths"
        clauses = []
        params: list = []
        if battlegroup is not None:
            clauses.append("battlegroup = ?")
            params.append(battlegroup)
        if season is not None:
            clauses.append("season = ?")
            params.append(season)
        if war is not None:
            clauses.append("war = ?")
            params.append(war)
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY entry_id"

        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [
                BattlegroupDeathEntry(
                    battlegroup=row["battlegroup"],
                    deaths=row["deaths"],
                    war=row["war"],
                    season=row["season"],
                    timestamp=row["timestamp"],
                )
                for row in cursor.fetchall()
            ]

    def replace_all(self, entries: list[BattlegroupDeathEntry]) -> None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM battlegroup_deaths")
            cursor.executemany(
                """
                INSERT INTO battlegroup_deaths (battlegroup, deaths, war, season, timestamp)
                VALUES (?, ?, ?, ?, ?)
                """,
                [(e.battlegroup, e.deaths, e.war, e.season, e.timestamp) for e in entries],
            )

    def clear(self) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM battlegroup_deaths")
            return cursor.rowcount
