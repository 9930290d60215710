"""
Repository for roster data access.
"""

import logging

from domain.models.player import Player
from repositories.base_repository import BaseRepository
from repositories.interfaces import IPlayerRepository

logger = logging.getLogger("war_tracker.repositories.player")


class PlayerRepository(BaseRepository, IPlayerRepository):
    """
    Handles all roster-related database operations.

    Responsibilities:
    - CRUD operations for players (names are case-insensitive)
    - Hidden flag (soft delete) and hard delete
    - Per-node counts brought in by the spreadsheet import
    - Tracking imported players an admin removed
    """

    def add(
        self,
        name: str,
        battlegroup: str | None,
        is_custom: bool = False,
        added_at: str | None = None,
    ) -> None:
        """
        Add a new player to the roster.

        Raises:
            ValueError: If a player with this name already exists
        """
        name = name.strip()
        if not name:
            raise ValueError("Player name is required.")
        with self.connection() as conn:
            cursor = conn.cursor()

            cursor.execute("SELECT name FROM players WHERE name = ?", (name,))
            if cursor.fetchone():
                raise ValueError(f"Player {name} already exists.")

            cursor.execute(
                """
                INSERT INTO players (name, battlegroup, is_custom, hidden, added_at, updated_at)
                VALUES (?, ?, ?, 0, ?, CURRENT_TIMESTAMP)
                """,
                (name, battlegroup, 1 if is_custom else 0, added_at),
            )

    def get_by_name(self, name: str) -> Player | None:
        """
        Get player by name (case-insensitive).

        Returns:
            Player object or None if not found
        """
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM players WHERE name = ?", (name.strip(),))
            row = cursor.fetchone()
            return self._row_to_player(row) if row else None

    def get_all(self, include_hidden: bool = True) -> list[Player]:
        with self.connection() as conn:
            cursor = conn.cursor()
            if include_hidden:
                cursor.execute("SELECT * FROM players ORDER BY rowid")
            else:
                cursor.execute("SELECT * FROM players WHERE hidden = 0 ORDER BY rowid")
            return [self._row_to_player(row) for row in cursor.fetchall()]

    def exists(self, name: str) -> bool:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM players WHERE name = ?", (name.strip(),))
            return cursor.fetchone() is not None

    def set_hidden(self, name: str, hidden: bool, hidden_at: str | None = None) -> bool:
        """Hide or show a player. Returns False when the player does not exist."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE players
                SET hidden = ?, hidden_at = ?, updated_at = CURRENT_TIMESTAMP
                WHERE name = ?
                """,
                (1 if hidden else 0, hidden_at if hidden else None, name.strip()),
            )
            return cursor.rowcount > 0

    def set_battlegroup(self, name: str, battlegroup: str) -> bool:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE players SET battlegroup = ?, updated_at = CURRENT_TIMESTAMP WHERE name = ?",
                (battlegroup, name.strip()),
            )
            return cursor.rowcount > 0

    def delete(self, name: str) -> bool:
        """Remove a player and every fight and imported count recorded for them."""
        name = name.strip()
        with self.connection() as conn:
            return self._purge(conn.cursor(), name)

    @staticmethod
    def _purge(cursor, name: str) -> bool:
        cursor.execute("DELETE FROM players WHERE name = ?", (name,))
        deleted = cursor.rowcount > 0
        cursor.execute("DELETE FROM node_entries WHERE player_name = ?", (name,))
        purged_entries = cursor.rowcount
        cursor.execute("DELETE FROM imported_node_stats WHERE player_name = ?", (name,))
        if deleted:
            logger.info(f"Deleted player {name} and {purged_entries} logged fights")
        return deleted

    def save_imported_stats(
        self, name: str, kills_per_node: dict[int, int], deaths_per_node: dict[int, int]
    ) -> None:
        """Replace the imported per-node counts for a player."""
        nodes = set(kills_per_node) | set(deaths_per_node)
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM imported_node_stats WHERE player_name = ?", (name,))
            cursor.executemany(
                """
                INSERT INTO imported_node_stats (player_name, node, kills, deaths)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (name, node, kills_per_node.get(node, 0), deaths_per_node.get(node, 0))
                    for node in sorted(nodes)
                ],
            )

    def get_imported_stats(self) -> dict[str, tuple[dict[int, int], dict[int, int]]]:
        """Map of lower-cased player name -> (kills per node, deaths per node)."""
        stats: dict[str, tuple[dict[int, int], dict[int, int]]] = {}
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT player_name, node, kills, deaths FROM imported_node_stats")
            for row in cursor.fetchall():
                kills, deaths = stats.setdefault(row["player_name"].lower(), ({}, {}))
                kills[row["node"]] = row["kills"] or 0
                deaths[row["node"]] = row["deaths"] or 0
        return stats

    def mark_import_deleted(self, name: str, deleted_at: str | None = None) -> bool:
        """
        Record that an imported player was removed.

        Also purges the player from the roster along with their fights.
        Returns False if the name was already marked.
        """
        name = name.strip()
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM deleted_import_players WHERE name = ?", (name,))
            if cursor.fetchone():
                return False
            cursor.execute(
                "INSERT INTO deleted_import_players (name, deleted_at) VALUES (?, ?)",
                (name, deleted_at),
            )
            self._purge(cursor, name)
        return True

    def restore_import_player(self, name: str) -> bool:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM deleted_import_players WHERE name = ?", (name.strip(),))
            return cursor.rowcount > 0

    def get_deleted_import_names(self) -> set[str]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM deleted_import_players")
            return {row["name"].lower() for row in cursor.fetchall()}

    def _row_to_player(self, row) -> Player:
        return Player(
            name=row["name"],
            battlegroup=row["battlegroup"],
            is_custom=bool(row["is_custom"]),
            hidden=bool(row["hidden"]),
        )
