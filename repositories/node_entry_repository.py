"""
Repository for logged fights (node entries) in the working season.
"""

import logging

from domain.models.war_stats import NodeEntry
from repositories.base_repository import BaseRepository
from repositories.interfaces import INodeEntryRepository

logger = logging.getLogger("war_tracker.repositories.node_entry")


class NodeEntryRepository(BaseRepository, INodeEntryRepository):
    """Append-mostly log of fights; reset when a new season starts."""

    def add_entry(self, entry: NodeEntry) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO node_entries (player_name, node, deaths, war, carry_over, recorded_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.player,
                    entry.node,
                    entry.deaths,
                    entry.war,
                    1 if entry.carry_over else 0,
                    entry.recorded_at,
                ),
            )
            return cursor.lastrowid

    def get_entries(
        self, player: str | None = None, include_carry_over: bool = True
    ) -> list[NodeEntry]:
        """Entries in logged order, optionally for a single player."""
        query = "SELECT * FROM node_entries"
        clauses = []
        params: list = []
        if player is not None:
            clauses.append("player_name = ?")
            params.append(player.strip())
        if not include_carry_over:
            clauses.append("carry_over = 0")
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY entry_id"

        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    def assign_war(self, player: str, war: int) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE node_entries SET war = ?
                WHERE player_name = ? AND war IS NULL AND carry_over = 0
                """,
                (war, player.strip()),
            )
            return cursor.rowcount

    def replace_all(self, entries: list[NodeEntry]) -> None:
        """Swap the whole working log, e.g. on season rollover or restore."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM node_entries")
            cursor.executemany(
                """
                INSERT INTO node_entries (player_name, node, deaths, war, carry_over, recorded_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (e.player, e.node, e.deaths, e.war, 1 if e.carry_over else 0, e.recorded_at)
                    for e in entries
                ],
            )
        logger.info(f"Replaced node entry log with {len(entries)} entries")

    def clear(self) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM node_entries")
            return cursor.rowcount

    def _row_to_entry(self, row) -> NodeEntry:
        return NodeEntry(
            player=row["player_name"],
            node=row["node"],
            deaths=row["deaths"] or 0,
            war=row["war"],
            carry_over=bool(row["carry_over"]),
            recorded_at=row["recorded_at"],
            entry_id=row["entry_id"],
        )
