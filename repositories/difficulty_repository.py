"""
Repository for the node difficulty table and its settings.
"""

import logging

from domain.models.node_difficulty import DifficultySettings, NodeDifficulty
from repositories.base_repository import BaseRepository
from repositories.interfaces import IDifficultyRepository

logger = logging.getLogger("war_tracker.repositories.difficulty")


class DifficultyRepository(BaseRepository, IDifficultyRepository):
    """
    Handles persistence of per-node difficulty parameters.

    An empty table means difficulty has never been initialized; callers fall
    back to the spreadsheet node values.
    """

    def get_nodes(self) -> dict[int, NodeDifficulty]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM node_difficulty ORDER BY node")
            nodes = {}
            for row in cursor.fetchall():
                try:
                    nodes[row["node"]] = NodeDifficulty.from_dict(dict(row))
                except ValueError as exc:
                    logger.warning(f"Ignoring malformed difficulty row for node {row['node']}: {exc}")
            return nodes

    def get_node(self, node: int) -> NodeDifficulty | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM node_difficulty WHERE node = ?", (node,))
            row = cursor.fetchone()
            return NodeDifficulty.from_dict(dict(row)) if row else None

    def save_nodes(self, nodes: dict[int, NodeDifficulty]) -> None:
        """Replace the whole table."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM node_difficulty")
            cursor.executemany(
                """
                INSERT INTO node_difficulty
                (node, base_value, current_value, kill_bonus, death_penalty,
                 total_kills, total_deaths, last_updated)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [self._node_params(node, d) for node, d in sorted(nodes.items())],
            )

    def update_node(self, node: int, difficulty: NodeDifficulty) -> None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO node_difficulty
                (node, base_value, current_value, kill_bonus, death_penalty,
                 total_kills, total_deaths, last_updated)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(node) DO UPDATE SET
                    base_value = excluded.base_value,
                    current_value = excluded.current_value,
                    kill_bonus = excluded.kill_bonus,
                    death_penalty = excluded.death_penalty,
                    total_kills = excluded.total_kills,
                    total_deaths = excluded.total_deaths,
                    last_updated = excluded.last_updated
                """,
                self._node_params(node, difficulty),
            )

    def get_settings(self) -> DifficultySettings:
        """Stored settings, or the configured defaults when none are saved."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM difficulty_settings WHERE id = 1")
            row = cursor.fetchone()
            if not row:
                return DifficultySettings()
            return DifficultySettings.from_dict(dict(row))

    def save_settings(self, settings: DifficultySettings) -> None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO difficulty_settings
                (id, adjustment_factor, min_value, max_value, update_threshold)
                VALUES (1, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    adjustment_factor = excluded.adjustment_factor,
                    min_value = excluded.min_value,
                    max_value = excluded.max_value,
                    update_threshold = excluded.update_threshold
                """,
                (
                    settings.adjustment_factor,
                    settings.min_value,
                    settings.max_value,
                    settings.update_threshold,
                ),
            )

    def _node_params(self, node: int, d: NodeDifficulty) -> tuple:
        return (
            node,
            d.base_value,
            d.current_value,
            d.kill_bonus,
            d.death_penalty,
            d.total_kills,
            d.total_deaths,
            d.last_updated,
        )
