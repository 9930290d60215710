"""
Service for power ratings, leaderboards and node difficulty maintenance.
"""

import logging
import math
from dataclasses import replace
from datetime import datetime, timezone

from config import BATTLEGROUPS
from domain.models.node_difficulty import NodeDifficulty
from domain.models.player import Player
from domain.models.war_stats import AllianceTotals, BattlegroupTotals, PlayerRating
from rating_system import WarRatingSystem
from repositories.interfaces import (
    IBattlegroupDeathRepository,
    IDifficultyRepository,
    INodeEntryRepository,
    IPlayerRepository,
)
from services.import_service import ImportService
from utils.rankings import compute_battlegroup_totals, sort_players, visible_only

logger = logging.getLogger("war_tracker.services.rating")


class RatingService:
    """
    Assembles war data from storage and runs it through the rating system.

    A player's counts are the spreadsheet import plus every live fight logged
    since; carry-over streak entries are never counted.
    """

    def __init__(
        self,
        player_repo: IPlayerRepository,
        entry_repo: INodeEntryRepository,
        bg_death_repo: IBattlegroupDeathRepository,
        difficulty_repo: IDifficultyRepository,
        import_service: ImportService | None = None,
        rating_system: WarRatingSystem | None = None,
        battlegroups: list[str] | None = None,
    ):
        self.player_repo = player_repo
        self.entry_repo = entry_repo
        self.bg_death_repo = bg_death_repo
        self.difficulty_repo = difficulty_repo
        self.import_service = import_service
        self.rating_system = rating_system or WarRatingSystem()
        self.battlegroups = battlegroups or BATTLEGROUPS

    def get_players(self) -> list[Player]:
        """All roster players, hidden included, with imported and live counts merged."""
        players = self.player_repo.get_all(include_hidden=True)
        imported = self.player_repo.get_imported_stats()
        by_name = {}
        for player in players:
            kills, deaths = imported.get(player.name.lower(), ({}, {}))
            player.kills_per_node = dict(kills)
            player.deaths_per_node = dict(deaths)
            by_name[player.name.lower()] = player

        for entry in self.entry_repo.get_entries(include_carry_over=False):
            player = by_name.get(entry.player.lower())
            if player is None:
                logger.debug(f"Ignoring fight for unknown player {entry.player}")
                continue
            if entry.node:
                player.add_fight(entry.node, deaths=entry.deaths)
        return players

    def get_node_table(self) -> dict[int, NodeDifficulty]:
        """Saved difficulty table, else the spreadsheet values, else empty."""
        nodes = self.difficulty_repo.get_nodes()
        if nodes:
            return nodes
        if self.import_service is not None:
            nodes = self.import_service.load_node_values()
            if nodes:
                logger.info("No saved difficulty table, using spreadsheet node values")
                return nodes
        logger.warning("No node difficulty data available; all kill ratings will be zero")
        return {}

    def get_alliance_totals(self, players: list[Player] | None = None) -> AllianceTotals:
        if players is None:
            players = self.get_players()
        return self.rating_system.compute_alliance_totals(
            players, self.bg_death_repo.get_entries()
        )

    def get_ratings(self) -> list[PlayerRating]:
        """Ratings for every roster player, hidden included, in roster order."""
        players = self.get_players()
        nodes = self.get_node_table()
        alliance = self.get_alliance_totals(players)
        return self.rating_system.compute_power_ratings(players, nodes, alliance)

    def get_leaderboard(self, sort_key: str = "pr", limit: int | None = None) -> list[PlayerRating]:
        """
        Visible players ranked by the given key.

        Raises:
            ValueError: If sort_key is unknown
        """
        ranked = sort_players(visible_only(self.get_ratings()), sort_key)
        return ranked[:limit] if limit else ranked

    def get_player_rating(self, name: str) -> PlayerRating | None:
        target = name.strip().lower()
        for rating in self.get_ratings():
            if rating.name.lower() == target:
                return rating
        return None

    def get_battlegroup_standings(
        self, season: int | None = None, war: int | None = None
    ) -> list[BattlegroupTotals]:
        return compute_battlegroup_totals(
            self.get_ratings(),
            self.bg_death_repo.get_entries(),
            self.battlegroups,
            season=season,
            war=war,
        )

    def recalculate_difficulty(self) -> dict:
        """Recompute every node's current value from logged fights and save the table."""
        settings = self.difficulty_repo.get_settings()
        nodes = self.get_node_table()
        node_stats = self.rating_system.aggregate_node_stats(
            self.entry_repo.get_entries(include_carry_over=False)
        )
        updated = self.rating_system.recalculate_node_difficulty(node_stats, nodes, settings)
        self.difficulty_repo.save_nodes(updated)

        total_kills = sum(kills for kills, _ in node_stats.values())
        total_deaths = sum(deaths for _, deaths in node_stats.values())
        return {
            "success": True,
            "message": "Difficulty ratings recalculated successfully",
            "nodes_count": len(updated),
            "total_kills": total_kills,
            "total_deaths": total_deaths,
        }

    def set_node(
        self,
        node: int,
        base_value: float | None = None,
        current_value: float | None = None,
        kill_bonus: float | None = None,
        death_penalty: float | None = None,
    ) -> dict:
        """Manually override any subset of a node's parameters."""
        if node < 1 or node > self.rating_system.node_count:
            return {
                "success": False,
                "error": f"Node must be between 1 and {self.rating_system.node_count}",
            }
        changes = {
            "base_value": base_value,
            "current_value": current_value,
            "kill_bonus": kill_bonus,
            "death_penalty": death_penalty,
        }
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return {"success": False, "error": "No values supplied"}
        for key, value in changes.items():
            if not math.isfinite(value) or value < 0:
                return {"success": False, "error": f"{key} must be a non-negative number"}
        if current_value is not None:
            settings = self.difficulty_repo.get_settings()
            if not settings.min_value <= current_value <= settings.max_value:
                return {
                    "success": False,
                    "error": (
                        f"current_value must be between {settings.min_value} "
                        f"and {settings.max_value}"
                    ),
                }

        current = self.difficulty_repo.get_node(node) or self.get_node_table().get(node)
        updated = replace(
            current or NodeDifficulty(),
            last_updated=datetime.now(timezone.utc).isoformat(),
            **changes,
        )
        self.difficulty_repo.update_node(node, updated)
        logger.info(f"Node {node} updated manually: {changes}")
        return {"success": True, "message": f"Node {node} updated", "node": updated}

    def initialize_from_csv(self) -> dict:
        if self.import_service is None:
            return {"success": False, "error": "Spreadsheet import is not configured"}
        return self.import_service.initialize_difficulty(self.difficulty_repo.get_settings())
