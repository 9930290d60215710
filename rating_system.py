"""
Power rating and node difficulty calculations for the alliance war tracker.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone

from config import (
    DIFFICULTY_FIGHTS_PER_NODE,
    DIFFICULTY_FLOOR,
    DIFFICULTY_NODE_OFFSET,
    DIFFICULTY_SCALE,
    DIFFICULTY_TOTAL_BASE,
    DIFFICULTY_TOTAL_OFFSET,
    NODE_COUNT,
    SOLO_RATE_BONUS_MULTIPLIER,
)
from domain.models.node_difficulty import DifficultySettings, NodeDifficulty
from domain.models.player import Player
from domain.models.war_stats import AllianceTotals, BattlegroupDeathEntry, NodeEntry, PlayerRating

logger = logging.getLogger("war_tracker.rating_system")


def solo_rate(kills: int, deaths: int) -> float:
    """
    Kills over fights.

    A zero denominator is replaced by 1, so a player with no fights has a
    rate of 0 and the result is never NaN.
    """
    return kills / ((kills + deaths) or 1)


class WarRatingSystem:
    """
    Computes power ratings and recalculates node difficulty.

    Handles:
    - Per-player kill rating from node values and death penalties
    - Solo rate bonus relative to the alliance
    - Difficulty recalculation from the distribution of deaths across nodes

    All methods are pure; callers load and persist the inputs.
    """

    # Normalization constants for difficulty recalculation
    FIGHTS_PER_NODE = DIFFICULTY_FIGHTS_PER_NODE
    TOTAL_BASE = DIFFICULTY_TOTAL_BASE
    TOTAL_OFFSET = DIFFICULTY_TOTAL_OFFSET
    NODE_OFFSET = DIFFICULTY_NODE_OFFSET
    SCALE = DIFFICULTY_SCALE
    FLOOR = DIFFICULTY_FLOOR

    def __init__(self, solo_rate_multiplier: float | None = None, node_count: int | None = None):
        """
        Initialize rating system.

        Args:
            solo_rate_multiplier: Weight applied to the solo rate difference
            node_count: Number of war nodes (ids 1..node_count)
        """
        self.solo_rate_multiplier = (
            solo_rate_multiplier
            if solo_rate_multiplier is not None
            else SOLO_RATE_BONUS_MULTIPLIER
        )
        self.node_count = node_count if node_count is not None else NODE_COUNT

    def compute_alliance_totals(
        self,
        players: Iterable[Player],
        battlegroup_deaths: Iterable[BattlegroupDeathEntry] = (),
    ) -> AllianceTotals:
        """
        Sum kills and deaths for the whole alliance.

        Hidden players are included, as are deaths logged against a
        battlegroup rather than a specific player.
        """
        kills = 0
        deaths = 0
        for player in players:
            kills += player.total_kills
            deaths += player.total_deaths
        deaths += sum(entry.deaths for entry in battlegroup_deaths)
        return AllianceTotals(kills=kills, deaths=deaths)

    def total_kill_rating(
        self, player: Player, nodes: Mapping[int, NodeDifficulty]
    ) -> tuple[float, float]:
        """
        Return (total kill rating, accumulated difficulty) for a player.

        A node that cannot be evaluated contributes nothing.
        """
        total_kill_rating = 0.0
        difficulty_accum = 0.0
        for node_id, node in nodes.items():
            try:
                kills = player.kills_per_node.get(node_id, 0)
                deaths = player.deaths_per_node.get(node_id, 0)
                node_value = float(node.current_value)
                kill_rating = node_value * kills - float(node.death_penalty) * deaths
                fight_difficulty = node_value * kills
            except (AttributeError, TypeError, ValueError) as exc:
                logger.warning(
                    f"Skipping node {node_id} for {player.name}: unusable difficulty data ({exc})"
                )
                continue
            total_kill_rating += kill_rating
            difficulty_accum += fight_difficulty
        return total_kill_rating, difficulty_accum

    def compute_power_rating(
        self,
        player: Player,
        nodes: Mapping[int, NodeDifficulty],
        alliance: AllianceTotals,
    ) -> PlayerRating:
        """
        Compute a player's power rating and difficulty rating per fight.

        Args:
            player: Player with per-node kill and death counts
            nodes: Node difficulty table keyed by node id
            alliance: Alliance-wide kill and death totals

        Returns:
            PlayerRating with both ratings rounded to 2 decimal places
        """
        kills = player.total_kills
        deaths = player.total_deaths
        total_kill_rating, difficulty_accum = self.total_kill_rating(player, nodes)

        player_solo_rate = solo_rate(kills, deaths)
        alliance_solo_rate = solo_rate(alliance.kills, alliance.deaths)
        solo_rate_bonus = (
            total_kill_rating * (player_solo_rate - alliance_solo_rate) * self.solo_rate_multiplier
        )

        difficulty_per_fight = difficulty_accum / kills if kills > 0 else 0.0

        return PlayerRating(
            name=player.name,
            battlegroup=player.battlegroup,
            kills=kills,
            deaths=deaths,
            power_rating=round(total_kill_rating + solo_rate_bonus, 2),
            difficulty_rating_per_fight=round(difficulty_per_fight, 2),
            solo_rate=player_solo_rate,
            hidden=player.hidden,
            is_custom=player.is_custom,
        )

    def compute_power_ratings(
        self,
        players: list[Player],
        nodes: Mapping[int, NodeDifficulty],
        alliance: AllianceTotals | None = None,
    ) -> list[PlayerRating]:
        """
        Rate every player, preserving input order.

        When alliance totals are not supplied they are derived from the
        players alone.
        """
        if alliance is None:
            alliance = self.compute_alliance_totals(players)
        ratings = []
        for player in players:
            try:
                ratings.append(self.compute_power_rating(player, nodes, alliance))
            except (AttributeError, TypeError, ValueError, ArithmeticError) as exc:
                logger.error(f"Failed to rate {player.name}, using zero rating: {exc}")
                ratings.append(
                    PlayerRating(
                        name=player.name,
                        battlegroup=player.battlegroup,
                        kills=0,
                        deaths=0,
                        power_rating=0.0,
                        difficulty_rating_per_fight=0.0,
                        solo_rate=0.0,
                        hidden=player.hidden,
                        is_custom=player.is_custom,
                    )
                )
        return ratings

    def aggregate_node_stats(self, entries: Iterable[NodeEntry]) -> dict[int, tuple[int, int]]:
        """
        Count kills and deaths per node from logged fights.

        Carry-over entries and entries on nodes outside 1..node_count are ignored.
        """
        stats = {node_id: (0, 0) for node_id in range(1, self.node_count + 1)}
        for entry in entries:
            if entry.carry_over or not entry.node or entry.node not in stats:
                continue
            kills, deaths = stats[entry.node]
            stats[entry.node] = (kills + 1, deaths + (entry.deaths or 0))
        return stats

    def recalculate_node_difficulty(
        self,
        node_stats: Mapping[int, tuple[int, int]],
        nodes: Mapping[int, NodeDifficulty],
        settings: DifficultySettings,
        now: datetime | None = None,
    ) -> dict[int, NodeDifficulty]:
        """
        Recalculate every node's current value from the death distribution.

        totalDifficulty = totalDeaths / (150 * (419 + 0))
        nodeDifficulty  = ((nodeDeaths / (150 * (419 + 12))) / totalDifficulty) * 10 + 1

        The result is clamped to [settings.min_value, settings.max_value].
        With no deaths anywhere, each node falls back to its clamped base value.

        Returns:
            New node table; the input mapping is not modified
        """
        timestamp = (now or datetime.now(timezone.utc)).isoformat()
        total_deaths = sum(deaths for _, deaths in node_stats.values())
        total_difficulty = total_deaths / (
            self.FIGHTS_PER_NODE * (self.TOTAL_BASE + self.TOTAL_OFFSET)
        )
        node_denominator = self.FIGHTS_PER_NODE * (self.TOTAL_BASE + self.NODE_OFFSET)

        updated: dict[int, NodeDifficulty] = {}
        for node_id in range(1, self.node_count + 1):
            kills, deaths = node_stats.get(node_id, (0, 0))
            current = nodes.get(node_id) or NodeDifficulty()

            if total_difficulty > 0:
                node_difficulty = (
                    (deaths / node_denominator) / total_difficulty
                ) * self.SCALE + self.FLOOR
            else:
                node_difficulty = current.base_value

            updated[node_id] = replace(
                current,
                current_value=settings.clamp(node_difficulty),
                total_kills=kills,
                total_deaths=deaths,
                last_updated=timestamp,
            )

        # Nodes outside the configured range keep their parameters untouched
        for node_id, node in nodes.items():
            if node_id not in updated:
                updated[node_id] = node

        logger.info(
            f"Recalculated difficulty for {self.node_count} nodes from {total_deaths} deaths"
        )
        return updated
