"""
Helpers for ranking players and battlegroups.
"""

from __future__ import annotations

from typing import Iterable

from domain.models.war_stats import BattlegroupDeathEntry, BattlegroupTotals, PlayerRating
from rating_system import solo_rate

SORT_KEYS = {
    "pr": lambda r: r.power_rating,
    "kills": lambda r: r.kills,
    "deaths": lambda r: r.deaths,
    "solo_rate": lambda r: solo_rate(r.kills, r.deaths),
}

SORT_LABELS = {
    "pr": "Power Rating",
    "kills": "Kills",
    "deaths": "Deaths",
    "solo_rate": "Solo Rate",
}


def sort_players(ratings: Iterable[PlayerRating], sort_key: str = "pr") -> list[PlayerRating]:
    """
    Sort ratings descending by the given key.

    Raises:
        ValueError: If sort_key is not one of pr, kills, deaths, solo_rate
    """
    key = SORT_KEYS.get(sort_key)
    if key is None:
        raise ValueError(f"Unknown sort key: {sort_key}")
    return sorted(ratings, key=key, reverse=True)


def visible_only(ratings: Iterable[PlayerRating]) -> list[PlayerRating]:
    return [r for r in ratings if not r.hidden]


def _in_period(entry: BattlegroupDeathEntry, season: int | None, war: int | None) -> bool:
    if season is not None and entry.season != season:
        return False
    if war is not None and entry.war != war:
        return False
    return True


def compute_battlegroup_totals(
    ratings: list[PlayerRating],
    battlegroup_deaths: list[BattlegroupDeathEntry],
    battlegroups: list[str],
    season: int | None = None,
    war: int | None = None,
) -> list[BattlegroupTotals]:
    """
    Aggregate member totals per battlegroup, ranked by summed power rating.

    Hidden players count toward totals but not toward visible_player_count.
    Unattributed battlegroup deaths are added for the reporting period.
    """
    totals = []
    for bg in battlegroups:
        members = [r for r in ratings if r.battlegroup == bg]
        bg_deaths = sum(
            e.deaths
            for e in battlegroup_deaths
            if e.battlegroup == bg and _in_period(e, season, war)
        )
        avg_solo_rate = (
            sum(solo_rate(r.kills, r.deaths) for r in members) / len(members) if members else 0.0
        )
        totals.append(
            BattlegroupTotals(
                battlegroup=bg,
                total_kills=sum(r.kills for r in members),
                total_deaths=sum(r.deaths for r in members) + bg_deaths,
                total_pr=round(sum(r.power_rating for r in members), 2),
                avg_solo_rate=avg_solo_rate,
                player_count=len(members),
                visible_player_count=len([r for r in members if not r.hidden]),
            )
        )
    totals.sort(key=lambda t: t.total_pr, reverse=True)
    return totals
