"""
Kill streak replay over a player's logged fights.
"""

from __future__ import annotations

from typing import Iterable

from domain.models.war_stats import NodeEntry, StreakResult


def order_by_war(entries: Iterable[NodeEntry]) -> list[NodeEntry]:
    """
    Chronological order for streak replay.

    Entries without a war (carry-overs, unassigned fights) come first; the
    sort is stable so fights within the same war keep their logged order.
    """
    return sorted(entries, key=lambda e: (e.war is not None, e.war or 0))


def compute_streak(
    name: str,
    entries: Iterable[NodeEntry],
    baseline_current: int = 0,
    baseline_high: int = 0,
    battlegroup: str | None = None,
) -> StreakResult:
    """
    Replay fights to find the current and best kill streak.

    A fight with any deaths resets the streak to zero, even if it also names
    a node. Otherwise a fight on a node extends the streak by one.

    Args:
        name: Player name
        entries: The player's logged fights, in any order
        baseline_current: Streak carried in from the historical ladder
        baseline_high: Historical best; only replaced when live play beats it
    """
    current = baseline_current
    session_high = current
    total_kills = 0
    total_deaths = 0

    for entry in order_by_war(entries):
        kills = entry.kills
        deaths = entry.deaths or 0
        total_kills += kills
        total_deaths += deaths

        if deaths > 0:
            current = 0
        elif kills > 0:
            current += kills
            session_high = max(session_high, current)

    live_best = max(current, session_high)
    is_new_high = live_best > baseline_high
    return StreakResult(
        name=name,
        current_streak=current,
        session_high=session_high,
        high_streak=live_best if is_new_high else baseline_high,
        is_new_high=is_new_high,
        total_kills=total_kills,
        total_deaths=total_deaths,
        battlegroup=battlegroup,
    )
