"""
Shared formatting helpers and battlegroup constants.
"""

from collections.abc import Iterable

# Battlegroup colour markers used across embeds/messages
BATTLEGROUP_EMOJIS = {
    "BG1": "🟥",
    "BG2": "🟦",
    "BG3": "🟩",
}

MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}

# Shown next to players whose best streak reached the centennial mark
CENTENNIAL_EMOJI = "💯"


def format_battlegroup(battlegroup: str | None) -> str:
    """Return battlegroup with its marker (e.g., '🟥 BG1')."""
    if not battlegroup:
        return "No BG"
    emoji = BATTLEGROUP_EMOJIS.get(battlegroup, "")
    return f"{emoji} {battlegroup}".strip()


def format_rank(position: int) -> str:
    return MEDALS.get(position, f"{position}.")


def format_percent(rate: float) -> str:
    """Format a 0-1 rate as a percentage with one decimal (e.g., 0.8 -> '80.0%')."""
    return f"{rate * 100:.1f}%"


def format_kd(kills: int, deaths: int) -> str:
    return f"{kills}-{deaths}"


def format_name_list(names: Iterable[str], limit: int = 10) -> str:
    """Comma-separated names, truncated with a '+N more' suffix."""
    names = list(names)
    if not names:
        return "—"
    shown = ", ".join(names[:limit])
    if len(names) > limit:
        shown += f" (+{len(names) - limit} more)"
    return shown
