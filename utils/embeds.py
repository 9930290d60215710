"""
Reusable Discord embed builders.
"""

import discord

from domain.models.season import CurrentSeason, Season
from domain.models.war_stats import BattlegroupTotals, PlayerRating, StreakResult
from utils.formatting import (
    CENTENNIAL_EMOJI,
    format_battlegroup,
    format_kd,
    format_percent,
    format_rank,
)
from utils.rankings import SORT_LABELS

# Discord caps embed field values at 1024 characters
FIELD_VALUE_LIMIT = 1024


def _chunk_lines(lines: list[str], limit: int = FIELD_VALUE_LIMIT) -> list[str]:
    """Split lines into field-sized chunks."""
    chunks = []
    current = ""
    for line in lines:
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


def create_leaderboard_embed(
    ratings: list[PlayerRating], sort_key: str, season: CurrentSeason | None = None
) -> discord.Embed:
    title = f"🏆 Leaderboard - {SORT_LABELS.get(sort_key, sort_key)}"
    embed = discord.Embed(
        title=title,
        description=season.season_name if season else None,
        color=discord.Color.gold(),
    )
    if not ratings:
        embed.add_field(name="Players", value="No players on the roster yet.", inline=False)
        return embed

    lines = []
    for i, r in enumerate(ratings, 1):
        lines.append(
            f"{format_rank(i)} **{r.name}** ({r.battlegroup or 'No BG'}) "
            f"PR {r.power_rating:.2f} | K-D {format_kd(r.kills, r.deaths)} | "
            f"Solo {format_percent(r.solo_rate)}"
        )
    for idx, chunk in enumerate(_chunk_lines(lines)):
        embed.add_field(name="Players" if idx == 0 else "\u200b", value=chunk, inline=False)
    return embed


def create_player_embed(rating: PlayerRating, rank: int | None = None) -> discord.Embed:
    embed = discord.Embed(
        title=f"⚔️ {rating.name}",
        description=format_battlegroup(rating.battlegroup),
        color=discord.Color.blue(),
    )
    embed.add_field(name="Power Rating", value=f"{rating.power_rating:.2f}", inline=True)
    embed.add_field(
        name="Difficulty / Fight", value=f"{rating.difficulty_rating_per_fight:.2f}", inline=True
    )
    embed.add_field(name="Solo Rate", value=format_percent(rating.solo_rate), inline=True)
    embed.add_field(name="Kills", value=str(rating.kills), inline=True)
    embed.add_field(name="Deaths", value=str(rating.deaths), inline=True)
    if rank is not None:
        embed.add_field(name="Rank", value=f"#{rank}", inline=True)
    if rating.hidden:
        embed.set_footer(text="Hidden from rankings")
    return embed


def create_battlegroups_embed(
    totals: list[BattlegroupTotals], season: CurrentSeason | None = None
) -> discord.Embed:
    embed = discord.Embed(
        title="🛡️ Battlegroup Standings",
        description=season.season_name if season else None,
        color=discord.Color.purple(),
    )
    for i, t in enumerate(totals, 1):
        hidden = t.player_count - t.visible_player_count
        players = f"{t.visible_player_count} players"
        if hidden:
            players += f" (+{hidden} hidden)"
        embed.add_field(
            name=f"{format_rank(i)} {format_battlegroup(t.battlegroup)}",
            value=(
                f"Total PR: **{t.total_pr:.2f}**\n"
                f"K-D: {format_kd(t.total_kills, t.total_deaths)}\n"
                f"Avg Solo: {format_percent(t.avg_solo_rate)}\n"
                f"{players}"
            ),
            inline=True,
        )
    return embed


def create_streaks_embed(
    streaks: list[StreakResult], centennial_streak: int, limit: int = 15
) -> discord.Embed:
    embed = discord.Embed(title="🔥 Kill Streaks", color=discord.Color.orange())
    active = [s for s in streaks if s.current_streak > 0][:limit]
    if active:
        lines = []
        for i, s in enumerate(active, 1):
            best = f"best {s.high_streak}"
            if s.high_streak >= centennial_streak:
                best += f" {CENTENNIAL_EMOJI}"
            line = f"{format_rank(i)} **{s.name}** - {s.current_streak} ({best})"
            if s.is_new_high:
                line += " ✨ new high"
            lines.append(line)
        embed.add_field(name="Active Streaks", value=_chunk_lines(lines)[0], inline=False)
    else:
        embed.add_field(name="Active Streaks", value="No active streaks.", inline=False)

    club = sorted(
        (s for s in streaks if s.high_streak >= centennial_streak),
        key=lambda s: -s.high_streak,
    )
    if club:
        embed.add_field(
            name=f"{CENTENNIAL_EMOJI} Centennial Club",
            value=_chunk_lines([f"**{s.name}** - {s.high_streak}" for s in club])[0],
            inline=False,
        )
    return embed


def create_season_embed(
    current: CurrentSeason, season: Season | None, available: list[dict]
) -> discord.Embed:
    embed = discord.Embed(
        title=f"📅 {current.season_name}",
        color=discord.Color.teal(),
    )
    if season and season.wars:
        active = season.active_war()
        wars = []
        for w in season.wars:
            if w.is_active:
                status = "🟢"
            elif w.end_date:
                status = "✅"
            else:
                status = "⚪"
            wars.append(f"{status} War {w.war}")
        embed.add_field(
            name="Active War",
            value=f"War {active.war}" if active else "None",
            inline=False,
        )
        embed.add_field(name="Wars", value=" ".join(wars), inline=False)
    else:
        embed.add_field(name="Wars", value="No war calendar for this season.", inline=False)

    if available:
        lines = []
        for s in available:
            marker = " (current)" if s.get("is_current") else ""
            lines.append(f"• {s['season_name']}{marker}")
        embed.add_field(name="Seasons", value=_chunk_lines(lines)[0], inline=False)
    return embed
