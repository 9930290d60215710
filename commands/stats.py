"""
Stats commands for the bot: /leaderboard, /player, /battlegroups, /streaks, /season
"""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from config import CENTENNIAL_STREAK, LEADERBOARD_DEFAULT_LIMIT
from utils.embeds import (
    create_battlegroups_embed,
    create_leaderboard_embed,
    create_player_embed,
    create_season_embed,
    create_streaks_embed,
)
from utils.interaction_safety import safe_defer, safe_followup
from utils.rankings import SORT_LABELS

logger = logging.getLogger("war_tracker.commands.stats")


class StatsCommands(commands.Cog):
    """Commands for viewing ratings, standings and streaks."""

    def __init__(self, bot: commands.Bot, rating_service, streak_service, season_service):
        self.bot = bot
        self.rating_service = rating_service
        self.streak_service = streak_service
        self.season_service = season_service

    @app_commands.command(name="leaderboard", description="View the alliance leaderboard")
    @app_commands.describe(
        sort="What to rank players by",
        limit="Number of players to show (default: 20, max: 100)",
    )
    @app_commands.choices(
        sort=[app_commands.Choice(name=label, value=key) for key, label in SORT_LABELS.items()]
    )
    async def leaderboard(
        self,
        interaction: discord.Interaction,
        sort: app_commands.Choice[str] = None,
        limit: int = LEADERBOARD_DEFAULT_LIMIT,
    ):
        sort_key = sort.value if sort else "pr"
        logger.info(
            f"Leaderboard command: User {interaction.user.id} ({interaction.user}) "
            f"sort={sort_key} limit={limit}"
        )
        if not await safe_defer(interaction, ephemeral=False):
            logger.warning("Leaderboard: defer failed, proceeding to send fallback response")

        if limit < 1 or limit > 100:
            await safe_followup(
                interaction,
                content="Please provide a limit between 1 and 100.",
                ephemeral=True,
            )
            return

        try:
            ratings = self.rating_service.get_leaderboard(sort_key=sort_key, limit=limit)
            season = self.season_service.get_current_season()
        except ValueError as exc:
            await safe_followup(interaction, content=f"❌ {exc}", ephemeral=True)
            return
        except Exception as exc:
            logger.error(f"Error in leaderboard command: {exc}", exc_info=True)
            await safe_followup(
                interaction,
                content="❌ Failed to build the leaderboard. Please try again.",
                ephemeral=True,
            )
            return

        await safe_followup(
            interaction,
            embed=create_leaderboard_embed(ratings, sort_key, season),
            allowed_mentions=discord.AllowedMentions.none(),
        )

    @app_commands.command(name="player", description="View a player's ratings")
    @app_commands.describe(name="Player name as it appears on the roster")
    async def player(self, interaction: discord.Interaction, name: str):
        logger.info(f"Player command: User {interaction.user.id} ({interaction.user}) name={name}")
        if not await safe_defer(interaction, ephemeral=False):
            return

        rating = self.rating_service.get_player_rating(name)
        if rating is None:
            await safe_followup(
                interaction, content=f"❌ Player `{name}` not found.", ephemeral=True
            )
            return

        rank = None
        if not rating.hidden:
            ranked = self.rating_service.get_leaderboard()
            for i, r in enumerate(ranked, 1):
                if r.name == rating.name:
                    rank = i
                    break

        await safe_followup(interaction, embed=create_player_embed(rating, rank))

    @app_commands.command(name="battlegroups", description="View battlegroup standings")
    @app_commands.describe(war="Only count battlegroup deaths from this war")
    async def battlegroups(self, interaction: discord.Interaction, war: int | None = None):
        logger.info(f"Battlegroups command: User {interaction.user.id} ({interaction.user})")
        if not await safe_defer(interaction, ephemeral=False):
            return

        season = self.season_service.get_current_season()
        totals = self.rating_service.get_battlegroup_standings(
            season=season.season_number if war is not None else None, war=war
        )
        await safe_followup(interaction, embed=create_battlegroups_embed(totals, season))

    @app_commands.command(name="streaks", description="View active kill streaks")
    async def streaks(self, interaction: discord.Interaction):
        logger.info(f"Streaks command: User {interaction.user.id} ({interaction.user})")
        if not await safe_defer(interaction, ephemeral=False):
            return

        results = self.streak_service.get_active_streaks()
        await safe_followup(
            interaction, embed=create_streaks_embed(results, CENTENNIAL_STREAK)
        )

    @app_commands.command(name="season", description="View the current season and war calendar")
    async def season(self, interaction: discord.Interaction):
        logger.info(f"Season command: User {interaction.user.id} ({interaction.user})")
        if not await safe_defer(interaction, ephemeral=True):
            return

        current = self.season_service.get_current_season()
        calendar = self.season_service.get_season(current.season_number)
        available = self.season_service.list_available_seasons()
        await safe_followup(
            interaction,
            embed=create_season_embed(current, calendar, available),
            ephemeral=True,
        )


async def setup(bot: commands.Bot):
    """Setup function called when loading the cog."""
    rating_service = getattr(bot, "rating_service", None)
    streak_service = getattr(bot, "streak_service", None)
    season_service = getattr(bot, "season_service", None)

    await bot.add_cog(StatsCommands(bot, rating_service, streak_service, season_service))
