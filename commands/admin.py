"""
Admin commands: roster maintenance, fight logging, difficulty and seasons.
"""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from config import BATTLEGROUPS
from services.permissions import has_admin_permission
from utils.interaction_safety import safe_defer, safe_followup

logger = logging.getLogger("war_tracker.commands.admin")

BATTLEGROUP_CHOICES = [app_commands.Choice(name=bg, value=bg) for bg in BATTLEGROUPS]

ADMIN_ONLY_MESSAGE = "❌ Admin only! You need Administrator or Manage Server permissions."


class AdminCommands(commands.Cog):
    """Admin-only slash commands."""

    def __init__(
        self,
        bot: commands.Bot,
        rating_service,
        roster_service,
        season_service,
        streak_service=None,
        import_service=None,
    ):
        self.bot = bot
        self.rating_service = rating_service
        self.roster_service = roster_service
        self.season_service = season_service
        self.streak_service = streak_service
        self.import_service = import_service

    async def _begin(self, interaction: discord.Interaction, command: str) -> bool:
        """Defer and check admin permission. Returns False when the command should stop."""
        logger.info(f"{command} command invoked by user {interaction.user.id} ({interaction.user})")
        if not await safe_defer(interaction, ephemeral=True):
            logger.warning(f"{command}: Failed to defer interaction {interaction.id}")
            return False
        if not has_admin_permission(interaction):
            await safe_followup(interaction, content=ADMIN_ONLY_MESSAGE, ephemeral=True)
            return False
        return True

    async def _reply(self, interaction: discord.Interaction, result: dict) -> None:
        if result.get("success"):
            content = f"✅ {result.get('message', 'Done.')}"
        else:
            content = f"❌ {result.get('error', 'Something went wrong.')}"
        await safe_followup(interaction, content=content, ephemeral=True)

    @app_commands.command(name="recordfight", description="Log a node kill for a player (Admin only)")
    @app_commands.describe(
        player="Player name",
        node="Node number (1-50)",
        deaths="Deaths taken on the node",
        war="War number, if known",
    )
    async def recordfight(
        self,
        interaction: discord.Interaction,
        player: str,
        node: int,
        deaths: int = 0,
        war: int | None = None,
    ):
        if not await self._begin(interaction, "recordfight"):
            return
        await self._reply(
            interaction, self.roster_service.record_fight(player, node, deaths=deaths, war=war)
        )

    @app_commands.command(name="bgdeaths", description="Log deaths for a whole battlegroup (Admin only)")
    @app_commands.describe(battlegroup="Battlegroup", deaths="Number of deaths", war="War number")
    @app_commands.choices(battlegroup=BATTLEGROUP_CHOICES)
    async def bgdeaths(
        self,
        interaction: discord.Interaction,
        battlegroup: app_commands.Choice[str],
        deaths: int,
        war: int | None = None,
    ):
        if not await self._begin(interaction, "bgdeaths"):
            return
        await self._reply(
            interaction,
            self.roster_service.record_battlegroup_deaths(battlegroup.value, deaths, war=war),
        )

    @app_commands.command(name="assignwar", description="Assign a war to a player's unassigned fights (Admin only)")
    @app_commands.describe(player="Player name", war="War number")
    async def assignwar(self, interaction: discord.Interaction, player: str, war: int):
        if not await self._begin(interaction, "assignwar"):
            return
        await self._reply(interaction, self.roster_service.assign_war(player, war))

    @app_commands.command(name="addplayer", description="Add a custom player to the roster (Admin only)")
    @app_commands.describe(name="Player name", battlegroup="Battlegroup")
    @app_commands.choices(battlegroup=BATTLEGROUP_CHOICES)
    async def addplayer(
        self,
        interaction: discord.Interaction,
        name: str,
        battlegroup: app_commands.Choice[str],
    ):
        if not await self._begin(interaction, "addplayer"):
            return
        await self._reply(interaction, self.roster_service.add_custom_player(name, battlegroup.value))

    @app_commands.command(name="hideplayer", description="Hide or show a player in rankings (Admin only)")
    @app_commands.describe(player="Player name", hidden="Hide (true) or show (false)")
    async def hideplayer(self, interaction: discord.Interaction, player: str, hidden: bool = True):
        if not await self._begin(interaction, "hideplayer"):
            return
        await self._reply(interaction, self.roster_service.set_hidden(player, hidden))

    @app_commands.command(name="deleteplayer", description="Permanently delete a player and their fights (Admin only)")
    @app_commands.describe(player="Player name")
    async def deleteplayer(self, interaction: discord.Interaction, player: str):
        if not await self._begin(interaction, "deleteplayer"):
            return
        await self._reply(interaction, self.roster_service.delete_player(player))

    @app_commands.command(name="restoreimport", description="Allow a deleted player back into the roster import (Admin only)")
    @app_commands.describe(player="Player name")
    async def restoreimport(self, interaction: discord.Interaction, player: str):
        if not await self._begin(interaction, "restoreimport"):
            return
        await self._reply(interaction, self.roster_service.restore_import_player(player))

    @app_commands.command(name="recalcdifficulty", description="Recalculate node difficulty from logged fights (Admin only)")
    async def recalcdifficulty(self, interaction: discord.Interaction):
        if not await self._begin(interaction, "recalcdifficulty"):
            return
        result = self.rating_service.recalculate_difficulty()
        if result.get("success"):
            result = dict(result)
            result["message"] = (
                f"{result['message']} ({result['total_kills']} kills, "
                f"{result['total_deaths']} deaths across {result['nodes_count']} nodes)"
            )
        await self._reply(interaction, result)

    @app_commands.command(name="initdifficulty", description="Reset node difficulty to the spreadsheet values (Admin only)")
    async def initdifficulty(self, interaction: discord.Interaction):
        if not await self._begin(interaction, "initdifficulty"):
            return
        await self._reply(interaction, self.rating_service.initialize_from_csv())

    @app_commands.command(name="setnode", description="Override a node's difficulty values (Admin only)")
    @app_commands.describe(
        node="Node number (1-50)",
        base_value="Base value",
        current_value="Current value used for ratings",
        kill_bonus="Kill bonus",
        death_penalty="Death penalty",
    )
    async def setnode(
        self,
        interaction: discord.Interaction,
        node: int,
        base_value: float | None = None,
        current_value: float | None = None,
        kill_bonus: float | None = None,
        death_penalty: float | None = None,
    ):
        if not await self._begin(interaction, "setnode"):
            return
        await self._reply(
            interaction,
            self.rating_service.set_node(
                node,
                base_value=base_value,
                current_value=current_value,
                kill_bonus=kill_bonus,
                death_penalty=death_penalty,
            ),
        )

    @app_commands.command(name="newseason", description="Archive the current season and start a new one (Admin only)")
    @app_commands.describe(
        season_number="Number of the new season",
        season_name="Display name (default: Season N)",
        description="Note stored with the archived season",
    )
    async def newseason(
        self,
        interaction: discord.Interaction,
        season_number: int,
        season_name: str | None = None,
        description: str | None = None,
    ):
        if not await self._begin(interaction, "newseason"):
            return
        try:
            result = self.season_service.start_new_season(
                season_number, season_name=season_name, description=description
            )
        except Exception as exc:
            logger.error(f"Error starting season {season_number}: {exc}", exc_info=True)
            result = {"success": False, "error": "Failed to start new season"}
        if result.get("success") and result.get("carried_over"):
            result = dict(result)
            result["message"] += f" Carried over streaks for {len(result['carried_over'])} players."
        await self._reply(interaction, result)

    @app_commands.command(name="switchseason", description="Switch the current season (Admin only)")
    @app_commands.describe(season_number="Season number")
    async def switchseason(self, interaction: discord.Interaction, season_number: int):
        if not await self._begin(interaction, "switchseason"):
            return
        await self._reply(interaction, self.season_service.switch_season(season_number))

    @app_commands.command(name="restoreseason", description="Restore an archived season (Admin only)")
    @app_commands.describe(season_number="Archived season number")
    async def restoreseason(self, interaction: discord.Interaction, season_number: int):
        if not await self._begin(interaction, "restoreseason"):
            return
        try:
            result = self.season_service.restore_season(season_number)
        except Exception as exc:
            logger.error(f"Error restoring season {season_number}: {exc}", exc_info=True)
            result = {"success": False, "error": "Failed to restore season"}
        await self._reply(interaction, result)

    @app_commands.command(name="deleteseason", description="Delete an archived season (Admin only)")
    @app_commands.describe(season_number="Archived season number")
    async def deleteseason(self, interaction: discord.Interaction, season_number: int):
        if not await self._begin(interaction, "deleteseason"):
            return
        await self._reply(interaction, self.season_service.delete_season(season_number))

    @app_commands.command(name="createseason", description="Create a war calendar for a season (Admin only)")
    @app_commands.describe(season_number="Season number")
    async def createseason(self, interaction: discord.Interaction, season_number: int):
        if not await self._begin(interaction, "createseason"):
            return
        await self._reply(interaction, self.season_service.create_season(season_number))

    @app_commands.command(name="startwar", description="Start a war; ends any active war (Admin only)")
    @app_commands.describe(war="War number", season_number="Season (default: current)")
    async def startwar(
        self, interaction: discord.Interaction, war: int, season_number: int | None = None
    ):
        if not await self._begin(interaction, "startwar"):
            return
        if season_number is None:
            season_number = self.season_service.get_current_season().season_number
        await self._reply(interaction, self.season_service.start_war(season_number, war))

    @app_commands.command(name="endwar", description="End a war (Admin only)")
    @app_commands.describe(war="War number", season_number="Season (default: current)")
    async def endwar(
        self, interaction: discord.Interaction, war: int, season_number: int | None = None
    ):
        if not await self._begin(interaction, "endwar"):
            return
        if season_number is None:
            season_number = self.season_service.get_current_season().season_number
        await self._reply(interaction, self.season_service.end_war(season_number, war))

    @app_commands.command(name="importroster", description="Import the roster and streak ladder spreadsheets (Admin only)")
    async def importroster(self, interaction: discord.Interaction):
        if not await self._begin(interaction, "importroster"):
            return
        if self.import_service is None:
            await self._reply(interaction, {"success": False, "error": "Import is not configured"})
            return

        result = self.import_service.import_roster()
        if not result.get("success"):
            await self._reply(interaction, result)
            return

        message = f"Imported {len(result['imported'])} players"
        if result["skipped"]:
            message += f", skipped {len(result['skipped'])} deleted players"
        streaks = self.import_service.import_streak_baselines()
        if streaks.get("success"):
            message += f". Loaded {streaks['count']} streak baselines"
        else:
            message += f". Streak ladder not loaded: {streaks.get('error')}"
        await self._reply(interaction, {"success": True, "message": message})

    @app_commands.command(name="savehighs", description="Save current all-time streak highs (Admin only)")
    async def savehighs(self, interaction: discord.Interaction):
        if not await self._begin(interaction, "savehighs"):
            return
        if self.streak_service is None:
            await self._reply(interaction, {"success": False, "error": "Streaks are not configured"})
            return
        await self._reply(interaction, self.streak_service.save_all_time_highs())


async def setup(bot: commands.Bot):
    rating_service = getattr(bot, "rating_service", None)
    roster_service = getattr(bot, "roster_service", None)
    season_service = getattr(bot, "season_service", None)
    streak_service = getattr(bot, "streak_service", None)
    import_service = getattr(bot, "import_service", None)

    # Check if cog is already loaded
    if "AdminCommands" in [cog.__class__.__name__ for cog in bot.cogs.values()]:
        logger.warning("AdminCommands cog is already loaded, skipping duplicate registration")
        return

    await bot.add_cog(
        AdminCommands(
            bot, rating_service, roster_service, season_service, streak_service, import_service
        )
    )
    logger.info(f"AdminCommands cog loaded with {len(AdminCommands.__cog_app_commands__)} commands")
