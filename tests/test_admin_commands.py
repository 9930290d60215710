"""
Tests for admin slash commands.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest
from discord import app_commands

from commands.admin import ADMIN_ONLY_MESSAGE, AdminCommands
from domain.models.season import CurrentSeason


def make_interaction():
    interaction = MagicMock()
    interaction.user.id = 1
    interaction.response.defer = AsyncMock()
    interaction.response.is_done.return_value = True
    interaction.followup.send = AsyncMock()
    return interaction


def sent_content(interaction):
    interaction.followup.send.assert_awaited_once()
    return interaction.followup.send.call_args.kwargs["content"]


@pytest.fixture
def cog():
    return AdminCommands(
        MagicMock(),
        rating_service=MagicMock(),
        roster_service=MagicMock(),
        season_service=MagicMock(),
        streak_service=MagicMock(),
        import_service=MagicMock(),
    )


@pytest.mark.asyncio
async def test_non_admin_rejected(cog):
    interaction = make_interaction()

    with patch("commands.admin.has_admin_permission", return_value=False):
        await cog.recordfight.callback(cog, interaction, player="Ace", node=3)

    assert sent_content(interaction) == ADMIN_ONLY_MESSAGE
    cog.roster_service.record_fight.assert_not_called()


@pytest.mark.asyncio
async def test_defer_failure_stops_command(cog):
    interaction = make_interaction()
    interaction.response.defer.side_effect = discord.NotFound(MagicMock(status=404), "gone")

    with patch("commands.admin.has_admin_permission", return_value=True):
        await cog.deleteplayer.callback(cog, interaction, player="Ace")

    interaction.followup.send.assert_not_called()
    cog.roster_service.delete_player.assert_not_called()


@pytest.mark.asyncio
async def test_recordfight(cog):
    cog.roster_service.record_fight.return_value = {"success": True, "message": "Recorded node 3"}
    interaction = make_interaction()

    with patch("commands.admin.has_admin_permission", return_value=True):
        await cog.recordfight.callback(cog, interaction, player="Ace", node=3, deaths=1, war=2)

    cog.roster_service.record_fight.assert_called_once_with("Ace", 3, deaths=1, war=2)
    assert sent_content(interaction) == "✅ Recorded node 3"


@pytest.mark.asyncio
async def test_failure_reported(cog):
    cog.roster_service.add_custom_player.return_value = {
        "success": False,
        "error": "Player already exists",
    }
    interaction = make_interaction()

    with patch("commands.admin.has_admin_permission", return_value=True):
        await cog.addplayer.callback(
            cog, interaction, name="Ace", battlegroup=app_commands.Choice(name="BG1", value="BG1")
        )

    cog.roster_service.add_custom_player.assert_called_once_with("Ace", "BG1")
    assert sent_content(interaction) == "❌ Player already exists"


@pytest.mark.asyncio
async def test_bgdeaths(cog):
    cog.roster_service.record_battlegroup_deaths.return_value = {"success": True, "message": "ok"}
    interaction = make_interaction()

    with patch("commands.admin.has_admin_permission", return_value=True):
        await cog.bgdeaths.callback(
            cog, interaction, battlegroup=app_commands.Choice(name="BG2", value="BG2"), deaths=4
        )

    cog.roster_service.record_battlegroup_deaths.assert_called_once_with("BG2", 4, war=None)


@pytest.mark.asyncio
async def test_recalcdifficulty_summarizes(cog):
    cog.rating_service.recalculate_difficulty.return_value = {
        "success": True,
        "message": "Difficulty ratings recalculated successfully",
        "nodes_count": 50,
        "total_kills": 12,
        "total_deaths": 4,
    }
    interaction = make_interaction()

    with patch("commands.admin.has_admin_permission", return_value=True):
        await cog.recalcdifficulty.callback(cog, interaction)

    content = sent_content(interaction)
    assert "12 kills" in content
    assert "4 deaths across 50 nodes" in content


@pytest.mark.asyncio
async def test_setnode_passes_only_given_values(cog):
    cog.rating_service.set_node.return_value = {"success": True, "message": "Node 7 updated"}
    interaction = make_interaction()

    with patch("commands.admin.has_admin_permission", return_value=True):
        await cog.setnode.callback(cog, interaction, node=7, current_value=2.5)

    cog.rating_service.set_node.assert_called_once_with(
        7, base_value=None, current_value=2.5, kill_bonus=None, death_penalty=None
    )


@pytest.mark.asyncio
async def test_newseason_reports_carry_over(cog):
    cog.season_service.start_new_season.return_value = {
        "success": True,
        "message": "Started Season 61. Season 60 archived.",
        "archived_season": 60,
        "carried_over": {"Ace": 3, "Bee": 1},
    }
    interaction = make_interaction()

    with patch("commands.admin.has_admin_permission", return_value=True):
        await cog.newseason.callback(cog, interaction, season_number=61)

    assert "Carried over streaks for 2 players" in sent_content(interaction)


@pytest.mark.asyncio
async def test_newseason_unexpected_error(cog):
    cog.season_service.start_new_season.side_effect = RuntimeError("disk full")
    interaction = make_interaction()

    with patch("commands.admin.has_admin_permission", return_value=True):
        await cog.newseason.callback(cog, interaction, season_number=61)

    assert sent_content(interaction) == "❌ Failed to start new season"


@pytest.mark.asyncio
async def test_startwar_defaults_to_current_season(cog):
    cog.season_service.get_current_season.return_value = CurrentSeason(62, "Season 62")
    cog.season_service.start_war.return_value = {"success": True, "message": "War 3 started"}
    interaction = make_interaction()

    with patch("commands.admin.has_admin_permission", return_value=True):
        await cog.startwar.callback(cog, interaction, war=3)

    cog.season_service.start_war.assert_called_once_with(62, 3)


@pytest.mark.asyncio
async def test_importroster_loads_streaks_too(cog):
    cog.import_service.import_roster.return_value = {
        "success": True,
        "imported": ["Ace", "Bee"],
        "skipped": ["Cat"],
    }
    cog.import_service.import_streak_baselines.return_value = {"success": True, "count": 5}
    interaction = make_interaction()

    with patch("commands.admin.has_admin_permission", return_value=True):
        await cog.importroster.callback(cog, interaction)

    content = sent_content(interaction)
    assert "Imported 2 players" in content
    assert "skipped 1 deleted players" in content
    assert "Loaded 5 streak baselines" in content


@pytest.mark.asyncio
async def test_importroster_stops_on_bad_roster(cog):
    cog.import_service.import_roster.return_value = {"success": False, "error": "CSV file not found"}
    interaction = make_interaction()

    with patch("commands.admin.has_admin_permission", return_value=True):
        await cog.importroster.callback(cog, interaction)

    assert sent_content(interaction) == "❌ CSV file not found"
    cog.import_service.import_streak_baselines.assert_not_called()
