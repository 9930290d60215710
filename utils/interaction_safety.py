"""
Utilities for safely interacting with Discord responses/followups.
"""

import logging

import discord

logger = logging.getLogger("war_tracker.utils.interaction_safety")


async def safe_defer(interaction: discord.Interaction, *, ephemeral: bool = False) -> bool:
    """
    Defer the interaction if it is still valid.

    Returns True when the defer succeeded (or the response already exists),
    False when the interaction is no longer valid.
    """
    try:
        await interaction.response.defer(ephemeral=ephemeral)
        return True
    except (discord.NotFound, discord.InteractionResponded, discord.HTTPException) as exc:
        logger.warning("Unable to defer interaction: %s", exc)
        return False


async def safe_followup(
    interaction: discord.Interaction,
    *,
    content: str | None = None,
    embed: discord.Embed | None = None,
    ephemeral: bool = False,
    allowed_mentions: discord.AllowedMentions | None = None,
) -> discord.Message | None:
    """
    Send a followup via the interaction if possible; otherwise post directly in the channel.

    Returns None if the interaction was already responded to (to prevent duplicate messages).
    """
    try:
        return await interaction.followup.send(
            content=content,
            embed=embed,
            ephemeral=ephemeral,
            allowed_mentions=allowed_mentions,
        )
    except (discord.NotFound, discord.InteractionResponded, discord.HTTPException) as exc:
        if interaction.response.is_done():
            logger.warning(
                f"Followup failed and interaction already responded to. "
                f"Not sending fallback message to prevent duplicates. Error: {exc}"
            )
            return None

        logger.warning("Followup failed, sending to channel instead: %s", exc)
        channel = interaction.channel
        if not channel:
            raise
        return await channel.send(content=content, embed=embed, allowed_mentions=allowed_mentions)
