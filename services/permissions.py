"""
Permission checks for admin-only commands.
"""

import discord

from config import ADMIN_USER_IDS, USE_ADMIN_PERMISSION_FALLBACK


def has_admin_permission(interaction: discord.Interaction) -> bool:
    """
    True for configured admin user IDs, or members with Administrator or
    Manage Server permission when the permission fallback is enabled.
    """
    user = interaction.user
    if user is None:
        return False
    if user.id in ADMIN_USER_IDS:
        return True
    if not USE_ADMIN_PERMISSION_FALLBACK:
        return False
    permissions = getattr(user, "guild_permissions", None)
    if permissions is None:
        return False
    return bool(permissions.administrator or permissions.manage_guild)
