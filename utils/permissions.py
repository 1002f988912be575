# Permission Requirements for Cadence features
# Maps each feature to the Discord permissions it requires to function properly

import discord
from typing import Dict, List

# Feature -> List of required permission names (as they appear in discord.Permissions)
FEATURE_PERMISSIONS: Dict[str, List[str]] = {
    "MessageActivity": ["view_channel", "read_message_history"],
    "ReactionActivity": ["view_channel"],
    "TypingActivity": ["view_channel"],
    "Responder": ["manage_roles"],
    "AlertLog": ["send_messages", "embed_links"],
}

# Human-readable permission names for display
PERMISSION_DISPLAY_NAMES: Dict[str, str] = {
    "view_channel": "View Channels",
    "read_message_history": "Read Message History",
    "manage_roles": "Manage Roles",
    "send_messages": "Send Messages",
    "embed_links": "Embed Links",
}

def check_bot_permissions(guild: discord.Guild) -> Dict[str, List[str]]:
    """
    Check which features have missing permissions.

    Returns:
        Dict mapping feature names to list of missing permission names.
        Only includes features that have missing permissions.
    """
    bot_perms = guild.me.guild_permissions
    missing: Dict[str, List[str]] = {}

    for feature, required_perms in FEATURE_PERMISSIONS.items():
        feature_missing = [p for p in required_perms if not getattr(bot_perms, p, False)]
        if feature_missing:
            missing[feature] = feature_missing

    return missing

def can_assign_role(guild: discord.Guild, role: discord.Role) -> bool:
    """Roles at or above the bot's top role can't be granted, even with Manage Roles."""
    return role < guild.me.top_role

def format_missing_permissions(missing: Dict[str, List[str]]) -> str:
    """
    Format missing permissions for user display.

    Returns a formatted string like:
    • Responder: Manage Roles
    • AlertLog: Send Messages, Embed Links
    """
    lines = []
    for feature, perms in missing.items():
        perm_names = [PERMISSION_DISPLAY_NAMES.get(p, p) for p in perms]
        lines.append(f"• **{feature}**: {', '.join(perm_names)}")
    return "\n".join(lines)
