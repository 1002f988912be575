import discord
from typing import Optional
from discord.ext import commands
from detection.ledger import ActivityKind, now_ms
from detection.regularity import Verdict
from utils.logger import get_logger

log = get_logger()

class BaseActivity(commands.Cog):
    """Shared gateway-side plumbing: filters out bots/DMs and feeds the monitor."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.module_name = self.__class__.__name__

    def track(self, kind: ActivityKind, user: Optional[discord.abc.User], guild_id: Optional[int]) -> Optional[Verdict]:
        if user is None or user.bot:
            return None
        if guild_id is None:
            # DMs and group chats have no guild to tag the account in
            return None

        try:
            return self.bot.monitor.on_activity(kind, user.id, guild_id, now_ms())
        except Exception as e:
            log.error(f"Error tracking {kind.value} activity in {self.module_name}", exc_info=e)
            return None
