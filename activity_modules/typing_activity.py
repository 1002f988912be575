import discord
import datetime
from discord.ext import commands
from .base import BaseActivity
from detection.ledger import ActivityKind

class TypingActivity(BaseActivity):
    @commands.Cog.listener()
    async def on_typing(self, channel: discord.abc.Messageable, user: discord.abc.User, when: datetime.datetime):
        guild = getattr(channel, "guild", None)
        if guild is None:
            return

        # `when` is ignored: every kind is stamped with the same arrival clock.
        self.track(ActivityKind.TYPING, user, guild.id)

async def setup(bot: commands.Bot):
    await bot.add_cog(TypingActivity(bot))
