import discord
from discord.ext import commands
from .base import BaseActivity
from detection.ledger import ActivityKind

class ReactionActivity(BaseActivity):
    @commands.Cog.listener()
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent):
        # Raw event so reactions on messages outside the cache still count.
        # payload.member is only populated for guild reactions.
        if payload.guild_id is None or payload.member is None:
            return

        self.track(ActivityKind.REACTION, payload.member, payload.guild_id)

async def setup(bot: commands.Bot):
    await bot.add_cog(ReactionActivity(bot))
