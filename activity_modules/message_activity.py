import discord
from discord.ext import commands
from .base import BaseActivity
from detection.ledger import ActivityKind

class MessageActivity(BaseActivity):
    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        if message.guild is None:
            return

        self.track(ActivityKind.MESSAGE, message.author, message.guild.id)

        # A command message also counts once towards the command log. Both logs are independent.
        prefix = self.bot.activity_prefix
        if prefix and message.content and message.content.startswith(prefix):
            self.track(ActivityKind.COMMAND, message.author, message.guild.id)

async def setup(bot: commands.Bot):
    await bot.add_cog(MessageActivity(bot))
