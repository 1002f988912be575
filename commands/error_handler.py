import discord
from discord import app_commands
from discord.ext import commands
from utils.embed_builder import EmbedBuilder
from utils.logger import get_logger

log = get_logger()

class ErrorHandler(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot
        # Register global error handler for app commands
        bot.tree.on_error = self.on_app_command_error

    async def _reply(self, interaction: discord.Interaction, embed: discord.Embed):
        if not interaction.response.is_done():
            await interaction.response.send_message(embed=embed, ephemeral=True)
        else:
            await interaction.followup.send(embed=embed, ephemeral=True)

    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        if isinstance(error, app_commands.MissingPermissions):
            await self._reply(interaction, EmbedBuilder.error(
                "Permission Denied", "You do not have the required permissions to run this command."
            ))
            return

        if isinstance(error, app_commands.NoPrivateMessage):
            await self._reply(interaction, EmbedBuilder.error(
                "Guild Only", "This command cannot be used in Direct Messages."
            ))
            return

        if isinstance(error, app_commands.BotMissingPermissions):
            missing = ", ".join(error.missing_permissions)
            await self._reply(interaction, EmbedBuilder.error(
                "Bot Missing Permissions",
                f"I do not have the required permissions to execute this command.\nMissing: `{missing}`"
            ))
            return

        if isinstance(error, app_commands.CommandOnCooldown):
            await self._reply(interaction, EmbedBuilder.error(
                "Cooldown", f"Please wait {error.retry_after:.1f}s before using this command again."
            ))
            return

        log.error(f"App Command Error in {interaction.command.name if interaction.command else 'Unknown'}", exc_info=error)
        await self._reply(interaction, EmbedBuilder.error("Command Error", "An unexpected error occurred."))

async def setup(bot: commands.Bot):
    await bot.add_cog(ErrorHandler(bot))
