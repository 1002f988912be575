import discord
from discord import app_commands
from discord.ext import commands
from detection.ledger import ActivityKind
from utils.embed_builder import EmbedBuilder
from utils.permissions import check_bot_permissions, format_missing_permissions

def _minutes(ms: int) -> str:
    return f"{ms / 60000:g} min"

class CadenceCommands(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    cadence_group = app_commands.Group(name="cadence", description="Inspect self-bot activity tracking")

    @cadence_group.command(name="status", description="Show tracked users and detection settings")
    @app_commands.guild_only()
    @app_commands.checks.has_permissions(moderate_members=True)
    async def status(self, interaction: discord.Interaction):
        ledger = self.bot.monitor.ledger
        fields = []
        for kind in ActivityKind:
            config = ledger.configs[kind]
            fields.append((
                kind.value.title(),
                f"Tracked users: **{ledger.tracked_users(kind)}**\n"
                f"Min events: {config.min_events}\n"
                f"Window: {_minutes(config.time_window_ms)}\n"
                f"Threshold: {_minutes(config.regularity_threshold_ms)}",
                True
            ))

        description = "Activity is tracked across all servers I share with users."
        missing = check_bot_permissions(interaction.guild)
        if missing:
            description += f"\n\n**Missing permissions:**\n{format_missing_permissions(missing)}"

        embed = EmbedBuilder.info(title="Cadence Status", description=description, fields=fields)
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @cadence_group.command(name="inspect", description="Show a member's recorded activity and current verdicts")
    @app_commands.describe(member="The member to inspect")
    @app_commands.guild_only()
    @app_commands.checks.has_permissions(moderate_members=True)
    async def inspect(self, interaction: discord.Interaction, member: discord.Member):
        monitor = self.bot.monitor
        fields = []
        for kind in ActivityKind:
            # Read-only: snapshot may still hold entries the next sweep will drop
            timestamps = monitor.ledger.snapshot(kind, member.id)
            verdict = monitor.detector.evaluate(kind, member.id, timestamps)
            if verdict is None:
                state = f"Not evaluable (needs {monitor.ledger.configs[kind].min_events})"
            elif verdict.is_regular:
                state = f"⚠️ {verdict.reason}"
            else:
                state = "✅ Irregular"
            fields.append((kind.value.title(), f"Events: **{len(timestamps)}**\n{state}", True))

        embed = EmbedBuilder.build(
            title="Activity Inspection",
            description=f"Recorded activity for {member.mention}.",
            author=member,
            footer=f"ID: {member.id}",
            fields=fields
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)

async def setup(bot: commands.Bot):
    await bot.add_cog(CadenceCommands(bot))
