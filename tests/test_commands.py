import pytest
import discord
from discord import app_commands
from unittest.mock import AsyncMock, MagicMock
from commands.cadence import CadenceCommands
from commands.error_handler import ErrorHandler
from detection.ledger import ActivityKind

FIVE_MIN = 300_000

@pytest.fixture
def interaction(mock_guild):
    interaction = MagicMock()
    interaction.guild = mock_guild
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction

@pytest.mark.asyncio
async def test_status_lists_every_kind(mock_bot, interaction):
    mock_bot.monitor.ledger.record(ActivityKind.REACTION, 1, 0)
    cog = CadenceCommands(mock_bot)

    await CadenceCommands.status.callback(cog, interaction)

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    names = [field.name for field in embed.fields]
    assert names == ["Message", "Reaction", "Typing", "Command"]
    assert "Tracked users: **1**" in embed.fields[1].value

@pytest.mark.asyncio
async def test_inspect_reports_verdicts(mock_bot, interaction, mock_user):
    for i in range(10):
        mock_bot.monitor.ledger.record(ActivityKind.MESSAGE, mock_user.id, i * FIVE_MIN)
    mock_bot.monitor.ledger.record(ActivityKind.COMMAND, mock_user.id, 0)
    cog = CadenceCommands(mock_bot)

    await CadenceCommands.inspect.callback(cog, interaction, mock_user)

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    fields = {field.name: field.value for field in embed.fields}
    assert "Consistent message intervals." in fields["Message"]
    assert "Not evaluable" in fields["Command"]
    # Inspection is read-only: nothing gets escalated
    assert interaction.response.send_message.call_args.kwargs["ephemeral"] is True

@pytest.mark.asyncio
async def test_missing_permissions_error(mock_bot, interaction):
    cog = ErrorHandler(mock_bot)

    await cog.on_app_command_error(interaction, app_commands.MissingPermissions(["moderate_members"]))

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    assert embed.title == "Permission Denied"

@pytest.mark.asyncio
async def test_unexpected_error_uses_followup_when_responded(mock_bot, interaction):
    cog = ErrorHandler(mock_bot)
    interaction.response.is_done.return_value = True

    await cog.on_app_command_error(interaction, app_commands.AppCommandError("boom"))

    interaction.followup.send.assert_awaited_once()
    interaction.response.send_message.assert_not_awaited()

def test_error_handler_registers_on_tree(mock_bot):
    cog = ErrorHandler(mock_bot)
    assert mock_bot.tree.on_error == cog.on_app_command_error
