import pytest
import discord
from unittest.mock import AsyncMock, MagicMock
from discord.ext import tasks
from detection.ledger import ActivityKind, DAY_MS
from config import shared_config
from services.sweep_service import SweepService
from utils.permissions import check_bot_permissions, format_missing_permissions
from utils.rate_limiter import ExponentialBackoff, send_with_backoff

def http_error(status):
    return discord.HTTPException(MagicMock(status=status, reason="error"), "error")

def test_sweep_evicts_idle_users(mocker, mock_bot):
    mocker.patch.object(tasks.Loop, "start")
    mocker.patch("services.sweep_service.now_ms", return_value=DAY_MS + 10)
    ledger = mock_bot.monitor.ledger
    ledger.record(ActivityKind.MESSAGE, 1, 0)
    ledger.record(ActivityKind.TYPING, 2, 0)
    ledger.record(ActivityKind.TYPING, 3, DAY_MS)

    cog = SweepService(mock_bot)
    evicted = cog.run_sweep()

    assert evicted == 2
    assert ledger.tracked_users(ActivityKind.MESSAGE) == 0
    assert ledger.tracked_users(ActivityKind.TYPING) == 1

def test_sweep_failure_is_logged(mocker, mock_bot):
    mocker.patch.object(tasks.Loop, "start")
    mock_bot.monitor = MagicMock()
    mock_bot.monitor.on_sweep_tick.side_effect = RuntimeError("boom")

    cog = SweepService(mock_bot)

    assert cog.run_sweep() == 0

def test_backoff_doubles_and_caps():
    backoff = ExponentialBackoff(base_delay=1.0, max_delay=4.0, max_attempts=4)
    assert [backoff.get_delay() for _ in range(4)] == [1.0, 2.0, 4.0, 4.0]
    assert backoff.attempts_exhausted

@pytest.mark.asyncio
async def test_send_retries_server_errors(mocker):
    sleep = mocker.patch("utils.rate_limiter.asyncio.sleep", new_callable=AsyncMock)
    send = AsyncMock(side_effect=[http_error(503), http_error(502), None])

    ok, err = await send_with_backoff(lambda: send())

    assert ok and err is None
    assert send.await_count == 3
    assert sleep.await_count == 2

@pytest.mark.asyncio
async def test_send_aborts_on_forbidden(mocker):
    mocker.patch("utils.rate_limiter.asyncio.sleep", new_callable=AsyncMock)
    send = AsyncMock(side_effect=http_error(403))

    ok, err = await send_with_backoff(lambda: send())

    assert not ok
    assert err.status == 403
    send.assert_awaited_once()

@pytest.mark.asyncio
async def test_send_gives_up_after_max_attempts(mocker):
    mocker.patch("utils.rate_limiter.asyncio.sleep", new_callable=AsyncMock)
    send = AsyncMock(side_effect=http_error(500))

    ok, err = await send_with_backoff(lambda: send(), max_attempts=3)

    assert not ok
    assert send.await_count == 3

def test_missing_permissions_are_reported(mock_guild):
    mock_guild.me.guild_permissions = discord.Permissions(
        view_channel=True, read_message_history=True, send_messages=True, embed_links=True
    )

    missing = check_bot_permissions(mock_guild)

    assert missing == {"Responder": ["manage_roles"]}
    assert "Manage Roles" in format_missing_permissions(missing)

def test_sweep_interval_comes_from_config(mocker, mock_bot):
    mocker.patch.object(tasks.Loop, "start")
    mocker.patch.object(shared_config, "SWEEP_INTERVAL_MINUTES", 15)

    cog = SweepService(mock_bot)

    assert cog.sweep_task.minutes == 15

@pytest.mark.asyncio
async def test_send_retries_rate_limit_status(mocker):
    mocker.patch("utils.rate_limiter.asyncio.sleep", new_callable=AsyncMock)
    send = AsyncMock(side_effect=[http_error(429), None])

    ok, err = await send_with_backoff(lambda: send())

    assert ok
    assert send.await_count == 2
