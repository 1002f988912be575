import os
import pytest
import discord
from unittest.mock import MagicMock

# config.py reads the environment at import time
os.environ.setdefault("DISCORD_TOKEN", "test-token")
os.environ.setdefault("MODERATOR_ROLE_ID", "900")
os.environ.setdefault("SUSPICIOUS_ROLE_ID", "901")
os.environ.setdefault("LOG_CHANNEL_ID", "902")

from detection.ledger import ActivityKind, ActivityLedger, DetectionConfig, DEFAULT_DETECTION_CONFIGS
from detection.monitor import ActivityMonitor
from detection.regularity import RegularityDetector

FIVE_MIN = 300_000

@pytest.fixture
def configs():
    return dict(DEFAULT_DETECTION_CONFIGS)

@pytest.fixture
def ledger(configs):
    return ActivityLedger(configs)

@pytest.fixture
def detector(configs):
    return RegularityDetector(configs)

@pytest.fixture
def verdict_sink():
    return MagicMock()

@pytest.fixture
def monitor(ledger, detector, verdict_sink):
    return ActivityMonitor(ledger, detector, on_verdict=verdict_sink)

@pytest.fixture
def mock_bot(monitor):
    bot = MagicMock()
    bot.monitor = monitor
    bot.activity_prefix = "!"
    return bot

@pytest.fixture
def mock_guild():
    guild = MagicMock(spec=discord.Guild)
    guild.id = 1
    guild.name = "Test Guild"
    return guild

@pytest.fixture
def mock_user():
    user = MagicMock(spec=discord.Member)
    user.id = 111111
    user.name = "TestUser"
    user.bot = False # Critical: Mocks are truthy by default!
    user.roles = []
    user.mention = "<@111111>"
    return user

@pytest.fixture
def mock_channel(mock_guild):
    channel = MagicMock(spec=discord.TextChannel)
    channel.id = 222222
    channel.name = "general"
    channel.guild = mock_guild
    return channel
