"""
Bastion - Test Fixtures
=======================

Shared fixtures for all tests.

Discord objects are MagicMocks with `__class__` set where the code under
test does an isinstance() check. HTTP errors are real discord.py
exceptions built from a fake response.
"""

import os
import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set up test environment before importing modules
os.environ.setdefault("BASTION_LOGS_DIR", tempfile.mkdtemp(prefix="bastion-logs-"))
os.environ.setdefault("DISCORD_TOKEN", "test-token")

import discord  # noqa: E402

from bastion.core import config as config_module  # noqa: E402
from bastion.core.config import Config  # noqa: E402


# =============================================================================
# Helpers
# =============================================================================

def http_error(cls=discord.HTTPException, status: int = 500, text: str = "error"):
    """Build a real discord HTTPException (or subclass) for side_effect."""
    response = MagicMock()
    response.status = status
    response.reason = text
    return cls(response, text)


def make_member(
    member_id: int = 123456789,
    name: str = "testuser",
    guild=None,
    top_position: int = 1,
    administrator: bool = False,
    moderate_members: bool = False,
    bot: bool = False,
):
    """A MagicMock that passes isinstance(x, discord.Member)."""
    member = MagicMock()
    member.__class__ = discord.Member
    member.id = member_id
    member.name = name
    member.bot = bot
    member.__str__.return_value = name
    member.mention = f"<@{member_id}>"
    member.display_avatar.url = "https://example.com/avatar.png"
    member.created_at = datetime(2020, 9, 13, 12, 0, tzinfo=timezone.utc)
    member.joined_at = datetime(2022, 4, 15, 10, 0, tzinfo=timezone.utc)
    member.top_role.position = top_position
    member.guild_permissions.administrator = administrator
    member.guild_permissions.moderate_members = moderate_members
    member.roles = []
    member.guild = guild
    member.kick = AsyncMock()
    member.timeout = AsyncMock()
    member.send = AsyncMock()
    return member


# =============================================================================
# Config
# =============================================================================

@pytest.fixture
def config():
    """Config with the stock thresholds."""
    return Config(discord_token="test-token")


@pytest.fixture(autouse=True)
def reset_config_singleton():
    """Never leak a cached Config between tests."""
    config_module._config = None
    yield
    config_module._config = None


# =============================================================================
# Mock Discord Objects
# =============================================================================

@pytest.fixture
def log_channel():
    channel = MagicMock()
    channel.name = "mod-logs"
    channel.send = AsyncMock()
    return channel


@pytest.fixture
def mock_guild(log_channel):
    """Guild whose bot member outranks ordinary members and holds every permission."""
    guild = MagicMock()
    guild.id = 987654321
    guild.name = "Test Server"
    guild.owner_id = 1
    guild.me = MagicMock()
    guild.me.id = 999888777
    guild.me.top_role.position = 10
    guild.me.guild_permissions.kick_members = True
    guild.me.guild_permissions.ban_members = True
    guild.me.guild_permissions.moderate_members = True
    guild.text_channels = [log_channel]
    guild.get_member = MagicMock(return_value=None)
    guild.fetch_member = AsyncMock(side_effect=http_error(discord.NotFound, 404, "Unknown Member"))
    guild.ban = AsyncMock()
    return guild


@pytest.fixture
def mock_member(mock_guild):
    return make_member(guild=mock_guild)


@pytest.fixture
def mock_moderator(mock_guild):
    return make_member(
        member_id=111222333,
        name="moduser",
        guild=mock_guild,
        top_position=5,
        moderate_members=True,
    )


@pytest.fixture
def mock_channel(mock_guild):
    channel = MagicMock()
    channel.id = 555666777
    channel.name = "general"
    channel.guild = mock_guild
    channel.send = AsyncMock()
    channel.purge = AsyncMock(return_value=[])
    return channel


@pytest.fixture
def mock_message(mock_member, mock_guild, mock_channel):
    message = MagicMock()
    message.id = 111222333
    message.content = "hello"
    message.author = mock_member
    message.guild = mock_guild
    message.channel = mock_channel
    message.mentions = []
    message.delete = AsyncMock()
    return message


@pytest.fixture
def mock_interaction(mock_moderator, mock_guild, mock_channel):
    interaction = MagicMock()
    interaction.user = mock_moderator
    interaction.guild = mock_guild
    interaction.channel = mock_channel
    interaction.response.send_message = AsyncMock()
    interaction.response.defer = AsyncMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.followup.send = AsyncMock()
    return interaction


@pytest.fixture
def audit_log():
    """AuditLogService stand-in recording log_event calls."""
    service = MagicMock()
    service.log_event = AsyncMock(return_value=True)
    return service


@pytest.fixture
def mock_bot(config, audit_log):
    bot = MagicMock()
    bot.config = config
    bot.audit_log = audit_log
    bot.latency = 0.042
    bot.guilds = []
    bot.start_time = datetime.now(timezone.utc)
    return bot
