"""
Bastion - Member Resolution Tests
=================================
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from bastion.utils.members import parse_user_id, resolve_member

from conftest import http_error, make_member

SNOWFLAKE = 123456789012345678


class TestParseUserId:
    @pytest.mark.parametrize("raw", [
        f"<@{SNOWFLAKE}>",
        f"<@!{SNOWFLAKE}>",
        str(SNOWFLAKE),
        f"  {SNOWFLAKE} ",
    ])
    def test_valid(self, raw):
        assert parse_user_id(raw) == SNOWFLAKE

    @pytest.mark.parametrize("raw", [None, "", "someone", "12345", f"<#{SNOWFLAKE}>", f"<@&{SNOWFLAKE}>"])
    def test_invalid(self, raw):
        assert parse_user_id(raw) is None


class TestResolveMember:
    @pytest.mark.asyncio
    async def test_mention_wins(self, mock_message, mock_guild):
        mentioned = make_member(member_id=42, guild=mock_guild)
        mock_message.mentions = [mentioned]
        assert await resolve_member(mock_message, str(SNOWFLAKE)) is mentioned

    @pytest.mark.asyncio
    async def test_cached_member(self, mock_message, mock_guild):
        cached = make_member(member_id=SNOWFLAKE, guild=mock_guild)
        mock_guild.get_member = MagicMock(return_value=cached)

        assert await resolve_member(mock_message, str(SNOWFLAKE)) is cached
        mock_guild.fetch_member.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetched_member(self, mock_message, mock_guild):
        fetched = make_member(member_id=SNOWFLAKE, guild=mock_guild)
        mock_guild.fetch_member = AsyncMock(return_value=fetched)

        assert await resolve_member(mock_message, f"<@{SNOWFLAKE}>") is fetched
        mock_guild.fetch_member.assert_awaited_once_with(SNOWFLAKE)

    @pytest.mark.asyncio
    async def test_unknown_member(self, mock_message):
        assert await resolve_member(mock_message, str(SNOWFLAKE)) is None

    @pytest.mark.asyncio
    async def test_fetch_failure(self, mock_message, mock_guild):
        mock_guild.fetch_member = AsyncMock(side_effect=http_error(status=503, text="Unavailable"))
        assert await resolve_member(mock_message, str(SNOWFLAKE)) is None

    @pytest.mark.asyncio
    async def test_direct_message(self, mock_message):
        mock_message.guild = None
        assert await resolve_member(mock_message, str(SNOWFLAKE)) is None
