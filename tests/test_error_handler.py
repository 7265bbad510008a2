"""
Bastion - Error Handler Tests
=============================
"""

import json
from pathlib import Path

import discord
import pytest

from bastion.services.antispam import InvalidInputError
from bastion.utils import error_handler as error_handler_module
from bastion.utils.error_handler import ErrorContext, ErrorHandler

from conftest import http_error


class TestCategories:
    @pytest.mark.parametrize("error, category", [
        (InvalidInputError("now=-1"), "detection"),
        (http_error(discord.Forbidden, 403, "Missing Permissions"), "discord"),
        (http_error(discord.NotFound, 404, "Unknown Message"), "discord"),
        (http_error(), "discord"),
        (ConnectionError("reset"), "network"),
        (KeyError("x"), "general"),
    ])
    def test_categorize(self, error, category):
        assert ErrorHandler.categorize_error(error) == category

    def test_most_specific_suggestion_wins(self):
        forbidden = http_error(discord.Forbidden, 403, "Missing Permissions")
        assert "permissions" in ErrorHandler.get_recovery_suggestion(forbidden)

    def test_fallback_suggestion(self):
        assert ErrorHandler.get_recovery_suggestion(KeyError("x")).startswith("Unexpected error")


class TestContext:
    def test_basic_context(self):
        try:
            raise ValueError("boom")
        except ValueError as e:
            context = ErrorContext.get_full_context(e, "Test", extra="1")

        assert context["location"] == "Test"
        assert context["error_type"] == "ValueError"
        assert "boom" in context["traceback"]
        assert context["additional_context"] == {"extra": "1"}

    def test_member_context(self, mock_member):
        mock_member.guild.name = "Test Server"
        context = ErrorContext.get_full_context(ValueError(), "Test", member=mock_member)
        assert context["member_context"]["id"] == 123456789
        assert context["member_context"]["guild"] == "Test Server"


class TestHandle:
    def test_returns_category(self):
        assert ErrorHandler.handle(InvalidInputError("bad"), "Test") == "detection"

    def test_critical_error_saved(self, tmp_path, monkeypatch):
        monkeypatch.setattr(error_handler_module, "LOGS_DIR", tmp_path)

        ErrorHandler.handle(RuntimeError("fatal"), "Startup", critical=True)

        saved = list(Path(tmp_path, "errors").glob("error_*.json"))
        assert len(saved) == 1
        data = json.loads(saved[0].read_text(encoding="utf-8"))
        assert data["location"] == "Startup"
        assert data["error_message"] == "fatal"
