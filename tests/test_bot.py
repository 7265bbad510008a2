"""
Bastion - Bot Wiring Tests
==========================
"""

import pytest

from bastion.bot import BastionBot
from bastion.services.antispam import AbusePolicyEvaluator


class TestBastionBot:
    @pytest.mark.asyncio
    async def test_wires_detector_from_config(self, monkeypatch):
        monkeypatch.setenv("SPAM_THRESHOLD", "7")

        bot = BastionBot()

        assert isinstance(bot.evaluator, AbusePolicyEvaluator)
        assert bot.evaluator.tracker is bot.tracker
        assert bot.evaluator.settings.message_flood.threshold == 7
        assert bot.executor.audit_log is bot.audit_log

    @pytest.mark.asyncio
    async def test_client_id_becomes_application_id(self, monkeypatch):
        monkeypatch.setenv("CLIENT_ID", "123456789012345678")
        assert BastionBot().application_id == 123456789012345678

    @pytest.mark.asyncio
    async def test_application_id_unset_without_client_id(self, monkeypatch):
        monkeypatch.delenv("CLIENT_ID", raising=False)
        assert BastionBot().application_id is None
