"""
Bastion - Moderation Executor
=============================

Carries out ActionDirectives against Discord.

DESIGN:
    The evaluator decides, the executor acts. Every platform call is
    best-effort: a Forbidden, NotFound or other HTTPException is logged
    and the remaining steps still run, and nothing is raised back into
    the event listener. The audit entry is written after acting, whether
    or not every step succeeded, with the detector's own numbers.
"""

from dataclasses import dataclass, field
from typing import List

import discord

from bastion.core.constants import MS_PER_SECOND
from bastion.core.logger import logger
from bastion.core.moderation_validation import bot_can_timeout
from bastion.services.antispam import ActionDirective, PolicyKind, RecommendedAction
from bastion.services.audit_log import AuditLogService
from bastion.utils.discord_rate_limit import log_http_error
from bastion.utils.duration import format_window


# =============================================================================
# Report
# =============================================================================

@dataclass
class ExecutionReport:
    """What actually happened when a directive was applied."""
    policy: PolicyKind
    deleted: int = 0
    timed_out: bool = False
    kicked: List[int] = field(default_factory=list)
    failures: int = 0
    audited: bool = False


# =============================================================================
# Executor
# =============================================================================

class ModerationExecutor:
    """Applies message and join directives, then writes the audit entry."""

    def __init__(self, audit_log: AuditLogService) -> None:
        self.audit_log = audit_log

    # =========================================================================
    # Message Directives
    # =========================================================================

    async def apply_message_directive(
        self,
        directive: ActionDirective,
        message: discord.Message,
    ) -> ExecutionReport:
        """Apply a message-flood or mention-flood directive to its triggering message."""
        report = ExecutionReport(policy=directive.policy)
        author = message.author

        if directive.recommends(RecommendedAction.DELETE_MESSAGES):
            await self._purge_author_messages(message, directive.purge_lookback or 0, report)

        if directive.recommends(RecommendedAction.DELETE_MESSAGE):
            await self._delete(message, report, "Mention Spam Delete")

        if directive.recommends(RecommendedAction.TIMEOUT) and directive.timeout:
            await self._timeout(author, message.guild, directive, report)

        if directive.policy is PolicyKind.MESSAGE_FLOOD:
            title = "Anti-Spam Triggered"
            description = (
                f"{author} was timed out for spam "
                f"({directive.observed} messages in {format_window(directive.window_ms or 0)})"
            )
        else:
            title = "Mention Spam"
            description = f"{author} sent a message with {directive.observed} mentions"

        report.audited = await self.audit_log.log_event(
            message.guild, title, description, directive.severity
        )

        logger.tree(title.upper(), [
            ("User", f"{author} ({author.id})"),
            ("Guild", message.guild.name),
            ("Observed", str(directive.observed)),
            ("Deleted", str(report.deleted)),
            ("Timed Out", "Yes" if report.timed_out else "No"),
            ("Failures", str(report.failures)),
        ], emoji="🛡️")

        return report

    async def _purge_author_messages(
        self,
        message: discord.Message,
        lookback: int,
        report: ExecutionReport,
    ) -> None:
        """Delete the author's messages among the last `lookback` in the channel."""
        author_id = message.author.id
        try:
            async for recent in message.channel.history(limit=lookback):
                if recent.author.id == author_id:
                    await self._delete(recent, report, "Anti-Spam Delete")
        except discord.HTTPException as e:
            report.failures += 1
            log_http_error(e, "Anti-Spam History", [
                ("Channel", f"#{getattr(message.channel, 'name', message.channel.id)}"),
            ])

    async def _delete(self, message: discord.Message, report: ExecutionReport, operation: str) -> None:
        try:
            await message.delete()
            report.deleted += 1
        except discord.NotFound:
            pass  # Already gone
        except discord.HTTPException as e:
            report.failures += 1
            log_http_error(e, operation, [("Message ID", str(message.id))])

    async def _timeout(
        self,
        author,
        guild: discord.Guild,
        directive: ActionDirective,
        report: ExecutionReport,
    ) -> None:
        if not isinstance(author, discord.Member) or not bot_can_timeout(guild):
            logger.debug(f"Timeout skipped for {author}: not a member or missing Moderate Members")
            return

        try:
            await author.timeout(directive.timeout, reason=directive.reason)
            report.timed_out = True
        except discord.HTTPException as e:
            report.failures += 1
            log_http_error(e, "Anti-Spam Timeout", [("User", f"{author} ({author.id})")])

    # =========================================================================
    # Join Directives
    # =========================================================================

    async def apply_join_directive(
        self,
        directive: ActionDirective,
        guild: discord.Guild,
    ) -> ExecutionReport:
        """Kick every member named by a join-flood directive."""
        report = ExecutionReport(policy=directive.policy)

        if directive.recommends(RecommendedAction.KICK):
            for member_id in directive.targets:
                member = guild.get_member(member_id)
                if member is None:
                    try:
                        member = await guild.fetch_member(member_id)
                    except discord.NotFound:
                        continue
                    except discord.HTTPException as e:
                        report.failures += 1
                        log_http_error(e, "Raid Member Fetch", [("User ID", str(member_id))])
                        continue

                try:
                    await member.kick(reason=directive.reason)
                    report.kicked.append(member.id)
                except discord.HTTPException as e:
                    report.failures += 1
                    log_http_error(e, "Raid Kick", [("User", f"{member} ({member.id})")])

        seconds = (directive.window_ms or 0) / MS_PER_SECOND
        report.audited = await self.audit_log.log_event(
            guild,
            "Raid Protection Triggered",
            f"Kicked {directive.observed} users who joined within {seconds:g} seconds",
            directive.severity,
        )

        logger.tree("RAID PROTECTION TRIGGERED", [
            ("Guild", f"{guild.name} ({guild.id})"),
            ("Joins", str(directive.observed)),
            ("Kicked", str(len(report.kicked))),
            ("Failures", str(report.failures)),
        ], emoji="🚨")

        return report


__all__ = ["ExecutionReport", "ModerationExecutor"]
