"""
Bastion - Health Check Server
=============================

HTTP health check endpoint for external monitoring.

DESIGN:
    A small aiohttp server running inside the bot's event loop. GET /health
    reports connection state, guild count, latency, uptime and how many identities
    the rate window tracker currently holds, so a slow leak in the
    detector shows up on a dashboard before it shows up in memory.

    Only started when HEALTH_CHECK_PORT is set.
"""

import math
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from aiohttp import web

from bastion.core.config import NY_TZ
from bastion.core.logger import logger
from bastion.services.antispam import TrackingDomain
from bastion.utils.duration import format_uptime

if TYPE_CHECKING:
    from bastion.bot import BastionBot


# =============================================================================
# Health Check Server
# =============================================================================

class HealthCheckServer:
    """
    Simple HTTP health check server for monitoring.

    Attributes:
        bot: Reference to the main bot instance.
        port: Port number for the HTTP server.
        app: aiohttp Application instance.
        runner: aiohttp AppRunner for lifecycle management.
    """

    def __init__(self, bot: "BastionBot", port: int = 8080) -> None:
        self.bot = bot
        self.port = port
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None

        self.app.router.add_get("/health", self.health_handler)
        self.app.router.add_get("/", self.health_handler)

    # =========================================================================
    # Request Handlers
    # =========================================================================

    def build_status(self) -> dict:
        """Snapshot of the bot's state, without anything sensitive."""
        is_connected = self.bot.is_ready()
        tracker = self.bot.tracker
        latency = self.bot.latency

        return {
            "status": "healthy" if is_connected else "starting",
            "bot": "Bastion",
            "connected": is_connected,
            "guilds": len(self.bot.guilds),
            # Infinite until the first heartbeat
            "latency_ms": round(latency * 1000) if math.isfinite(latency) else None,
            "uptime": format_uptime(datetime.now(NY_TZ) - self.bot.start_time),
            "tracked_identities": {
                domain.value: tracker.tracked_identities(domain)
                for domain in TrackingDomain
            },
            "timestamp": datetime.now(NY_TZ).isoformat(),
        }

    async def health_handler(self, request: web.Request) -> web.Response:
        """Handle GET /health (and GET /)."""
        try:
            status = self.build_status()
            logger.debug(f"Health check: {status['status']}")
            return web.json_response(status)

        except Exception as e:
            logger.error("Health Check Error", [
                ("Error", str(e)[:100]),
            ])
            return web.json_response(
                {"status": "error", "error": str(e)},
                status=500,
            )

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def start(self) -> None:
        """Start serving on 0.0.0.0; a bind failure is logged, not raised."""
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()
            site = web.TCPSite(self.runner, "0.0.0.0", self.port)
            await site.start()

            logger.tree("Health Server Started", [
                ("Port", str(self.port)),
                ("Endpoint", f"http://0.0.0.0:{self.port}/health"),
            ], emoji="🏥")

        except OSError as e:
            logger.error("Health Server Startup Failed", [
                ("Port", str(self.port)),
                ("Error", str(e)[:100]),
            ])

    async def stop(self) -> None:
        """Stop the server; safe to call when it never started."""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            logger.info("Health check server stopped")


__all__ = ["HealthCheckServer"]
