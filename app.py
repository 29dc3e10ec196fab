import logging
import sys
import time
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import Settings, load_settings
from core.errors import SlackError, StartupError
from core.io_utils import utc_now_iso
from core.logs import setup_logging
from core.slack_api import SlackClientProvider
from tools import ToolRegistry, build_registry

logger = logging.getLogger("slack_mcp.health")


def health_status(settings: Settings, registry: ToolRegistry, started_at: float) -> Dict[str, Any]:
    return {
        "status": "healthy",
        "service": settings.server_name,
        "version": settings.server_version,
        "tools": len(registry),
        "uptime_seconds": int(time.monotonic() - started_at),
        "environment": settings.environment,
        "timestamp": utc_now_iso(),
    }


# -----------------------------
# FastAPI (health + CORS)
# -----------------------------
def create_app(settings: Optional[Settings] = None, registry: Optional[ToolRegistry] = None) -> FastAPI:
    settings = settings or load_settings()
    registry = registry if registry is not None else build_registry(settings)
    started_at = time.monotonic()

    api = FastAPI(title=settings.server_name, version=settings.server_version)
    api.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @api.get("/")
    def root():
        return {
            **health_status(settings, registry, started_at),
            "message": "Slack MCP gateway alive",
            "transport": "stdio",
            **registry.stats(),
            "config": settings.to_public_dict(),
        }

    @api.get("/health")
    def health():
        return health_status(settings, registry, started_at)

    return api


# -----------------------------
# Container healthcheck (exit 0/1)
# -----------------------------
def healthcheck(provider: Optional[SlackClientProvider] = None) -> int:
    try:
        if provider is None:
            settings = load_settings()
            setup_logging(settings.log_level, settings.log_file)
            provider = SlackClientProvider(settings)
        connected = provider.bot().test_connection()
    except (StartupError, SlackError) as e:
        logger.error("Health check failed: %s", e)
        return 1

    if not connected:
        logger.error("Health check failed: Slack connection test failed")
        return 1
    logger.info("Health check passed: All systems operational")
    return 0


if __name__ == "__main__":
    sys.exit(healthcheck())
