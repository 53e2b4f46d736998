"""FastAPI health-check endpoint, served next to the bot."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI

from tgclaude.core.gate import RequestGate
from tgclaude.utils.logging import get_logger

logger = get_logger(__name__)


def create_health_app(gate: RequestGate) -> FastAPI:
    """App exposing GET /health with the number of users holding a conversation."""
    app = FastAPI(title="tgclaude health", version="0.1.0", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "activeUsers": gate.active_users,
        }

    return app


def start_health_server(gate: RequestGate, port: int, host: str = "0.0.0.0") -> threading.Thread:
    """Run the health app with uvicorn in a daemon thread (the bot owns the main thread)."""
    import uvicorn

    app = create_health_app(gate)
    thread = threading.Thread(
        target=uvicorn.run,
        args=(app,),
        kwargs={"host": host, "port": port, "log_level": "warning"},
        name="health-server",
        daemon=True,
    )
    thread.start()
    logger.info("health_server_started", host=host, port=port)
    return thread
