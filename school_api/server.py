# school_api/server.py
"""
Process entry point.

Runs the API under uvicorn and treats any exception that escapes a
background task or callback on the event loop as fatal: the fault is logged,
uvicorn is asked to stop accepting connections and shut down, and the
process exits with status 1.
"""

import asyncio
import logging
import sys
from typing import Any, Dict

import uvicorn

from school_api.core.config import settings

logger = logging.getLogger(__name__)


class FailFastServer(uvicorn.Server):
    """uvicorn server that shuts down on the first unhandled asynchronous fault."""

    def __init__(self, config: uvicorn.Config):
        super().__init__(config)
        self.faulted = False

    def handle_loop_exception(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        exc = context.get("exception")
        message = context.get("message", "Unhandled error in event loop")
        logger.error(f"Unhandled asynchronous error: {exc or message}", exc_info=exc)
        self.faulted = True
        self.should_exit = True

    async def serve(self, sockets=None) -> None:
        asyncio.get_running_loop().set_exception_handler(self.handle_loop_exception)
        await super().serve(sockets=sockets)


def run() -> None:
    config = uvicorn.Config(
        "school_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level="debug" if settings.DEBUG else "info",
    )
    server = FailFastServer(config)
    logger.info(f"Server running in {settings.ENVIRONMENT} mode on port {settings.PORT}")
    server.run()
    if not server.started:
        logger.critical("Server failed to start.")
        sys.exit(1)
    if server.faulted:
        logger.critical("Server stopped after an unhandled asynchronous error.")
        sys.exit(1)


if __name__ == "__main__":
    run()
