"""
Guitar tuner MCP server.

Exposes the tuner as four tools over the Model Context Protocol. The
blocking session calls run in worker threads so a 30 second wait for a
note never stalls the server's event loop.

Running:
    guitar-tuner serve
    python -m guitar_tuner.server

    # SSE instead of stdio
    GUITAR_TUNER_TRANSPORT=sse python -m guitar_tuner.server
"""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any, Literal, Optional

from mcp.server.fastmcp import FastMCP

from . import __version__
from .logger import get_logger
from .logging_config import setup_logging
from .services.tuner_service import TunerService
from .tunings import DEFAULT_TUNING_ID

logger = get_logger(__name__)

SERVER_NAME = "guitar-tuner"
TRANSPORT_ENV = "GUITAR_TUNER_TRANSPORT"

TransportMode = Literal["stdio", "sse"]


def _json(data: Any) -> str:
    return json.dumps(data, indent=2)


def build_server(service: Optional[TunerService] = None) -> FastMCP:
    """Create the FastMCP instance with the tuner tools registered.

    Args:
        service: Tuner service backing the tools, a default one when None

    Returns:
        FastMCP server ready to run
    """
    service = service if service is not None else TunerService()

    mcp = FastMCP(
        SERVER_NAME,
        instructions=(
            "Guitar tuner listening on the microphone. Call start_tuning, then call "
            "get_pitch repeatedly while the user plays one string at a time and follow "
            "its advice. Call stop_tuning when done."
        ),
    )

    @mcp.tool()
    async def list_tunings() -> str:
        """List the available guitar tunings with their target notes and frequencies."""
        return _json(service.list_tunings())

    @mcp.tool()
    async def start_tuning(tuning_id: str = DEFAULT_TUNING_ID) -> str:
        """
        Start listening to the microphone for guitar tuning.

        Args:
            tuning_id: Tuning to tune to (standard, drop-d, half-step-down,
                open-g, open-d, dadgad)
        """
        return _json(await asyncio.to_thread(service.start_tuning, tuning_id))

    @mcp.tool()
    async def get_pitch() -> str:
        """
        Wait for a guitar note to be played and return tuning guidance.

        Blocks until a stable pitch is detected (up to 30 seconds). Must call
        start_tuning first.
        """
        return _json(await asyncio.to_thread(service.get_pitch))

    @mcp.tool()
    async def stop_tuning() -> str:
        """Stop the tuning session and release the microphone."""
        return _json(await asyncio.to_thread(service.stop_tuning))

    logger.info(f"Guitar tuner MCP server v{__version__} initialized")
    return mcp


def get_transport_mode() -> TransportMode:
    """Transport from GUITAR_TUNER_TRANSPORT, stdio unless it says "sse"."""
    mode = os.getenv(TRANSPORT_ENV, "stdio").lower().strip()
    if mode not in ("stdio", "sse"):
        logger.warning(f"Unknown {TRANSPORT_ENV}={mode!r}, falling back to stdio")
        return "stdio"
    return mode  # type: ignore[return-value]


def main(log_level: Optional[str] = None) -> None:
    """Run the MCP server until the client disconnects."""
    setup_logging(log_level)

    service = TunerService()
    server = build_server(service)
    transport = get_transport_mode()
    logger.info(f"Starting guitar tuner MCP server (transport={transport})")
    try:
        server.run(transport=transport)
    finally:
        service.shutdown()


if __name__ == "__main__":
    main()
