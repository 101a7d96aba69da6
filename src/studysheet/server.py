"""FastMCP server for studysheet.

Exposes the unified tool surface: ``sheet``, ``topic``, ``subtopic`` and
``question``. All tools share the process-wide ``SheetStore``.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from mcp.server.fastmcp import FastMCP

from studysheet.config import ServerConfig, get_config
from studysheet.core.store import create_store, set_store
from studysheet.tools.unified import register_unified_tools

logger = logging.getLogger(__name__)


def create_server(config: Optional[ServerConfig] = None) -> FastMCP:
    """Create and configure the FastMCP server instance."""

    if config is None:
        config = get_config()

    config.setup_logging()
    set_store(create_store(config))

    mcp = FastMCP(name=config.server_name)
    register_unified_tools(mcp, config)

    logger.info(
        "Server created: %s v%s (state=%s, seed=%s)",
        config.server_name,
        config.server_version,
        config.state_path,
        config.seed_path,
    )
    return mcp


def main() -> None:
    """Main entry point for the studysheet MCP server."""

    try:
        config = get_config()
        server = create_server(config)

        logger.info("Starting %s v%s", config.server_name, config.server_version)
        server.run()

    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
        sys.exit(0)
    except Exception as exc:
        logger.error("Server error: %s: %s", type(exc).__name__, exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
