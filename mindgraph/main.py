"""Main entry point for the MindGraph MCP server."""

from __future__ import annotations

import argparse
import logging
import sys

from .config import get_config
from .server import mcp


def setup_logging() -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="MindGraph MCP Server - Concept graphs and mind views for agent memories"
    )
    parser.add_argument(
        "--mode",
        choices=["server", "dashboard"],
        default="server",
        help="Run mode: 'server' runs the MCP server, "
        "'dashboard' starts the web dashboard (default: server)",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default=None,
        help="Transport mode for server mode (default: from env or stdio)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind to (default: from env or 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind to (default: from env or 8765)",
    )
    parser.add_argument(
        "--dashboard-port",
        type=int,
        default=8766,
        help="Port for dashboard web UI (default: 8766)",
    )
    return parser.parse_args(argv)


def run_server_mode(transport: str, host: str, port: int, logger: logging.Logger) -> None:
    """Run the MCP server."""
    logger.info(f"Transport: {transport}")

    if transport == "stdio":
        mcp.run()
    elif transport in ("sse", "streamable-http"):
        mcp.settings.host = host
        mcp.settings.port = port
        logger.info(f"MCP server listening on http://{host}:{port}")
        mcp.run(transport=transport)
    else:
        logger.error(f"Unknown transport: {transport}")
        sys.exit(1)


def run_dashboard_mode(host: str, port: int, logger: logging.Logger) -> None:
    """Run the web dashboard."""
    import uvicorn

    from .dashboard import create_dashboard_app

    logger.info(f"Starting MindGraph Dashboard on http://{host}:{port}")
    logger.info("Open your browser to view the dashboard")

    app = create_dashboard_app()
    uvicorn.run(app, host=host, port=port, log_level="info")


def main() -> None:
    """Run the MindGraph MCP server."""
    setup_logging()
    logger = logging.getLogger(__name__)

    args = parse_args()
    config = get_config()

    # CLI args override config/env
    host = args.host or config.server_host
    port = args.port or config.server_port

    logger.info("Starting MindGraph MCP")
    logger.info(f"Data directory: {config.data_dir}")
    logger.info(f"Store backend: {config.store_backend}")
    logger.info(f"Mode: {args.mode}")

    if args.mode == "dashboard":
        run_dashboard_mode(host, args.dashboard_port, logger)
    else:
        transport = args.transport or config.server_transport
        run_server_mode(transport, host, port, logger)


if __name__ == "__main__":
    main()
