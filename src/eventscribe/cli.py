"""Command-line entrypoints for eventscribe.

- `eventscribe`: run the description FastMCP server
- `eventscribe-db`: run the companion query server over EVENTSCRIBE_DATABASE_URL
"""

from __future__ import annotations

import argparse
import traceback

import dotenv
from fastmcp.utilities.logging import get_logger

from eventscribe.errors import ConfigurationError

_logger = get_logger(__name__)


def main() -> None:
    """Start the eventscribe FastMCP server via CLI."""
    from eventscribe.server import mcp

    try:
        mcp.run()
    except KeyboardInterrupt:
        _logger.info("Interrupted by user. Exiting cleanly.")
    except Exception:  # noqa: BLE001
        traceback.print_exc(limit=1)


def build_query_server_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eventscribe-db",
        description="Serve the event database as a read-only MCP Query Executor.",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Create the event tables and load sample data before serving.",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="http",
        help="MCP transport to serve (default: http).",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8001)
    return parser


def query_server_main(argv: list[str] | None = None) -> int:
    """Start the companion query server."""
    from eventscribe.db import seed_sample_data
    from eventscribe.query_server import ExecutionLimits, create_query_server
    from eventscribe.services.config_service import ConfigService

    dotenv.load_dotenv()
    args = build_query_server_parser().parse_args(argv)

    try:
        engine = ConfigService.create_database_engine(ConfigService.get_database_url())
    except ConfigurationError as exc:
        _logger.error("Configuration error: %s", exc)
        return 2

    if args.seed:
        seed_sample_data(engine)

    server = create_query_server(
        engine,
        limits=ExecutionLimits(
            row_limit=ConfigService.result_row_limit(),
            max_cell_chars=ConfigService.result_max_cell_chars(),
        ),
        allowed_tables=ConfigService.allowed_tables(),
        schema_resource_uri=ConfigService.schema_resource_uri(),
        query_tool=ConfigService.query_tool_name(),
    )
    try:
        if args.transport == "stdio":
            server.run()
        else:
            server.run(transport="http", host=args.host, port=args.port)
    except KeyboardInterrupt:
        _logger.info("Interrupted by user. Exiting cleanly.")
    finally:
        engine.dispose()
    return 0


if __name__ == "__main__":
    # Delegate to main() so behavior is consistent across execution paths.
    main()
