"""
=============================================================================
PROMDOC CLI ENTRY POINT
=============================================================================

    # Run with defaults (127.0.0.1:9095)
    promdoc
    python -m promdoc

    # Custom port / interface
    promdoc --port 9096
    promdoc --host 0.0.0.0

    # Verbose, with access logs
    PROMDOC_LOG_LEVEL=DEBUG promdoc

Exit status:

    0   clean shutdown (Ctrl+C, SIGTERM)
    1   startup failure: port in use, missing UI assets, bad configuration
    2   bad command-line arguments (argparse)

=============================================================================
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from . import __version__
from .assets import AssetStore, AssetError
from .config import ServerConfig, DEFAULT_HOST, DEFAULT_PORT, setup_logging
from .middleware import LoggingMiddleware
from .server import HTTPServer


logger = logging.getLogger("promdoc")


def port_number(value: str) -> int:
    """argparse type for a TCP port, 0 meaning any free port."""
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}")
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port must be 0-65535, got {port}")
    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="promdoc",
        description="Serve the promdoc UI, its client config and /-/ operational endpoints",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  PROMDOC_LOG_LEVEL   DEBUG, INFO, WARNING or ERROR (default: INFO)
  PROMDOC_UI_DIR      directory with index.html and js/index.min.js
  PROMDOC_WORKERS     maximum worker threads (default: 16)
  PROMDOC_TIMEOUT     per-connection timeout in seconds (default: 30)
        """
    )

    parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Address to listen on (default: {DEFAULT_HOST})"
    )

    parser.add_argument(
        "--port", "-p",
        type=port_number,
        default=DEFAULT_PORT,
        help=f"Port to listen on (default: {DEFAULT_PORT})"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"promdoc {__version__}"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None):
    """
    Parse arguments, load the UI and serve until interrupted.

    Exits with status 1 on any startup failure.
    """
    args = build_parser().parse_args(argv)

    try:
        config = ServerConfig.from_env(host=args.host, port=args.port)
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.log_level)

    try:
        assets = AssetStore.load(config.ui_dir)
    except AssetError as e:
        logger.error(str(e))
        sys.exit(1)

    server = HTTPServer(config, assets)
    server.use(LoggingMiddleware())

    try:
        server.run()
    except OSError:
        # Already logged by the socket server
        sys.exit(1)


if __name__ == "__main__":
    main()
