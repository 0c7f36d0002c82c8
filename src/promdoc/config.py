"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables of a promdoc process in one dataclass.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── promdoc --port 9096                                        │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── PROMDOC_LOG_LEVEL=DEBUG promdoc                            │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Values are checked once, at server construction (validate()), so a bad
setting fails the process at startup instead of on the first request.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9095

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for a promdoc server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK      host, port, backlog, buffer_size, timeout
    HTTP         max_request_size, server_name
    CONCURRENCY  min_workers, max_workers, queue_size
    LIFECYCLE    shutdown_timeout, accept_poll_interval
    ASSETS       ui_dir
    LOGGING      log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = DEFAULT_HOST
    """Interface to bind. Loopback by default: promdoc is a local tool."""

    port: int = DEFAULT_PORT
    """TCP port. 0 asks the OS for a free one (see SocketServer.address)."""

    backlog: int = 128
    """Connections the kernel queues before accept() picks them up."""

    buffer_size: int = 8192
    """recv() chunk size in bytes."""

    timeout: Optional[float] = 30.0
    """
    Per-connection read/write timeout in seconds. A client that stalls
    longer gets 408. None disables it.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 1024 * 1024  # 1 MB
    """Largest accepted request (headers + body); beyond it, 413."""

    server_name: str = "promdoc"
    """Value of the Server response header."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16

    queue_size: int = 128
    """Accepted connections that may wait for a worker; beyond it, 503."""

    # ─────────────────────────────────────────────────────────────────────
    # LIFECYCLE
    # ─────────────────────────────────────────────────────────────────────

    shutdown_timeout: float = 30.0
    """How long shutdown waits for in-flight exchanges to finish."""

    accept_poll_interval: float = 0.5
    """Longest time accept() blocks before re-checking for shutdown."""

    # ─────────────────────────────────────────────────────────────────────
    # ASSETS & LOGGING
    # ─────────────────────────────────────────────────────────────────────

    ui_dir: Optional[str] = None
    """Directory holding index.html and js/index.min.js; None = bundled."""

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, **overrides) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        PROMDOC_LOG_LEVEL  Logging level (default: INFO)
        PROMDOC_UI_DIR     Directory overriding the bundled UI assets
        PROMDOC_WORKERS    Max worker threads (default: 16)
        PROMDOC_TIMEOUT    Per-connection timeout in seconds (default: 30)

        Keyword arguments (typically from the command line) win over the
        environment:

            config = ServerConfig.from_env(host=args.host, port=args.port)

        Raises:
            ValueError: A numeric variable does not parse.
        =====================================================================
        """
        values = {
            "log_level": os.getenv("PROMDOC_LOG_LEVEL", "INFO").upper(),
            "ui_dir": os.getenv("PROMDOC_UI_DIR") or None,
        }

        workers = os.getenv("PROMDOC_WORKERS")
        if workers:
            values["max_workers"] = _parse_env("PROMDOC_WORKERS", workers, int)
            values["min_workers"] = min(cls.min_workers, values["max_workers"])

        timeout = os.getenv("PROMDOC_TIMEOUT")
        if timeout:
            values["timeout"] = _parse_env("PROMDOC_TIMEOUT", timeout, float)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def validate(self) -> None:
        """
        Check every value; raise ValueError naming the first bad one.
        """
        if not 0 <= self.port <= 65535:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.shutdown_timeout < 0:
            raise ValueError("shutdown_timeout must be >= 0")

        if self.accept_poll_interval <= 0:
            raise ValueError("accept_poll_interval must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.log_level}. "
                f"Must be one of {', '.join(LOG_LEVELS)}."
            )


def _parse_env(name: str, raw: str, convert):
    try:
        return convert(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the process.

        2026-10-19 12:00:00 [INFO] promdoc.core.socket_server: Listening on 127.0.0.1:9095
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
