"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

One line per request on the "promdoc.access" logger, in a format close to
Apache's common log:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [19/Oct/2026:10:55:36 +0000] "GET /config HTTP/1.1"   │
    │     200 45 "curl/8.0" 0.31ms                                        │
    │ ───────────────────────────────────────────────────────────────────│
    │ IP, timestamp, request line, status, size, user agent, duration    │
    └─────────────────────────────────────────────────────────────────────┘

Access lines go out at DEBUG by default, so a server started with the
default INFO level only prints its startup and shutdown lines. Run with
PROMDOC_LOG_LEVEL=DEBUG to see them, or route the logger elsewhere:

    logging.getLogger("promdoc.access").addHandler(file_handler)

=============================================================================
"""

import time
import uuid
import logging
from dataclasses import dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("promdoc.access")


@dataclass
class RequestLog:
    """One access log entry."""

    request_id: str
    method: str
    target: str
    version: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target} {self.version}" {self.status_code} '
            f'{self.content_length} "{self.user_agent}" {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Access logging.

    Add it first so that it times and logs everything behind it:

        server.use(LoggingMiddleware())
        server.use(LoggingMiddleware(skip_paths=["/-/healthy", "/-/ready"]))

    A handler exception is logged at ERROR here and re-raised for the
    server to turn into a 500.
    """

    def __init__(
        self,
        log_level: int = logging.DEBUG,
        skip_paths=None,
    ):
        """
        Args:
            log_level: Level of the access lines.
            skip_paths: Paths not to log, e.g. health check endpoints.
        """
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"[{request_id}] Request failed: {request.method} {request.target} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        if request.path in self.skip_paths or not logger.isEnabledFor(self.log_level):
            return response

        entry = RequestLog(
            request_id=request_id,
            method=request.method,
            target=request.target,
            version=request.version,
            client_ip=request.client_address[0] if request.client_address else "-",
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )
        logger.log(self.log_level, entry.to_text())

        return response
