"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

HTTPResponse holds the status, headers and body a handler produced;
to_bytes() serializes it for the socket.

    HTTP/1.1 200 OK\r\n                          ← status line
    Content-Type: application/json; charset=utf-8\r\n
    Connection: close\r\n
    Content-Length: 45\r\n                      ← added automatically
    Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n      ← added automatically
    Server: promdoc\r\n                          ← added automatically
    \r\n
    {"prometheus_urls":["http://localhost:9090"]}

Responses without an explicit Content-Type (health checks, 404, 501)
are sent without one; nothing is guessed.

=============================================================================
BUILDER PATTERN
=============================================================================

    response = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .content_type("text/javascript; charset=utf-8")
        .body(script_bytes)
        .build())

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Union

from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "promdoc"


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be serialized.

    Use ResponseBuilder or the helper functions at the bottom of this
    module to create one.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """"HTTP/1.1 404 Not Found"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def to_bytes(
        self,
        server_name: str = DEFAULT_SERVER_NAME,
        include_body: bool = True,
    ) -> bytes:
        """
        Serialize the response.

        Content-Length, Date and Server are filled in unless the handler set
        them. Content-Length always describes the full body, even when
        include_body is False (the HEAD case, RFC 7231 §4.3.2).

        Args:
            server_name: Value for the Server header.
            include_body: False to send headers only.

        Returns:
            Bytes ready for socket.sendall().
        """
        response_headers = dict(self.headers)

        if "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("latin-1") + b"\r\n"

        if not include_body:
            return header_bytes
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    Every method except build() returns self:

        ResponseBuilder().status(HTTPStatus.OK).body("OK").build()
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    # =========================================================================
    # STATUS & HEADERS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    # =========================================================================
    # BODY
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the raw body without touching Content-Type.

        Strings are encoded as UTF-8.
        """
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    # =========================================================================
    # CONNECTION
    # =========================================================================

    def close_connection(self) -> "ResponseBuilder":
        self._headers["Connection"] = "close"
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an RFC 7231 HTTP-date.

    Example: Mon, 19 Oct 2026 12:00:00 GMT

    Locale-independent on purpose, so strftime("%a") is not used.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Bodies here are plain: promdoc's error responses carry no JSON envelope.
#
# =============================================================================

def ok(body: Union[str, bytes] = b"", content_type: Optional[str] = None) -> HTTPResponse:
    """200 OK. Content-Type is only set when given."""
    builder = ResponseBuilder().status(HTTPStatus.OK).body(body)
    if content_type:
        builder.content_type(content_type)
    return builder.build()


def not_found() -> HTTPResponse:
    """404 Not Found with an empty body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def not_implemented() -> HTTPResponse:
    """501 Not Implemented with an empty body."""
    return ResponseBuilder().status(HTTPStatus.NOT_IMPLEMENTED).build()


def internal_error(message: str = "") -> HTTPResponse:
    """500 Internal Server Error; the message, if any, is the plain body."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).body(message).build()


def error_response(status: HTTPStatus) -> HTTPResponse:
    """
    Empty-bodied error sent for failures before routing (parse errors,
    timeouts, overload). The connection is always closed afterwards.
    """
    return ResponseBuilder().status(status).close_connection().build()
