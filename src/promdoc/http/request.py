"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the raw bytes of one HTTP/1.x request into an HTTPRequest.

    GET /config?x=1 HTTP/1.1\r\n        ← request line
    Host: localhost:9095\r\n            ← headers
    User-Agent: curl/8.0\r\n
    \r\n                                ← end of headers
    <body, Content-Length bytes>

=============================================================================
WHAT THE ROUTER SEES
=============================================================================

promdoc routes on the PATH COMPONENT of the request target and nothing
else. The parser therefore keeps the path exactly as the client sent it:

    target                          path
    ──────────────────────────      ─────────────
    /config                         /config
    /config?pretty=1                /config
    /config/                        /config/        (no normalization)
    /%2D/healthy                    /%2D/healthy    (no percent-decoding)
    //js                            //js            (not a network location)
    http://localhost:9095/js        /js             (absolute-form)

The method is validated as an RFC 7230 token but not restricted to a
known list; routing is method-agnostic.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict
from urllib.parse import urlsplit
import re


class HTTPParseError(Exception):
    """
    Raised when a request cannot be parsed.

    Carries the status code that should be sent back before the
    connection is closed:

        400 Bad Request                  - malformed syntax
        413 Payload Too Large            - request exceeds the size limit
        505 HTTP Version Not Supported   - not HTTP/1.0 or HTTP/1.1
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         Request method, as sent ("GET", "HEAD", "PURGE", ...).
        path:           Path component of the target, query string removed.
        target:         The raw request target from the request line.
        version:        "HTTP/1.1" or "HTTP/1.0".
        headers:        Header map with lower-cased names.
        body:           Raw body bytes (Content-Length sized).
        client_address: (ip, port) of the peer.
    """

    method: str
    path: str
    target: str = ""
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    client_address: tuple[str, int] = ("", 0)

    def __post_init__(self):
        if not self.target:
            self.target = self.path

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_head(self) -> bool:
        """HEAD responses carry headers only."""
        return self.method == "HEAD"


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    ==========================================================================
    REGEX PATTERNS
    ==========================================================================

    REQUEST_LINE_PATTERN: ^(token) (target) (HTTP/d.d)$

        token   - RFC 7230 tchar+: letters, digits and !#$%&'*+-.^_`|~
        target  - anything except whitespace
        version - HTTP/X.Y (only 1.0 and 1.1 are accepted afterwards)

    HEADER_PATTERN: ^([^:]+):\\s*(.*)$

    ==========================================================================
    """

    REQUEST_LINE_PATTERN = re.compile(
        r"^([!#$%&'*+\-.^_`|~0-9A-Za-z]+) (\S+) (HTTP/\d\.\d)$"
    )
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")
    ABSOLUTE_FORM_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")

    SUPPORTED_VERSIONS = ("HTTP/1.0", "HTTP/1.1")

    def __init__(self, max_request_size: int = 1024 * 1024):
        """
        Args:
            max_request_size: Largest request (headers + body) accepted, in
                              bytes. Larger requests fail with 413.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse one complete request.

        =====================================================================
        PARSING ALGORITHM
        =====================================================================

        1. Reject oversized input (413)
        2. Split at the first \\r\\n\\r\\n into header section and body
        3. Parse the request line (400 / 505)
        4. Parse the header lines
        5. Cut the body to Content-Length

        =====================================================================

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413,
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        # Header bytes are ISO-8859-1 on the wire; latin-1 never fails.
        header_section = data[:header_end].decode("latin-1")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        if not lines or not lines[0]:
            raise HTTPParseError("Empty request line")

        method, target, path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        content_length = self._content_length(headers)
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )
        body = body[:content_length]

        return HTTPRequest(
            method=method,
            path=path,
            target=target,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_request_line(
        self,
        line: str
    ) -> tuple[str, str, str, str]:
        """
        Parse "METHOD SP request-target SP HTTP-version".

        Returns:
            (method, target, path, version)
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, version = match.groups()

        if version not in self.SUPPORTED_VERSIONS:
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505,
            )

        return method, target, self._target_path(target), version

    @classmethod
    def _target_path(cls, target: str) -> str:
        """
        Path component of a request target, never unquoted.

        Only absolute-form targets (http://host/js) go through urlsplit;
        anything else is cut at the first "?" or "#" and kept as sent, so
        "//js" stays "//js" instead of becoming a network location.
        """
        if cls.ABSOLUTE_FORM_PATTERN.match(target):
            return urlsplit(target).path or "/"
        return re.split(r"[?#]", target, maxsplit=1)[0]

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse header lines into a dict with lower-cased names.

        - Repeated headers are joined with ", " (RFC 7230 §3.2.2).
        - Lines starting with SP/HTAB continue the previous header
          (obsolete line folding).
        - Lines without a colon are skipped.
        """
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()
            current_name = name

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers

    @staticmethod
    def _content_length(headers: Dict[str, str]) -> int:
        raw = headers.get("content-length")
        if raw is None:
            return 0
        try:
            length = int(raw)
        except ValueError:
            raise HTTPParseError(f"Invalid Content-Length: {raw!r}")
        if length < 0:
            raise HTTPParseError(f"Invalid Content-Length: {raw!r}")
        return length
