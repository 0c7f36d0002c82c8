"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Translates between the bytes on a connection and the request/response
objects handlers work with.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │   b"GET /config HTTP/1.1\r\n..."  →  HTTPRequest(path="/config")    │
    ├─────────────────────────────────────────────────────────────────────┤
    │ ROUTER (router.py)                                                  │
    │   HTTPRequest  →  handler  →  HTTPResponse   (exact path match)     │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE (response.py)                                              │
    │   HTTPResponse(status=501)  →  b"HTTP/1.1 501 Not Implemented..."   │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py)                                      │
    │   HTTPStatus.NOT_FOUND == 404, .phrase == "Not Found"               │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                 # 200 OK
    not_found,          # 404, empty body
    internal_error,     # 500, plain-text body
    not_implemented,    # 501, empty body
    error_response,     # pre-routing failures
)
from .router import Router, Route
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "not_found",
    "internal_error",
    "not_implemented",
    "error_response",

    # Routing
    "Router",
    "Route",

    # Status codes
    "HTTPStatus",
]
