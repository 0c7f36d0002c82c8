"""
=============================================================================
OPERATIONAL ENDPOINTS
=============================================================================

The /-/ endpoints follow the Prometheus convention, so the same health checks
and scripts that poke a Prometheus server can poke promdoc:

    ┌─────────────────────┬────────┬───────────────────────────────────────┐
    │ Path                │ Status │ Body                                  │
    ├─────────────────────┼────────┼───────────────────────────────────────┤
    │ /-/healthy          │ 200    │ OK                                    │
    │ /-/ready            │ 200    │ OK                                    │
    │ /-/reload           │ 501    │ (empty)                               │
    │ /-/quit             │ 501    │ (empty)                               │
    └─────────────────────┴────────┴───────────────────────────────────────┘

promdoc has no dependencies to check and nothing to reload, so health and
readiness are unconditional, and reload/quit are reserved but not
implemented. None of these responses carry a Content-Type. Calling any of
them has no effect on the server, however often they are called.

=============================================================================
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, not_implemented


HEALTHY_BODY = "OK"


class OperationalHandler:
    """
    Handlers for the /-/ endpoints.

        ops = OperationalHandler()
        router.add_route("/-/healthy", ops.healthy)
        router.add_route("/-/ready", ops.ready)
    """

    def healthy(self, request: HTTPRequest) -> HTTPResponse:
        """Liveness: the process is up and answering."""
        return ok(HEALTHY_BODY)

    def ready(self, request: HTTPRequest) -> HTTPResponse:
        """Readiness: assets are in memory from startup, so always ready."""
        return ok(HEALTHY_BODY)

    def reload(self, request: HTTPRequest) -> HTTPResponse:
        return not_implemented()

    def quit(self, request: HTTPRequest) -> HTTPResponse:
        return not_implemented()
