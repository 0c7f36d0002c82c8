"""
=============================================================================
URL ROUTER
=============================================================================

Maps request paths to handler functions.

promdoc's routing table is a handful of fixed paths, so matching is a
plain dictionary lookup on the exact path string:

    "/"           → UIHandler.index
    "/js"         → UIHandler.script
    "/config"     → ClientConfigHandler.handle
    "/-/healthy"  → OperationalHandler.healthy
    ...
    anything else → 404, empty body

    EXACT MATCH means:
    - case-sensitive          "/Config"      ≠ "/config"
    - no trailing-slash fixup "/config/"     ≠ "/config"
    - no prefix matching      "/config/x"    ≠ "/config"
    - no slash collapsing     "//js"         ≠ "/js"

The method is never looked at: GET, POST, HEAD or anything else on the
same path reaches the same handler.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, Optional, Dict, List
import logging

from .request import HTTPRequest
from .response import HTTPResponse, not_found


# Signature every route handler follows
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route.

        Route(path="/-/healthy", handler=ops.healthy, name="healthy")
    """

    path: str
    handler: Handler
    name: Optional[str] = None


class Router:
    """
    Exact-match HTTP router.

    ==========================================================================
    USAGE
    ==========================================================================

        router = Router()

        @router.route("/-/healthy")
        def healthy(request):
            return ok("OK")

        router.add_route("/js", ui.script, name="script")

        response = router.handle(request)

    ==========================================================================
    """

    def __init__(self):
        self._routes: Dict[str, Route] = {}

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(self, path: str, handler: Handler, name: Optional[str] = None) -> Route:
        """
        Register a route.

        Args:
            path: Exact request path (e.g. "/-/ready").
            handler: Function taking an HTTPRequest and returning an HTTPResponse.
            name: Label shown by log_routes().

        Raises:
            ValueError: If the path does not start with "/" or is already
                        registered.
        """
        if not path.startswith("/"):
            raise ValueError(f"Route path must start with '/': {path!r}")
        if path in self._routes:
            raise ValueError(f"Route already registered: {path!r}")

        route = Route(path=path, handler=handler, name=name)
        self._routes[path] = route
        return route

    def route(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, name)
            return handler
        return decorator

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, path: str) -> Optional[Route]:
        """The route registered for exactly this path, or None."""
        return self._routes.get(path)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Dispatch a request; unknown paths get 404 with an empty body."""
        route = self.match(request.path)
        if route is None:
            return not_found()
        return route.handler(request)

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def routes(self) -> List[Route]:
        """All routes in registration order."""
        return list(self._routes.values())

    def log_routes(self, logger: logging.Logger, level: int = logging.DEBUG) -> None:
        """
        Write the routing table to logger, one line per route:

              /            index
              /js          script
              /-/healthy   healthy
        """
        if not logger.isEnabledFor(level):
            return
        for route in self._routes.values():
            logger.log(level, f"  {route.path:12} {route.name or ''}".rstrip())
