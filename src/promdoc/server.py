"""
=============================================================================
HTTP SERVER
=============================================================================

Wires the pieces together and runs one request/response exchange per
accepted connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        └────────┬────────┘                          │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐        │
    │    │ SocketServer │    │  ThreadPool  │    │    Router    │        │
    │    │  (accept)    │    │  (workers)   │    │  (dispatch)  │        │
    │    └──────┬───────┘    └──────┬───────┘    └──────┬───────┘        │
    │           ▼                   ▼                   ▼                 │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐        │
    │    │  Connection  │    │ Middleware   │    │   Handlers   │        │
    │    └──────────────┘    └──────────────┘    └──────┬───────┘        │
    │                                                   ▼                 │
    │                                            ┌──────────────┐        │
    │                                            │  AssetStore  │        │
    │                                            └──────────────┘        │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts the TCP connection (acceptor thread)
    2. The connection is submitted to the ThreadPool; queue full → 503
    3. Worker reads one request             stalled client → 408
    4. RequestParser builds an HTTPRequest  malformed → 400/413/505
    5. Middleware → Router → handler        handler raised → 500
    6. "Connection: close" is set, response sent (headers only for HEAD)
    7. Connection closed

=============================================================================
SHUTDOWN
=============================================================================

    SIGINT / SIGTERM / stop()
        │
        ├──► accept loop ends, listener closed (no new connections)
        └──► ThreadPool.shutdown(wait=True, timeout=shutdown_timeout)
                 queued and in-flight exchanges run to completion

=============================================================================
"""

import logging
from typing import Optional, Callable, Tuple

from .app import create_router
from .assets import AssetStore
from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, ThreadPool
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, HTTPStatus, Router,
    internal_error, error_response,
)
from .middleware import MiddlewarePipeline, Middleware


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    The promdoc HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        assets = AssetStore.load(config.ui_dir)
        server = HTTPServer(config, assets)
        server.use(LoggingMiddleware())
        server.run()                 # blocks until SIGINT/SIGTERM

    Without an asset store the router starts empty and routes are added
    with the route decorator:

        server = HTTPServer(config)

        @server.route("/-/healthy")
        def healthy(request):
            return ok("OK")

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        assets: Optional[AssetStore] = None,
    ):
        """
        Args:
            config: Server configuration; defaults when omitted.
            assets: Loaded UI assets. When given, the promdoc routing table
                    is installed.

        Raises:
            ValueError: The configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()
        self.assets = assets

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        if assets is not None:
            self._router = create_router(assets)
        else:
            self._router = Router()

        self._middleware = MiddlewarePipeline()

        # middleware.wrap(router.handle), built by run()
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware; the first added is the outermost."""
        self._middleware.add(middleware)
        return self

    def route(self, path: str, name: Optional[str] = None):
        """Register a route handler for every method on path."""
        return self._router.route(path, name)

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening, even for port 0."""
        return self._socket_server.address

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Serve until interrupted. Blocks.

        Returns normally after a clean shutdown.

        Raises:
            OSError: The listening socket could not be bound.
        """
        self._handler = self._middleware.wrap(self._router.handle)
        logger.debug("Routes:")
        self._router.log_routes(logger)

        self._thread_pool.start()

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Interrupt signal received.")
        finally:
            self._shutdown()

    def stop(self):
        """Request shutdown from another thread; run() then returns."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening. False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def _shutdown(self):
        logger.debug("Waiting for in-flight connections...")
        self._thread_pool.shutdown(wait=True, timeout=self.config.shutdown_timeout)
        logger.debug("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand a freshly accepted connection to the pool (acceptor thread)."""
        submitted = self._thread_pool.submit(self._process_connection, args=(conn,))

        if not submitted:
            logger.warning(f"[{conn.id}] Worker queue full, rejecting connection")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE)
            conn.close(drain=False)

    def _process_connection(self, conn: Connection):
        """
        One exchange on one connection (worker thread).

        Everything that can go wrong with a single client is handled here;
        nothing propagates back to the acceptor.
        """
        with conn:
            try:
                raw_request = conn.read_request()
            except TimeoutError:
                logger.debug(f"[{conn.id}] Read timed out")
                self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT)
                return
            except HTTPParseError as e:
                logger.debug(f"[{conn.id}] Bad request: {e}")
                self._send_error(conn, HTTPStatus(e.status_code))
                return

            if raw_request is None:
                logger.debug(f"[{conn.id}] Client closed before sending a request")
                return

            try:
                request = self._parser.parse(raw_request, conn.address)
            except HTTPParseError as e:
                logger.debug(f"[{conn.id}] Bad request: {e}")
                self._send_error(conn, HTTPStatus(e.status_code))
                return

            conn.state = ConnectionState.PROCESSING
            response = self._dispatch(request, conn)

            response.headers["Connection"] = "close"
            response_bytes = response.to_bytes(
                self.config.server_name,
                include_body=not request.is_head,
            )
            conn.send_response(response_bytes)

    def _dispatch(self, request: HTTPRequest, conn: Connection) -> HTTPResponse:
        handler = self._handler or self._middleware.wrap(self._router.handle)
        try:
            return handler(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error on {request.method} {request.path}: {e}")
            return internal_error()

    def _send_error(self, conn: Connection, status: HTTPStatus):
        """Best-effort empty-bodied error response."""
        response = error_response(status)
        conn.send_response(response.to_bytes(self.config.server_name))
