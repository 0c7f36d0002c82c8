"""
=============================================================================
TCP SOCKET SERVER (CONNECTION ACCEPTOR)
=============================================================================

Owns the listening socket: binds it, accepts connections, and hands each
one to a callback without waiting for the exchange to finish.

    getaddrinfo() → socket() → setsockopt() → bind() → listen() → accept loop → close()

The address family comes from resolving the configured host, so
"127.0.0.1" listens on IPv4 and "::1" on IPv6.

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    │                       │     Bound to 127.0.0.1:9095
                    └───────────┬───────────┘     Never sends/receives data
                                │ accept()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    ┌───────────┐         ┌───────────┐         ┌───────────┐
    │ Client    │         │ Client    │         │ Client    │
    │ Socket 1  │         │ Socket 2  │         │ Socket 3  │
    └───────────┘         └───────────┘         └───────────┘

=============================================================================
ACCEPT LOOP STATES
=============================================================================

    LISTENING ──connection──► DISPATCHING ──► LISTENING
        │
        └──SIGINT / SIGTERM / shutdown()──► SHUTTING DOWN ──► STOPPED

accept() waits at most `accept_poll_interval` seconds, then the loop
re-checks the running flag. Whichever comes first, a connection or a
shutdown request, is acted on.

=============================================================================
SOCKET OPTIONS
=============================================================================

SO_REUSEADDR   restart immediately, even with sockets in TIME_WAIT
TCP_NODELAY    responses are small, send them without Nagle delay

SO_REUSEPORT is deliberately NOT set: with it a second promdoc on the
same port would bind successfully instead of failing with
"Address already in use".

=============================================================================
SIGNALS
=============================================================================

SIGINT (Ctrl+C) and SIGTERM (docker stop, systemd, kill) both end the
accept loop. Python only allows installing handlers from the main
thread, so a server started from any other thread (tests, embedding)
is stopped with shutdown() instead. The previous handlers are restored
when the loop ends.

=============================================================================
"""

import socket
import signal
import logging
import threading
import time
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


def format_address(host: str, port: int) -> str:
    """"host:port", with IPv6 hosts in brackets ("[::1]:9095")."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


class SocketServer:
    """
    Listens on config.host:config.port and feeds accepted connections to a
    callback.

        def handle_connection(conn: Connection):
            pool.submit(process, args=(conn,))

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the socket is listening, so other threads can read .address
        self._ready_event = threading.Event()
        # Set once shutdown has been requested
        self._shutdown_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        Reports the port the OS actually assigned, which differs from
        config.port when that is 0.
        """
        if self._socket is not None:
            try:
                host, port = self._socket.getsockname()[:2]
                return (host, port)
            except OSError:
                pass  # Closed under us; fall back to the configured address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """
        Resolve config.host and bind a listening socket for it.

        The address family follows the host: "127.0.0.1" gives AF_INET,
        "::1" gives AF_INET6. Every resolved address is tried in order and
        the last error is raised if none binds.
        """
        infos = socket.getaddrinfo(
            self.config.host, self.config.port,
            type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE,
        )

        error: Optional[OSError] = None
        for family, sock_type, proto, _, sockaddr in infos:
            sock = socket.socket(family, sock_type, proto)
            try:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
                sock.bind(sockaddr)
                sock.listen(self.config.backlog)
            except OSError as e:
                sock.close()
                error = e
                continue

            # accept() returns at least this often so the running flag is seen
            sock.settimeout(self.config.accept_poll_interval)
            return sock

        raise error or OSError(f"No address found for {self.config.host!r}")

    def _setup_signals(self):
        """Install SIGINT/SIGTERM handlers; main thread only."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, signal handlers not installed")
            return

        def shutdown_handler(signum, frame):
            logger.debug(f"Received {signal.Signals(signum).name}")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop.

        Blocks until shutdown() is called or a signal arrives.

        Args:
            connection_handler: Called with each accepted Connection. Must
                                not block on the exchange itself.

        Raises:
            OSError: Bind or listen failed (address in use, permission
                     denied, invalid address). Logged at ERROR first.
        """
        self._shutdown_event.clear()

        try:
            self._socket = self._create_socket()
        except OSError as e:
            logger.error(f"Failed to bind to {format_address(self.config.host, self.config.port)}: {e}")
            raise

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Listening on {format_address(host, port)}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        ┌─────────────────────────────────────────────────────────────────┐
        │   while running:                                                 │
        │       accept()          at most accept_poll_interval seconds    │
        │       Connection(...)   wrap the client socket                  │
        │       handler(conn)     hand off, do not wait                   │
        │       sleep(0)          let other threads run                   │
        └─────────────────────────────────────────────────────────────────┘
        """
        while self._running:
            if not self._accept_one(connection_handler):
                break
            time.sleep(0)

    def _accept_one(self, connection_handler: Callable[[Connection], None]) -> bool:
        """
        One accept() and hand-off. False once the listener has been closed.
        """
        try:
            client_socket, client_address = self._socket.accept()
        except socket.timeout:
            return True
        except OSError as e:
            if not self._running:
                return False  # Listener closed by shutdown
            logger.error(f"Accept error: {e}")
            return True

        logger.debug(f"Accepted connection from {format_address(*client_address[:2])}")

        conn = Connection(
            socket=client_socket,
            address=client_address[:2],
            buffer_size=self.config.buffer_size,
            timeout=self.config.timeout,
            max_request_size=self.config.max_request_size,
        )

        try:
            connection_handler(conn)
        except Exception as e:
            logger.exception(f"[{conn.id}] Dispatch failed: {e}")
            conn.close(drain=False)
        return True

    def shutdown(self):
        """
        Ask the accept loop to stop.

        Safe to call from a signal handler or any thread, and more than once.
        """
        if self._shutdown_event.is_set():
            return
        logger.info("Interrupt signal received.")
        self._running = False
        self._shutdown_event.set()

    def _cleanup(self):
        self._running = False
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None

        self._ready_event.clear()
        logger.debug("Listener closed")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False on timeout."""
        return self._ready_event.wait(timeout)
