"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for exactly one HTTP exchange.

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

recv() returns whatever the kernel has buffered, not whole messages:

    Client sends:   "GET /js HTTP/1.1\r\nHost: x\r\n\r\n"

    Server may get: recv() → "GET /j"
                    recv() → "s HTTP/1.1\r\nHost: x\r\n\r\n"

So the request is accumulated until the header terminator \r\n\r\n
appears, then Content-Length more bytes are read for the body.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

promdoc does not keep connections alive. Every connection carries one
request and one response, and is then closed:

    TCP Connect → read request → write response → TCP Close

Bytes the client sends after its first request are drained and dropped
by close().

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
              │                                      ▲
              └──────────── (error / EOF) ───────────┘

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from ..http.request import HTTPParseError


logger = logging.getLogger(__name__)

# Longest close() waits for the client to stop sending
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Connection lifecycle states, used in debug logs."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Peer (ip, port).
        id: Short random identifier used as a log prefix.
        state: Current ConnectionState.
        created_at: Accept time (time.time()).
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    max_request_size: int = 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        # Accepted sockets inherit nothing useful from the listener;
        # set blocking mode with our own timeout.
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request.

        1. Read until \\r\\n\\r\\n (end of headers)
        2. Find Content-Length in the header bytes
        3. Read until the body is complete

        Returns:
            The request bytes (headers + body), or None if the client closed
            the connection before sending a full header section.

        Raises:
            TimeoutError: The client stalled for longer than `timeout`.
            HTTPParseError: The request exceeds max_request_size (413).
        """
        self.state = ConnectionState.READING

        try:
            while b"\r\n\r\n" not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return None
                self._buffer += chunk
                self._check_size()

            header_end = self._buffer.find(b"\r\n\r\n")
            body_start = header_end + 4
            content_length = self._parse_content_length(self._buffer[:header_end])

            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break  # Truncated body; the parser reports it
                self._buffer += chunk
                self._check_size()

            request_end = body_start + content_length
            request_data = self._buffer[:request_end]
            self._buffer = self._buffer[request_end:]
            return request_data

        except socket.timeout:
            raise TimeoutError("Request read timeout")

    def _check_size(self):
        if len(self._buffer) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: more than {self.max_request_size} bytes",
                status_code=413,
            )

    def _recv(self) -> bytes:
        """recv() that maps an abrupt disconnect to EOF."""
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    @staticmethod
    def _parse_content_length(headers: bytes) -> int:
        """
        Content-Length from raw header bytes, 0 if missing or unreadable.

        Only used to know how much to read; RequestParser validates it.
        """
        for line in headers.split(b"\r\n")[1:]:
            name, sep, value = line.partition(b":")
            if sep and name.strip().lower() == b"content-length":
                try:
                    return max(int(value.strip()), 0)
                except ValueError:
                    return 0
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the full response with sendall().

        Returns:
            True on success, False if the client went away.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except (socket.timeout, OSError) as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self, drain: bool = True):
        """
        Close the connection.

        1. shutdown(SHUT_WR): send FIN so the client sees end of response
        2. Drain what the client still sends, briefly (drain=False only
           discards bytes that have already arrived)
        3. close() the descriptor

        Draining before close avoids a RST that could discard the response
        before the client has read it. The acceptor thread closes rejected
        connections with drain=False so it never waits on a client.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            if drain:
                self.socket.settimeout(DRAIN_TIMEOUT)
                while self.socket.recv(1024):
                    pass
            else:
                # Only what has already arrived; never blocks
                self.socket.setblocking(False)
                self.socket.recv(self.buffer_size)
        except OSError:
            pass  # socket.timeout and BlockingIOError are OSErrors

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
