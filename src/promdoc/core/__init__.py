"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing under the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • binds host:port, runs the accept() loop in the calling thread    │
    │  • stops on SIGINT / SIGTERM / shutdown()                           │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one task per accepted connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          THREAD POOL                                 │
    │  • worker threads pulling from a bounded queue                      │
    │  • shutdown lets submitted tasks finish                             │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ worker runs one exchange
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • buffered read of one request, sendall() of one response          │
    │  • NEW → READING → PROCESSING → WRITING → CLOSED                    │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
