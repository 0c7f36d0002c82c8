"""
=============================================================================
PROMDOC
=============================================================================

A small local HTTP server for the promdoc UI. It serves

    /            the bundled HTML page
    /js          the bundled JavaScript
    /config      the client configuration as JSON
    /-/...       Prometheus-style health, readiness, reload and quit

on raw sockets with a thread pool, one request per connection.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    promdoc/
    ├── __main__.py          # CLI entry point (promdoc, python -m promdoc)
    ├── server.py            # HTTPServer: one exchange per connection
    ├── app.py               # The routing table
    ├── assets.py            # AssetStore, StaticAsset, ClientConfig
    ├── config.py            # ServerConfig, setup_logging
    ├── core/
    │   ├── socket_server.py # Listener and accept loop
    │   ├── connection.py    # Reading/writing one exchange
    │   └── thread_pool.py   # Workers and bounded queue
    ├── http/
    │   ├── request.py       # Request parsing
    │   ├── response.py      # Response building
    │   ├── router.py        # Exact-path router
    │   └── status_codes.py  # HTTPStatus
    ├── middleware/
    │   ├── base.py          # Middleware, MiddlewarePipeline
    │   └── logging.py       # Access logging
    ├── handlers/
    │   ├── ui.py            # / and /js
    │   ├── client_config.py # /config
    │   └── operational.py   # /-/healthy, /-/ready, /-/reload, /-/quit
    └── ui/dist/             # Bundled frontend build

=============================================================================
QUICK START
=============================================================================

    from promdoc import HTTPServer, ServerConfig, AssetStore

    server = HTTPServer(ServerConfig(port=9095), AssetStore.load())
    server.run()

=============================================================================
"""

__version__ = "0.1.0"

from .assets import AssetStore, AssetError, ClientConfig, StaticAsset
from .config import ServerConfig, setup_logging
from .server import HTTPServer

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "AssetStore",
    "AssetError",
    "ClientConfig",
    "StaticAsset",
    "setup_logging",
    "__version__",
]
