"""
=============================================================================
ROUTING TABLE
=============================================================================

    ┌──────────────┬─────────────────────────────────┬────────────────────┐
    │ Path         │ Handler                         │ Response           │
    ├──────────────┼─────────────────────────────────┼────────────────────┤
    │ /            │ UIHandler.index                 │ 200 HTML           │
    │ /js          │ UIHandler.script                │ 200 JavaScript     │
    │ /config      │ ClientConfigHandler.handle      │ 200 JSON (or 500)  │
    │ /-/healthy   │ OperationalHandler.healthy      │ 200 OK             │
    │ /-/ready     │ OperationalHandler.ready        │ 200 OK             │
    │ /-/reload    │ OperationalHandler.reload       │ 501                │
    │ /-/quit      │ OperationalHandler.quit         │ 501                │
    │ (other)      │                                 │ 404                │
    └──────────────┴─────────────────────────────────┴────────────────────┘

Every route accepts any method.

=============================================================================
"""

from .assets import AssetStore
from .handlers import UIHandler, ClientConfigHandler, OperationalHandler
from .http.router import Router


def create_router(assets: AssetStore) -> Router:
    """Build promdoc's router over an already-loaded asset store."""
    router = Router()

    ui = UIHandler(assets)
    client_config = ClientConfigHandler(assets)
    ops = OperationalHandler()

    router.add_route("/", ui.index, name="index")
    router.add_route("/js", ui.script, name="script")
    router.add_route("/config", client_config.handle, name="config")

    router.add_route("/-/healthy", ops.healthy, name="healthy")
    router.add_route("/-/ready", ops.ready, name="ready")
    router.add_route("/-/reload", ops.reload, name="reload")
    router.add_route("/-/quit", ops.quit, name="quit")

    return router
