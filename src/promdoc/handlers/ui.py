"""
=============================================================================
UI HANDLERS
=============================================================================

Serve the two bundled UI files from memory:

    GET /     → index.html       text/html; charset=utf-8
    GET /js   → js/index.min.js  text/javascript; charset=utf-8

The bytes come from the AssetStore loaded at startup; no filesystem
access happens per request.

=============================================================================
"""

from ..assets import AssetStore, StaticAsset
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok


class UIHandler:
    """Serves the HTML document and the JavaScript bundle."""

    def __init__(self, assets: AssetStore):
        self.assets = assets

    def index(self, request: HTTPRequest) -> HTTPResponse:
        return _serve(self.assets.index_html)

    def script(self, request: HTTPRequest) -> HTTPResponse:
        return _serve(self.assets.index_js)


def _serve(asset: StaticAsset) -> HTTPResponse:
    return ok(asset.body, content_type=asset.content_type)
