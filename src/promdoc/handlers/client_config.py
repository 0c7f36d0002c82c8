"""
=============================================================================
CLIENT CONFIG HANDLER
=============================================================================

GET /config returns the settings the UI needs at startup:

    HTTP/1.1 200 OK
    Content-Type: application/json; charset=utf-8

    {"prometheus_urls":["http://localhost:9090"]}

If the configuration cannot be serialized the response is a 500 whose
plain body is the serializer's error message, with no Content-Type.

=============================================================================
"""

import logging

from ..assets import AssetStore, JSON_CONTENT_TYPE
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, internal_error


logger = logging.getLogger(__name__)


class ClientConfigHandler:
    """Serializes a fresh ClientConfig for every request."""

    def __init__(self, assets: AssetStore):
        self.assets = assets

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        config = self.assets.client_config()
        try:
            body = config.to_json()
        except (TypeError, ValueError) as e:
            logger.error(f"Cannot serialize client config: {e}")
            return internal_error(str(e))
        return ok(body, content_type=JSON_CONTENT_TYPE)
