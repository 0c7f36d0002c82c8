"""
=============================================================================
HANDLERS MODULE
=============================================================================

Every response promdoc produces comes from one of these handlers.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST → HANDLER → RESPONSE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   UIHandler            /             index.html                     │
    │                        /js           JavaScript bundle              │
    │                                                                      │
    │   ClientConfigHandler  /config       {"prometheus_urls": [...]}     │
    │                                                                      │
    │   OperationalHandler   /-/healthy    OK                             │
    │                        /-/ready      OK                             │
    │                        /-/reload     501                            │
    │                        /-/quit       501                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Handlers are class instances holding their dependencies (the asset
store); each public method takes an HTTPRequest and returns an
HTTPResponse. None of them look at the request method.

=============================================================================
"""

from .ui import UIHandler
from .client_config import ClientConfigHandler
from .operational import OperationalHandler

__all__ = [
    "UIHandler",
    "ClientConfigHandler",
    "OperationalHandler",
]
