"""
=============================================================================
ASSET STORE
=============================================================================

The UI that promdoc serves is two files produced by the frontend build:

    ui/dist/
    ├── index.html          → served at "/"
    └── js/
        └── index.min.js    → served at "/js"

Both are read ONCE, when the server starts, and kept in memory as
immutable StaticAsset values. Handlers never touch the filesystem, so the
asset store needs no locking and a missing file is a startup error rather
than a 404 at request time.

The third payload, the client configuration served at "/config", is not
a file: a fresh ClientConfig is built for every request and serialized
to compact JSON.

    {"prometheus_urls":["http://localhost:9090"]}

=============================================================================
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Union


logger = logging.getLogger(__name__)


BUNDLED_UI_DIR = Path(__file__).parent / "ui" / "dist"

INDEX_HTML_PATH = "index.html"
INDEX_JS_PATH = "js/index.min.js"

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
JS_CONTENT_TYPE = "text/javascript; charset=utf-8"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"

DEFAULT_PROMETHEUS_URLS = ("http://localhost:9090",)


class AssetError(Exception):
    """A UI asset could not be loaded. Fatal at startup."""


@dataclass(frozen=True)
class StaticAsset:
    """A payload and the Content-Type it is served with."""

    content_type: str
    body: bytes

    def __len__(self) -> int:
        return len(self.body)


@dataclass
class ClientConfig:
    """
    Configuration the UI fetches from /config on load.

    Attributes:
        prometheus_urls: Prometheus endpoints the UI queries, in order.
    """

    prometheus_urls: List[str] = field(
        default_factory=lambda: list(DEFAULT_PROMETHEUS_URLS)
    )

    def to_dict(self) -> dict:
        return {"prometheus_urls": self.prometheus_urls}

    def to_json(self) -> str:
        """
        Compact JSON, no whitespace between tokens.

        Raises:
            TypeError, ValueError: A value is not JSON-serializable.
        """
        return json.dumps(self.to_dict(), separators=(",", ":"), allow_nan=False)


def default_client_config() -> ClientConfig:
    return ClientConfig()


class AssetStore:
    """
    Read-only holder of everything the handlers serve.

        assets = AssetStore.load()                 # bundled UI
        assets = AssetStore.load("/srv/promdoc")   # operator-supplied UI

        assets.index_html.body       # bytes of index.html
        assets.client_config()       # new ClientConfig each call
    """

    def __init__(
        self,
        index_html: StaticAsset,
        index_js: StaticAsset,
        client_config_factory: Callable[[], ClientConfig] = default_client_config,
    ):
        self.index_html = index_html
        self.index_js = index_js
        self._client_config_factory = client_config_factory

    @classmethod
    def load(cls, ui_dir: Optional[Union[str, Path]] = None, **kwargs) -> "AssetStore":
        """
        Read the UI files from ui_dir (default: the bundled ui/dist).

        Raises:
            AssetError: The directory or one of the files is missing or
                        unreadable.
        """
        base = Path(ui_dir) if ui_dir is not None else BUNDLED_UI_DIR

        if not base.is_dir():
            raise AssetError(f"UI directory not found: {base}")

        index_html = StaticAsset(HTML_CONTENT_TYPE, _read(base / INDEX_HTML_PATH))
        index_js = StaticAsset(JS_CONTENT_TYPE, _read(base / INDEX_JS_PATH))

        logger.debug(
            f"Loaded UI from {base}: {INDEX_HTML_PATH} ({len(index_html)} bytes), "
            f"{INDEX_JS_PATH} ({len(index_js)} bytes)"
        )
        return cls(index_html, index_js, **kwargs)

    def client_config(self) -> ClientConfig:
        return self._client_config_factory()


def _read(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise AssetError(f"Cannot read UI asset {path}: {e}") from e
