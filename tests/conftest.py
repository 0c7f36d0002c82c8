"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Dict, Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from promdoc import HTTPServer, ServerConfig
from promdoc.assets import AssetStore, StaticAsset, HTML_CONTENT_TYPE, JS_CONTENT_TYPE


INDEX_HTML = b"<!DOCTYPE html><html><body><script src=\"/js\"></script></body></html>"
INDEX_JS = b"(()=>{fetch(\"/config\")})();"


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /config?refresh=1 HTTP/1.1\r\n"
        b"Host: localhost:9095\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b'{"reload": true}'
    return (
        b"POST /-/reload HTTP/1.1\r\n"
        b"Host: localhost:9095\r\n"
        b"Content-Type: application/json\r\n"
        b"Content-Length: %d\r\n" % len(body) +
        b"Connection: close\r\n"
        b"\r\n"
    ) + body


@pytest.fixture
def ui_dir(tmp_path: Path) -> Path:
    """A UI build directory with both asset files."""
    (tmp_path / "js").mkdir()
    (tmp_path / "index.html").write_bytes(INDEX_HTML)
    (tmp_path / "js" / "index.min.js").write_bytes(INDEX_JS)
    return tmp_path


@pytest.fixture
def assets() -> AssetStore:
    """In-memory asset store with known payloads."""
    return AssetStore(
        index_html=StaticAsset(HTML_CONTENT_TYPE, INDEX_HTML),
        index_js=StaticAsset(JS_CONTENT_TYPE, INDEX_JS),
    )


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        shutdown_timeout=5.0,
        accept_poll_interval=0.05,
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None
        self.error: Optional[BaseException] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError(f"Server failed to start: {self.error}")

    def _run(self):
        try:
            self.server.run()
        except BaseException as e:
            self.error = e

    def stop(self, timeout: float = 5.0) -> bool:
        """Stop the server. True if run() returned within timeout."""
        self.server.stop()

        if self._thread:
            self._thread.join(timeout=timeout)
            return not self._thread.is_alive()
        return True

    def request(self, raw: bytes, timeout: float = 5.0) -> "RawResponse":
        return send_raw(self.port, raw, timeout=timeout)

    def get(self, path: str, method: str = "GET") -> "RawResponse":
        return self.request(
            f"{method} {path} HTTP/1.1\r\nHost: 127.0.0.1\r\n\r\n".encode()
        )


class RawResponse:
    """A response read off the wire, split into its parts."""

    def __init__(self, data: bytes):
        self.raw = data
        head, _, self.body = data.partition(b"\r\n\r\n")
        lines = head.decode("latin-1").split("\r\n")
        self.status_line = lines[0]
        self.status = int(self.status_line.split(" ")[1]) if self.status_line else 0
        self.headers: Dict[str, str] = {}
        for line in lines[1:]:
            name, _, value = line.partition(":")
            self.headers[name.strip().lower()] = value.strip()


def send_raw(port: int, raw: bytes, timeout: float = 5.0) -> RawResponse:
    """Send raw bytes, read until the server closes, parse the response."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as sock:
        sock.sendall(raw)
        return RawResponse(read_all(sock))


def read_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def start_server(config: ServerConfig, assets: AssetStore) -> TestServer:
    test_srv = TestServer(HTTPServer(config, assets))
    test_srv.start()
    return test_srv


@pytest.fixture
def test_server(config: ServerConfig, assets: AssetStore) -> Generator[TestServer, None, None]:
    """A promdoc server on an ephemeral port."""
    test_srv = start_server(config, assets)

    yield test_srv

    test_srv.stop()
