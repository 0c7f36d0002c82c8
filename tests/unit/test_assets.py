"""
Unit tests for the asset store.
"""

import json
import math
from pathlib import Path

import pytest

from promdoc.assets import (
    AssetStore,
    AssetError,
    ClientConfig,
    StaticAsset,
    BUNDLED_UI_DIR,
    HTML_CONTENT_TYPE,
    JS_CONTENT_TYPE,
)

from conftest import INDEX_HTML, INDEX_JS


class TestAssetStoreLoad:
    """Tests for AssetStore.load()."""

    def test_load_from_directory(self, ui_dir: Path):
        assets = AssetStore.load(ui_dir)

        assert assets.index_html == StaticAsset(HTML_CONTENT_TYPE, INDEX_HTML)
        assert assets.index_js == StaticAsset(JS_CONTENT_TYPE, INDEX_JS)

    def test_load_accepts_str_path(self, ui_dir: Path):
        assets = AssetStore.load(str(ui_dir))

        assert assets.index_html.body == INDEX_HTML

    def test_load_bundled(self):
        """The package ships its own UI build."""
        assets = AssetStore.load()

        assert BUNDLED_UI_DIR.is_dir()
        assert b"<html" in assets.index_html.body
        assert b"/js" in assets.index_html.body
        assert b"/config" in assets.index_js.body

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(AssetError):
            AssetStore.load(tmp_path / "does-not-exist")

    def test_missing_html(self, ui_dir: Path):
        (ui_dir / "index.html").unlink()

        with pytest.raises(AssetError) as exc_info:
            AssetStore.load(ui_dir)

        assert "index.html" in str(exc_info.value)

    def test_missing_js(self, ui_dir: Path):
        (ui_dir / "js" / "index.min.js").unlink()

        with pytest.raises(AssetError) as exc_info:
            AssetStore.load(ui_dir)

        assert "index.min.js" in str(exc_info.value)

    def test_bytes_are_served_verbatim(self, ui_dir: Path):
        """No decoding or newline translation."""
        payload = b"\xef\xbb\xbfline1\r\nline2\n\x00"
        (ui_dir / "js" / "index.min.js").write_bytes(payload)

        assert AssetStore.load(ui_dir).index_js.body == payload


class TestStaticAsset:

    def test_is_immutable(self):
        asset = StaticAsset(HTML_CONTENT_TYPE, b"<html></html>")

        with pytest.raises(AttributeError):
            asset.body = b"changed"

    def test_len(self):
        assert len(StaticAsset(JS_CONTENT_TYPE, b"12345")) == 5


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_default_urls(self):
        assert ClientConfig().prometheus_urls == ["http://localhost:9090"]

    def test_to_json_is_compact(self):
        assert ClientConfig().to_json() == '{"prometheus_urls":["http://localhost:9090"]}'

    def test_order_is_preserved(self):
        config = ClientConfig(prometheus_urls=["http://b:9090", "http://a:9090"])

        assert json.loads(config.to_json())["prometheus_urls"] == ["http://b:9090", "http://a:9090"]

    def test_defaults_are_not_shared(self):
        first = ClientConfig()
        first.prometheus_urls.append("http://other:9090")

        assert ClientConfig().prometheus_urls == ["http://localhost:9090"]

    def test_unserializable_value_raises(self):
        with pytest.raises(TypeError):
            ClientConfig(prometheus_urls=[object()]).to_json()

    def test_nan_raises(self):
        with pytest.raises(ValueError):
            ClientConfig(prometheus_urls=[math.nan]).to_json()

    def test_store_builds_fresh_config_each_call(self, assets: AssetStore):
        first = assets.client_config()
        second = assets.client_config()

        assert first == second
        assert first is not second

    def test_custom_factory(self):
        store = AssetStore(
            StaticAsset(HTML_CONTENT_TYPE, b""),
            StaticAsset(JS_CONTENT_TYPE, b""),
            client_config_factory=lambda: ClientConfig(["http://prom:9090"]),
        )

        assert store.client_config().prometheus_urls == ["http://prom:9090"]
