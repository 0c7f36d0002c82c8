"""
Unit tests for the connection acceptor.
"""

import socket
import threading
import time
import types

import pytest

from promdoc.config import ServerConfig
from promdoc.core import socket_server
from promdoc.core.socket_server import SocketServer, format_address


@pytest.fixture
def acceptor_config() -> ServerConfig:
    return ServerConfig(host="127.0.0.1", port=0, accept_poll_interval=0.01)


def run_in_thread(server: SocketServer, handler) -> threading.Thread:
    thread = threading.Thread(target=server.start, args=(handler,), daemon=True)
    thread.start()
    assert server.wait_until_ready(5.0)
    return thread


class TestFormatAddress:

    def test_ipv4(self):
        assert format_address("127.0.0.1", 9095) == "127.0.0.1:9095"

    def test_ipv6_is_bracketed(self):
        assert format_address("::1", 9095) == "[::1]:9095"


class TestAcceptLoop:

    def test_yields_on_every_idle_poll(self, acceptor_config: ServerConfig, monkeypatch):
        """An accept() timeout still ends the iteration with sleep(0)."""
        yields = []

        def fake_sleep(seconds):
            if seconds == 0:
                yields.append(threading.current_thread())
            time.sleep(seconds)

        monkeypatch.setattr(socket_server, "time", types.SimpleNamespace(sleep=fake_sleep))

        server = SocketServer(acceptor_config)
        thread = run_in_thread(server, lambda conn: None)
        time.sleep(0.3)
        server.shutdown()
        thread.join(5.0)

        assert not thread.is_alive()
        assert yields.count(thread) >= 5

    def test_connection_is_handed_off(self, acceptor_config: ServerConfig):
        accepted = []
        server = SocketServer(acceptor_config)

        def handler(conn):
            accepted.append(conn)
            conn.close(drain=False)

        thread = run_in_thread(server, handler)
        try:
            with socket.create_connection(server.address, timeout=2.0) as sock:
                assert sock.recv(1024) == b""
        finally:
            server.shutdown()
            thread.join(5.0)

        assert len(accepted) == 1
        assert accepted[0].address[0] == "127.0.0.1"

    def test_failing_handler_does_not_stop_loop(self, acceptor_config: ServerConfig):
        server = SocketServer(acceptor_config)
        calls = []

        def handler(conn):
            calls.append(conn)
            raise RuntimeError("boom")

        thread = run_in_thread(server, handler)
        try:
            for _ in range(2):
                with socket.create_connection(server.address, timeout=2.0) as sock:
                    assert sock.recv(1024) == b""
        finally:
            server.shutdown()
            thread.join(5.0)

        assert len(calls) == 2
        assert not thread.is_alive()


class TestBind:

    def test_unresolvable_host_raises(self, acceptor_config: ServerConfig):
        acceptor_config.host = "no-such-host.invalid"

        with pytest.raises(OSError):
            SocketServer(acceptor_config).start(lambda conn: None)

    def test_address_family_follows_host(self, acceptor_config: ServerConfig):
        server = SocketServer(acceptor_config)
        thread = run_in_thread(server, lambda conn: None)
        try:
            assert server._socket.family == socket.AF_INET
        finally:
            server.shutdown()
            thread.join(5.0)
