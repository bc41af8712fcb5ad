"""
pytest configuration and fixtures.
"""

import logging
import http.client

import pytest

from rangeserver import ServerConfig, WebServer


INDEX_HTML = b"<html>\n"  # 7 bytes
REPORT_SIZE = 123456


@pytest.fixture
def site_dir(tmp_path):
    """Directory with an index page and a nested file."""
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "docs").mkdir()
    (root / "docs" / "notes.txt").write_bytes(b"0123456789abcdef")
    return root


@pytest.fixture
def report_file(tmp_path):
    """A single 123456 byte file to serve."""
    path = tmp_path / "report.pdf"
    path.write_bytes(bytes(i % 251 for i in range(REPORT_SIZE)))
    return path


@pytest.fixture
def make_server(caplog):
    """
    Factory starting a WebServer for a path on a free local port.

    Servers are shut down at teardown; call ``shutdown()`` earlier to make
    sure every access log line has been written.
    """
    caplog.set_level(logging.INFO)
    servers = []

    def factory(path, **kwargs):
        config = ServerConfig(listen="127.0.0.1:0", path=str(path), max_threads=8, **kwargs)
        server = WebServer(config)
        assert server.start()
        servers.append(server)
        return server

    yield factory

    for server in servers:
        server.shutdown()


class Client:
    """Minimal HTTP client bound to one server."""

    def __init__(self, server):
        self.host, self.port = server.address

    def request(self, method, path, headers=None):
        conn = http.client.HTTPConnection(self.host, self.port, timeout=5)
        try:
            conn.request(method, path, headers=headers or {})
            response = conn.getresponse()
            body = response.read()
            return response, body
        finally:
            conn.close()

    def get(self, path, headers=None):
        return self.request("GET", path, headers)


@pytest.fixture
def client():
    """Build a Client for a running server."""
    return Client


@pytest.fixture
def log_messages(caplog):
    """Messages emitted by one logger, in order."""
    def collect(logger_name):
        return [r.getMessage() for r in caplog.records if r.name == logger_name]
    return collect
