"""
Unit tests for the WebDAV transfer session.

Requests are answered by an httpx.MockTransport that records them.
"""

import httpx
import pytest

from report_delivery.core.exceptions import ConnectionError, TransferError
from report_delivery.models.config import Protocol, SessionOptions
from report_delivery.transfer.methods.webdav import WebDavSession


class FakeDavServer:
    """Minimal WebDAV server state behind a MockTransport."""

    def __init__(self, collections=("/",), propfind_status=207):
        self.collections = set(collections)
        self.files = {}
        self.requests = []
        self.propfind_status = propfind_status

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "PROPFIND":
            return httpx.Response(self.propfind_status)
        if request.method == "MKCOL":
            if path in self.collections:
                return httpx.Response(405)
            self.collections.add(path)
            return httpx.Response(201)
        if request.method == "HEAD":
            return httpx.Response(200 if path in self.files else 404)
        if request.method == "PUT":
            self.files[path] = request.content
            return httpx.Response(201)
        return httpx.Response(400)


def _session(server, **values) -> WebDavSession:
    values.setdefault('protocol', Protocol.WEBDAV)
    values.setdefault('host_name', 'dav.example.com')
    values.setdefault('port_number', 8080)
    values.setdefault('user_name', 'reports')
    values.setdefault('password', 's3cret')
    return WebDavSession(SessionOptions(**values), transport=httpx.MockTransport(server))


class TestWebDavConnection:
    """Test opening WebDAV sessions."""

    def test_open_checks_server(self):
        server = FakeDavServer()

        session = _session(server).open()

        request = server.requests[0]
        assert request.method == "PROPFIND"
        assert request.headers['Depth'] == "0"
        assert request.headers['Authorization'].startswith("Basic ")
        assert str(request.url) == "http://dav.example.com:8080/"
        assert session.is_open

    def test_secure_url(self):
        session = _session(FakeDavServer(), webdav_secure=True, port_number=443)
        assert session.base_url == "https://dav.example.com:443"

    def test_anonymous(self):
        server = FakeDavServer()

        _session(server, user_name='', password='').open()

        assert 'Authorization' not in server.requests[0].headers

    def test_rejected_login(self):
        session = _session(FakeDavServer(propfind_status=401))

        with pytest.raises(ConnectionError) as exc_info:
            session.open()

        assert "Unable to connect to 'dav.example.com:8080'" in str(exc_info.value)
        assert not session.is_open

    def test_close(self):
        session = _session(FakeDavServer()).open()

        session.close()

        assert not session.is_open


class TestWebDavUpload:
    """Test WebDAV file operations."""

    def test_upload_creates_collections(self, result_file):
        server = FakeDavServer(collections=("/", "/reports/"))

        with _session(server).open() as session:
            result = session.put_file(result_file, "/reports/daily/Sales Report.html")

        assert server.files["/reports/daily/Sales Report.html"] == result_file.read_bytes()
        assert "/reports/daily/" in server.collections
        assert result.bytes_transferred == len(result_file.read_bytes())
        put = [r for r in server.requests if r.method == "PUT"][0]
        assert put.url.raw_path == b"/reports/daily/Sales%20Report.html"

    def test_binary_content_type(self, tmp_path):
        source = tmp_path / "report.pdf"
        source.write_bytes(b"%PDF-1.7")
        server = FakeDavServer()

        with _session(server).open() as session:
            session.put_file(source, "/report.pdf")

        put = [r for r in server.requests if r.method == "PUT"][0]
        assert put.headers['Content-Type'] == "application/octet-stream"

    def test_mkcol_failure(self):
        def forbidden(request):
            if request.method == "MKCOL":
                return httpx.Response(403)
            return httpx.Response(207)

        with _session(forbidden).open() as session:
            with pytest.raises(TransferError) as exc_info:
                session.make_directories("/reports")

        assert "HTTP 403" in str(exc_info.value)

    def test_exists(self, result_file):
        server = FakeDavServer()

        with _session(server).open() as session:
            assert not session.exists("/report.html")
            session.put_file(result_file, "/report.html")
            assert session.exists("/report.html")

    def test_server_error_on_put(self, result_file):
        def failing(request):
            if request.method == "PUT":
                return httpx.Response(507)
            return httpx.Response(207)

        with _session(failing).open() as session:
            with pytest.raises(TransferError) as exc_info:
                session.put_file(result_file, "/report.html")

        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
