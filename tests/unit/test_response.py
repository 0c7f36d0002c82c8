"""
Unit tests for HTTP response building.
"""

from promdoc.http.response import (
    HTTPResponse,
    ResponseBuilder,
    HTTPStatus,
    ok,
    not_found,
    not_implemented,
    internal_error,
    error_response,
    format_http_date,
)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.1 200 OK"

        response = HTTPResponse(status=HTTPStatus.NOT_IMPLEMENTED)
        assert response.status_line == "HTTP/1.1 501 Not Implemented"

    def test_to_bytes_includes_headers(self):
        """Test that to_bytes includes all headers."""
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"X-Custom": "value"},
            body=b"test",
        )

        result = response.to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert b"Server: promdoc\r\n" in result
        assert b"Date: " in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_to_bytes_sets_content_length(self):
        """Test that Content-Length is auto-set."""
        response = HTTPResponse(body=b"hello world")
        result = response.to_bytes()

        assert b"Content-Length: 11\r\n" in result

    def test_empty_body_has_zero_content_length(self):
        result = HTTPResponse(status=HTTPStatus.NOT_FOUND).to_bytes()

        assert b"Content-Length: 0\r\n" in result
        assert result.endswith(b"\r\n\r\n")

    def test_headers_only(self):
        """HEAD: full Content-Length, no body bytes."""
        response = HTTPResponse(body=b"<html></html>")
        result = response.to_bytes(include_body=False)

        assert b"Content-Length: 13\r\n" in result
        assert result.endswith(b"\r\n\r\n")
        assert b"<html>" not in result

    def test_server_name(self):
        result = HTTPResponse().to_bytes(server_name="promdoc-test")

        assert b"Server: promdoc-test\r\n" in result

    def test_no_content_type_unless_set(self):
        response = HTTPResponse(body=b"OK")

        assert "Content-Type" not in response.headers
        assert b"Content-Type" not in response.to_bytes()


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        """Test setting status code."""
        response = ResponseBuilder().status(HTTPStatus.NOT_IMPLEMENTED).build()
        assert response.status == HTTPStatus.NOT_IMPLEMENTED

    def test_body_leaves_content_type_alone(self):
        response = ResponseBuilder().body("OK").build()

        assert response.body == b"OK"
        assert "Content-Type" not in response.headers

    def test_bytes_body_is_kept_as_is(self):
        response = ResponseBuilder().body(b"\x00\xff").build()

        assert response.body == b"\x00\xff"

    def test_content_type(self):
        response = ResponseBuilder().content_type("text/javascript; charset=utf-8").build()

        assert response.headers["Content-Type"] == "text/javascript; charset=utf-8"

    def test_close_connection(self):
        """Test connection close header."""
        response = ResponseBuilder().close_connection().build()
        assert response.headers["Connection"] == "close"

    def test_method_chaining(self):
        """Test fluent API chaining."""
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .header("X-Custom", "value")
            .content_type("application/json; charset=utf-8")
            .body(b'{"key":"value"}')
            .build())

        assert response.status == HTTPStatus.OK
        assert response.headers["X-Custom"] == "value"
        assert response.body == b'{"key":"value"}'


class TestConvenienceFunctions:
    """Tests for convenience response functions."""

    def test_ok(self):
        """ok() sets no Content-Type unless asked to."""
        response = ok("OK")
        assert response.status == HTTPStatus.OK
        assert response.body == b"OK"
        assert "Content-Type" not in response.headers

        response = ok(b"{}", content_type="application/json; charset=utf-8")
        assert response.headers["Content-Type"] == "application/json; charset=utf-8"

    def test_not_found(self):
        response = not_found()
        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""
        assert "Content-Type" not in response.headers

    def test_not_implemented(self):
        response = not_implemented()
        assert response.status == HTTPStatus.NOT_IMPLEMENTED
        assert response.body == b""

    def test_internal_error(self):
        """Test internal_error() function."""
        response = internal_error()
        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b""

        response = internal_error("Out of range float values are not JSON compliant")
        assert response.body == b"Out of range float values are not JSON compliant"
        assert "Content-Type" not in response.headers

    def test_error_response(self):
        response = error_response(HTTPStatus.REQUEST_TIMEOUT)

        assert response.status == HTTPStatus.REQUEST_TIMEOUT
        assert response.body == b""
        assert response.headers["Connection"] == "close"


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        """Test that all statuses have phrases."""
        for status in HTTPStatus:
            assert status.phrase != "Unknown"

        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.HTTP_VERSION_NOT_SUPPORTED.phrase == "HTTP Version Not Supported"

    def test_int_comparison(self):
        assert HTTPStatus.NOT_IMPLEMENTED == 501
        assert HTTPStatus(408) is HTTPStatus.REQUEST_TIMEOUT


class TestFormatHTTPDate:
    """Tests for HTTP date formatting."""

    def test_format(self):
        """Test HTTP date format."""
        from datetime import datetime, timezone

        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)

        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"
