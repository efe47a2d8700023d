"""Helper utility tests."""

from roadserver_core.utils.helpers import (
    encode_url,
    normalize_path,
    parse_content_type,
    strip_prefix,
    with_charset,
)


class TestContentType:
    """Test Content-Type helpers."""

    def test_parse_content_type(self):
        """Test media type and parameters."""
        media_type, params = parse_content_type('Text/HTML; Charset="UTF-8"')
        assert media_type == "text/html"
        assert params == {"charset": "UTF-8"}

    def test_with_charset(self):
        """Test default charsets."""
        assert with_charset("text/plain") == "text/plain; charset=utf-8"
        assert with_charset("application/json") == "application/json; charset=utf-8"
        assert with_charset("image/png") == "image/png"
        assert with_charset("text/plain; charset=ascii") == "text/plain; charset=ascii"


class TestPaths:
    """Test path helpers."""

    def test_strip_prefix(self):
        """Test prefix removal keeps the query."""
        assert strip_prefix("/cat/42?x=1", "/cat") == "/42?x=1"
        assert strip_prefix("/cat", "/cat") == "/"
        assert strip_prefix("/cat/42", "/") == "/cat/42"
        assert strip_prefix("/cat/42", "/cat/") == "/42"

    def test_strip_prefix_absolute_form(self):
        """Test only the path of an absolute URL is rewritten."""
        assert strip_prefix("http://localhost/cat/42?x=1", "/cat") == "http://localhost/42?x=1"
        assert strip_prefix("http://localhost/cat", "/cat") == "http://localhost/"

    def test_normalize_path(self):
        """Test leading slashes."""
        assert normalize_path("") == "/"
        assert normalize_path("42") == "/42"
        assert normalize_path("//42") == "/42"

    def test_encode_url(self):
        """Test URL encoding."""
        assert encode_url("/a b") == "/a%20b"
        assert encode_url("/a%20b?x=1&y=2") == "/a%20b?x=1&y=2"
        assert encode_url("http://example.com/ü") == "http://example.com/%C3%BC"
