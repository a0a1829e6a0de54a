import pytest

from rover.http_utils import HEADERS, build_session, display_name, normalize_content_type, parse_target_url


@pytest.mark.parametrize("value,expected", [
    ("https://example.com", "https://example.com"),
    ("http://example.com/path?q=1", "http://example.com/path?q=1"),
    ("example.com", "http://example.com"),
    ("localhost:8080", "http://localhost:8080"),
    ("127.0.0.1", "http://127.0.0.1"),
    ("  github.com ", "http://github.com"),
    ("", None),
    ("not a host", None),
    ("example.com:notaport", None),
])
def test_parse_target_url(value, expected):
    assert parse_target_url(value) == expected


def test_display_name():
    assert display_name("https://www.Example.com/a") == "www.example.com"
    assert display_name("http://blog.example.com") == "blog.example.com"
    assert display_name("http://") == ""


def test_normalize_content_type():
    assert normalize_content_type("Image/SVG+XML; charset=utf-8") == "image/svg+xml"
    assert normalize_content_type(None) == ""


def test_build_session_uses_browser_headers():
    session = build_session(pool_size=3)
    try:
        assert session.headers["User-Agent"] == HEADERS["User-Agent"]
        assert "Mozilla/5.0" in session.headers["User-Agent"]
        assert session.get_adapter("https://example.com")._pool_maxsize == 3
    finally:
        session.close()
