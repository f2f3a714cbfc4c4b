"""Tests for URL helpers."""
import pytest

from sockettester.core.controller import validate_url
from sockettester.core.exceptions import ValidationError
from sockettester.utils.network_utils import is_absolute_url, to_socketio_url


@pytest.mark.parametrize("url", [
    "http://localhost:3000",
    "https://example.com/socket",
    "ws://127.0.0.1:8080",
    "wss://example.com",
])
def test_absolute_urls(url):
    assert is_absolute_url(url)


@pytest.mark.parametrize("url", [
    "",
    "localhost:3000",
    "/socket.io",
    "http://",
    "http://host:notaport",
])
def test_non_absolute_urls(url):
    assert not is_absolute_url(url)


def test_to_socketio_url_rewrites_websocket_schemes():
    assert to_socketio_url("ws://localhost:3000/path?x=1") == "http://localhost:3000/path?x=1"
    assert to_socketio_url("wss://example.com") == "https://example.com"
    assert to_socketio_url("http://localhost:3000") == "http://localhost:3000"


def test_validate_url_strips_whitespace():
    assert validate_url("  http://localhost:3000 ") == "http://localhost:3000"


def test_validate_url_errors_name_the_field():
    with pytest.raises(ValidationError) as exc_info:
        validate_url("")
    assert exc_info.value.field == "url"
