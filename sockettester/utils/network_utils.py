import logging
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

SCHEME_REWRITES = {"ws": "http", "wss": "https"}


def is_absolute_url(url: str) -> bool:
    """True if the URL declares a scheme and a host (and any port is valid)."""
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError for a malformed port
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc and parts.hostname)


def to_socketio_url(url: str) -> str:
    """Rewrite ws:// and wss:// URLs to the http(s) form python-socketio expects."""
    parts = urlsplit(url)
    scheme = SCHEME_REWRITES.get(parts.scheme.lower())
    if scheme is None:
        return url
    rewritten = parts._replace(scheme=scheme).geturl()
    logger.debug(f"Rewrote {url} to {rewritten}")
    return rewritten
