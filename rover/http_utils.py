import re
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter

from rover import config

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 6.1) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/41.0.2228.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/*,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

_HOSTNAME_RE = re.compile(r"^(\[[0-9a-fA-F:.]+\]|[A-Za-z0-9_.-]+)$")


def build_session(pool_size: int = config.POOL_SIZE) -> requests.Session:
    """One pooled session, shared by every fetch for the life of the process."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update(HEADERS)
    return session


def normalize_content_type(value: str | None) -> str:
    return (value or "").split(";", 1)[0].strip().lower()


def _is_valid(url: str) -> bool:
    p = urlparse(url)
    if p.scheme not in ("http", "https") or not p.netloc:
        return False
    try:
        p.port
    except ValueError:
        return False
    host = p.netloc.rsplit("@", 1)[-1]
    if ":" in host and not host.startswith("["):
        host = host.rsplit(":", 1)[0]
    elif host.startswith("[") and "]:" in host:
        host = host.rsplit(":", 1)[0]
    return bool(host) and bool(_HOSTNAME_RE.match(host))


def parse_target_url(value: str) -> str | None:
    """Full URL as given, or a bare host completed with http://; None if neither parses."""
    value = (value or "").strip()
    if not value:
        return None
    if _is_valid(value):
        return value
    candidate = "http://" + value
    if _is_valid(candidate):
        return candidate
    return None


def display_name(url: str) -> str:
    return (urlparse(url).hostname or "").lower()
