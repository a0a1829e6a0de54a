import logging
from dataclasses import dataclass
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from rover import config
from rover.errors import LinkNotFound, MarkupParseError, NetworkError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkCandidate:
    href: str
    size: int = 0
    dark: bool = False


def parse_size(sizes: str | None) -> int:
    """Leading integer of a "WxH" sizes value, 0 when absent or unparsable."""
    if not sizes or "x" not in sizes.lower():
        return 0
    width = sizes.lower().split("x", 1)[0].strip()
    try:
        return int(width)
    except ValueError:
        return 0


def is_dark_media(media: str | None) -> bool:
    if not media:
        return False
    return "prefers-color-scheme:dark" in "".join(media.split()).lower()


def extract_link_candidates(html: str) -> list[LinkCandidate]:
    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as e:
        raise MarkupParseError(str(e)) from e

    icon_links = soup.find_all("link", rel=lambda v: v and "icon" in v.lower())
    return [
        LinkCandidate(
            href=link["href"],
            size=parse_size(link.get("sizes")),
            dark=is_dark_media(link.get("media")),
        )
        for link in icon_links
        if link.get("href")
    ]


def pick_icon(candidates: list[LinkCandidate], preferred_size: int) -> LinkCandidate:
    links = sorted((c for c in candidates if not c.dark), key=lambda c: c.size)
    if not links:
        raise LinkNotFound()

    # Any icon below the preferred size wins over scaling one up; the smallest
    # of them is taken, not the closest.
    smaller = [link for link in links if link.size < preferred_size]
    if smaller:
        return smaller[0]
    return links[-1]


def scrape_link_tags(session: requests.Session, url: str, preferred_size: int,
                     timeout: float = config.REQUEST_TIMEOUT) -> str:
    """Absolute URL of the best <link rel*="icon"> on the page at ``url``."""
    try:
        resp = session.get(url, timeout=timeout)
        html = resp.text
    except requests.RequestException as e:
        raise NetworkError(str(e)) from e

    icon = pick_icon(extract_link_candidates(html), preferred_size)
    logger.debug("Picked icon link %s (size %d) for %s", icon.href, icon.size, url)
    try:
        return urljoin(url, icon.href)
    except ValueError as e:
        raise LinkNotFound(f"invalid icon link {icon.href!r}: {e}") from e
