"""Resolving a favicon for a target, degrading to a placeholder on failure.

``FaviconRover`` owns the long-lived pieces (HTTP session, decode pool, font
database) and is built once per process; each ``fetch`` call is independent.
A failure anywhere between link scraping and decoding never reaches the
caller: it is recorded on the returned ``Favicon`` next to a synthesized
image.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from rover import config
from rover.errors import DecodeTaskError, FaviconError, InvalidTargetUrl
from rover.fallback_utils import generate_fallback
from rover.fetch_utils import build_executor, fetch_for_url, run_offloaded
from rover.http_utils import build_session, display_name, parse_target_url
from rover.image_utils import FaviconImage, ImageFormat
from rover.svg_utils import FontDatabase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Favicon:
    """Either a real icon, or a placeholder plus the error that caused it."""

    image: FaviconImage
    error: FaviconError | None = None

    @property
    def is_fallback(self) -> bool:
        return self.error is not None

    @property
    def fallback_reason(self) -> str | None:
        return str(self.error) if self.error is not None else None

    def resize(self, size: int) -> Favicon:
        return replace(self, image=self.image.resize(size))

    def reformat(self, fmt: ImageFormat) -> Favicon:
        return replace(self, image=self.image.reformat(fmt))

    def encode(self, fmt: ImageFormat | None = None) -> bytes:
        return self.image.encode(fmt)


class FaviconRover:
    def __init__(self, session=None, executor=None, fonts=None,
                 timeout: float = config.REQUEST_TIMEOUT):
        self.session = session if session is not None else build_session()
        self.executor = executor if executor is not None else build_executor()
        self.fonts = fonts if fonts is not None else FontDatabase()
        self.timeout = timeout

    def fetch(self, target: str, size: int | None = None) -> Favicon:
        """Favicon for ``target`` (a URL or bare host), resized when ``size`` is given."""
        target_url = parse_target_url(target)
        if target_url is None:
            return self.fallback(target, size, InvalidTargetUrl())

        try:
            image = fetch_for_url(self.session, self.executor, target_url,
                                  size or config.DEFAULT_IMAGE_SIZE, timeout=self.timeout)
        except FaviconError as e:
            return self.fallback(display_name(target_url), size, e)

        favicon = Favicon(image)
        if size:
            favicon = favicon.resize(size)
        return favicon

    def fallback(self, name: str, size: int | None, error: FaviconError) -> Favicon:
        logger.info("Using fallback for %r: %s (%s)", name, error, error.code)
        size = size or config.DEFAULT_IMAGE_SIZE
        try:
            image = run_offloaded(self.executor, generate_fallback, name, size, self.fonts)
        except DecodeTaskError:
            # the pool is gone; draw it here instead
            image = generate_fallback(name, size, self.fonts)
        return Favicon(image, error)

    def close(self):
        self.executor.shutdown(wait=False, cancel_futures=True)
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
