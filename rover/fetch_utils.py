import logging
from concurrent.futures import CancelledError, ThreadPoolExecutor
from urllib.parse import urljoin

import requests

from rover import config
from rover.errors import DecodeTaskError, FaviconError, NetworkError, UndecodableImage
from rover.http_utils import normalize_content_type
from rover.icon_utils import scrape_link_tags
from rover.image_utils import FaviconImage, ImageFormat, decode_image, decode_webp, sniff_format
from rover.svg_utils import render_svg

logger = logging.getLogger(__name__)


def build_executor(max_workers: int = config.DECODE_WORKERS) -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="rover-decode")


def run_offloaded(executor: ThreadPoolExecutor, fn, *args):
    """Run ``fn`` on the worker pool and wait for it.

    ``FaviconError`` raised by ``fn`` passes through; anything else that goes
    wrong with the task becomes ``DecodeTaskError``.
    """
    try:
        return executor.submit(fn, *args).result()
    except FaviconError:
        raise
    except (CancelledError, Exception) as e:
        logger.exception("Offloaded %s failed", getattr(fn, "__name__", fn))
        raise DecodeTaskError(f"decode task failed: {e}") from e


def fetch_for_url(session: requests.Session, executor: ThreadPoolExecutor, target_url: str,
                  size: int, timeout: float = config.REQUEST_TIMEOUT) -> FaviconImage:
    try:
        image_url = scrape_link_tags(session, target_url, size, timeout=timeout)
    except FaviconError as e:
        logger.debug("No icon link for %s (%s), trying /favicon.ico", target_url, e)
        image_url = urljoin(target_url, "/favicon.ico")

    try:
        resp = session.get(image_url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise NetworkError(str(e)) from e

    # SVGs are rendered straight to the size we want
    if normalize_content_type(resp.headers.get("Content-Type")) == "image/svg+xml":
        return run_offloaded(executor, render_svg, resp.text, size)

    body = resp.content
    pillow_format = sniff_format(body)
    if pillow_format is None:
        raise UndecodableImage()

    if ImageFormat.from_pillow(pillow_format) is ImageFormat.WEBP:
        return run_offloaded(executor, decode_webp, body)
    return run_offloaded(executor, decode_image, body)
