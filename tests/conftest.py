"""Shared fixtures: a fake HTTP session and a Flask app wired to it."""

import io

import pytest
import requests
from PIL import Image

from rover.fetch_utils import build_executor
from rover.favicon import FaviconRover
from rover.svg_utils import FontDatabase


class FakeResponse:
    def __init__(self, body=b"", status_code=200, headers=None, url=None):
        self.content = body.encode() if isinstance(body, str) else body
        self.status_code = status_code
        self.headers = headers or {}
        self.url = url

    @property
    def text(self):
        return self.content.decode("utf-8", "replace")

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error for url: {self.url}")


class FakeSession:
    """Stands in for requests.Session; unknown URLs answer 404."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None, **kwargs):
        self.calls.append(url)
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return FakeResponse(b"<html>not found</html>", 404, {"Content-Type": "text/html"}, url)
        route.url = url
        return route

    def close(self):
        self.closed = True


def image_bytes(fmt="PNG", size=(32, 32), mode="RGBA", color=(200, 30, 30, 255)):
    if mode == "RGB" and len(color) == 4:
        color = color[:3]
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


def html_page(*links):
    return "<html><head><title>t</title>" + "".join(links) + "</head><body></body></html>"


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def rover(fake_session):
    executor = build_executor(max_workers=2)
    rover = FaviconRover(session=fake_session, executor=executor,
                         fonts=FontDatabase(font_dirs=[], include_cwd=False))
    yield rover
    executor.shutdown(wait=True)


@pytest.fixture
def app(rover):
    from app import create_app

    app = create_app(origins=["*"], rover=rover)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
