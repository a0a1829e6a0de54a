import io

from PIL import Image

from conftest import FakeResponse, html_page, image_bytes
from app import create_app, header_value


def open_image(data):
    return Image.open(io.BytesIO(data))


def test_index(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.get_data(as_text=True) == "Favicon Rover"


def test_serves_resolved_icon(client, fake_session):
    fake_session.routes.update({
        "http://example.com": FakeResponse(html_page('<link rel="icon" href="/i.png">')),
        "http://example.com/i.png": FakeResponse(image_bytes("PNG", size=(64, 64))),
    })

    resp = client.get("/example.com?size=32", headers={"Accept": "image/png"})

    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "image/png"
    assert resp.headers["Cache-Control"] == "max-age=604800"
    assert "X-Fallback" not in resp.headers
    assert open_image(resp.data).size == (32, 32)


def test_full_url_in_path(client, fake_session):
    fake_session.routes["https://example.com/favicon.ico"] = FakeResponse(image_bytes("ICO"))
    resp = client.get("/https://example.com", headers={"Accept": "image/gif"})
    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "image/gif"
    assert "X-Fallback" not in resp.headers
    assert fake_session.calls[0] == "https://example.com"


def test_fallback_headers_on_missing_icon(client):
    resp = client.get("/nowhere.example?size=48", headers={"Accept": "image/webp,image/png;q=0.5"})

    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "image/webp"
    assert resp.headers["X-Fallback"] == "true"
    assert "404" in resp.headers["X-Fallback-Reason"]
    assert resp.headers["Cache-Control"] == "max-age=604800"
    assert open_image(resp.data).size == (48, 48)


def test_default_size_and_format(client):
    resp = client.get("/nowhere.example")
    assert resp.headers["Content-Type"] == "image/webp"
    assert open_image(resp.data).size == (256, 256)


def test_bad_size_is_ignored(client):
    resp = client.get("/nowhere.example?size=-4", headers={"Accept": "image/png"})
    assert open_image(resp.data).size == (256, 256)


def test_invalid_target_is_degraded_not_rejected(client):
    resp = client.get("/not a host?size=16", headers={"Accept": "image/png"})
    assert resp.status_code == 200
    assert resp.headers["X-Fallback-Reason"] == "Provided URL is not a valid url"


def test_head_request(client):
    resp = client.head("/nowhere.example?size=16")
    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "image/webp"
    assert resp.data == b""


def test_wildcard_cors(client):
    resp = client.get("/", headers={"Origin": "https://anyone.example"})
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_cors_preflight(rover):
    client = create_app(origins=[r"/^https:\/\/.*\.example\.com$/"], rover=rover).test_client()

    resp = client.options("/example.com", headers={
        "Origin": "https://a.example.com",
        "Access-Control-Request-Method": "GET",
    })
    assert resp.headers["Access-Control-Allow-Origin"] == "https://a.example.com"
    assert resp.headers["Access-Control-Allow-Methods"] == "GET, HEAD, OPTIONS"
    assert "Origin" in resp.headers["Vary"]

    denied = client.options("/example.com", headers={"Origin": "https://evil.com"})
    assert "Access-Control-Allow-Origin" not in denied.headers


def test_exact_origin_list(rover):
    client = create_app(origins=["https://a.com", "https://b.com"], rover=rover).test_client()
    assert client.get("/", headers={"Origin": "https://b.com"}).headers["Access-Control-Allow-Origin"] == "https://b.com"
    assert "Access-Control-Allow-Origin" not in client.get("/", headers={"Origin": "https://c.com"}).headers


def test_unsupported_format_is_a_server_error(rover):
    from rover.image_utils import ImageFormat
    from rover.negotiate_utils import FormatNegotiator

    negotiator = FormatNegotiator(formats=(ImageFormat.SVG,), default=ImageFormat.SVG)
    client = create_app(rover=rover, negotiator=negotiator).test_client()
    resp = client.get("/not a host")
    assert resp.status_code == 500
    assert "Unsupported image format" in resp.get_data(as_text=True)


def test_header_value_is_single_latin1_line():
    assert header_value("bad\r\nthing") == "bad thing"
    assert header_value("naïve ☃") == "naïve ?"


def test_wsgi_entry_builds_app():
    import wsgi

    assert wsgi.app.name == "app"
    assert wsgi.app.url_map.bind("localhost").match("/example.com")[0] == "get_favicon"
