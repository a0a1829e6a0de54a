import logging

from flask import Flask, request, make_response

from rover import config
from rover.cors_utils import ALLOWED_METHODS, CorsOrigins
from rover.errors import UnsupportedOutputFormat
from rover.favicon import FaviconRover
from rover.negotiate_utils import FormatNegotiator


def header_value(text: str) -> str:
    # header values must be a single latin-1 line
    text = " ".join(str(text).split())
    return text.encode("latin-1", "replace").decode("latin-1")


def setup_logging(app):
    gunicorn_logger = logging.getLogger("gunicorn.error")
    if gunicorn_logger.handlers:
        app.logger.handlers = gunicorn_logger.handlers
        app.logger.setLevel(gunicorn_logger.level)
        logging.getLogger("rover").handlers = gunicorn_logger.handlers
        logging.getLogger("rover").setLevel(gunicorn_logger.level)
    else:
        app.logger.setLevel(config.LOG_LEVEL)


def create_app(origins=None, rover=None, negotiator=None):
    app = Flask(__name__)
    setup_logging(app)

    cors = CorsOrigins(origins if origins is not None else config.CORS_ORIGINS)
    rover = rover or FaviconRover()
    negotiator = negotiator or FormatNegotiator()

    @app.get("/")
    def index():
        return "Favicon Rover"

    @app.get("/<path:target>", merge_slashes=False)
    def get_favicon(target):
        app.logger.info("Get favicon for %r", target)
        size = request.args.get("size", type=int)
        if size is not None and size < 1:
            size = None

        fmt = negotiator.negotiate(request.headers.get("Accept"))
        favicon = rover.fetch(target, size or config.DEFAULT_IMAGE_SIZE).reformat(fmt)

        resp = make_response(favicon.encode())
        resp.headers["Content-Type"] = fmt.mime_type
        resp.headers["Cache-Control"] = f"max-age={config.CACHE_MAX_AGE}"
        if favicon.is_fallback:
            resp.headers["X-Fallback"] = "true"
            resp.headers["X-Fallback-Reason"] = header_value(favicon.fallback_reason)
        return resp

    @app.errorhandler(UnsupportedOutputFormat)
    def unsupported_format(e):
        app.logger.error("Cannot encode favicon: %s", e)
        return str(e), 500

    @app.after_request
    def apply_cors(resp):
        origin = request.headers.get("Origin")
        allow = cors.allow_origin_header(origin)
        if origin is None or allow is None:
            return resp
        resp.headers["Access-Control-Allow-Origin"] = allow
        if not cors.allow_any:
            resp.vary.add("Origin")
        if request.method == "OPTIONS":
            resp.headers["Access-Control-Allow-Methods"] = ", ".join(ALLOWED_METHODS)
            resp.headers["Access-Control-Allow-Headers"] = "*"
        return resp

    return app


if __name__ == "__main__":
    create_app().run(debug=True, host=config.HOST, port=config.PORT)
