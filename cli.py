import logging
import sys
from pathlib import Path

import click
from gunicorn.app.base import BaseApplication

from app import create_app
from rover import config
from rover.errors import UnsupportedOutputFormat
from rover.favicon import FaviconRover
from rover.http_utils import parse_target_url
from rover.image_utils import ImageFormat
from rover.negotiate_utils import DEFAULT_IMAGE_FORMAT

CLI_FORMATS = ("png", "jpeg", "webp", "bmp", "ico", "gif", "tiff")


class GunicornServer(BaseApplication):
    def __init__(self, application, options=None):
        self.application = application
        self.options = options or {}
        super().__init__()

    def load_config(self):
        for key, value in self.options.items():
            if key in self.cfg.settings and value is not None:
                self.cfg.set(key.lower(), value)

    def load(self):
        return self.application


def output_format(image_format, out):
    """--format wins over the --out extension; neither means the default."""
    if image_format:
        return ImageFormat.from_name(image_format)
    if out is not None:
        fmt = ImageFormat.from_path(out)
        if fmt is not None:
            return fmt
    return DEFAULT_IMAGE_FORMAT


@click.group()
@click.option("--log-level", default="WARNING", show_default=True,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
def cli(log_level):
    """Fetch favicons for any website, or serve them over HTTP."""
    logging.basicConfig(
        level=log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("url")
@click.option("-s", "--size", type=click.IntRange(min=1), help="Square pixel size of the favicon")
@click.option("-o", "--out", type=click.Path(dir_okay=False, path_type=Path),
              help="Path to save the favicon to instead of stdout")
@click.option("-f", "--format", "image_format", type=click.Choice(CLI_FORMATS, case_sensitive=False),
              help="Image format to save as (overrides the --out extension)")
def get(url, size, out, image_format):
    """Fetch the favicon for URL."""
    target = parse_target_url(url)
    if target is None:
        raise click.BadParameter(f"{url!r} is not a valid url", param_hint="URL")

    try:
        rover = FaviconRover()
    except Exception as e:
        raise click.ClickException(f"could not set up the favicon pipeline: {e}") from e

    with rover:
        favicon = rover.fetch(target, size)

    try:
        data = favicon.encode(output_format(image_format, out))
    except UnsupportedOutputFormat as e:
        raise click.ClickException(str(e)) from e

    if out is not None:
        out.write_bytes(data)
    else:
        stdout = click.get_binary_stream("stdout")
        stdout.write(data)
        stdout.flush()


@cli.command()
@click.option("--host", default=config.HOST, show_default=True, help="Interface to bind")
@click.option("-p", "--port", default=config.PORT, show_default=True, type=int)
@click.option("-o", "--origin", "origins", multiple=True, default=tuple(config.CORS_ORIGINS),
              show_default=True, help="Origin or /regex/ allowed by CORS (repeatable)")
def serve(host, port, origins):
    """Start the favicon web server."""
    try:
        application = create_app(origins=list(origins))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--origin") from e

    GunicornServer(application, {
        "bind": f"{host}:{port}",
        "workers": config.WORKERS,
        "worker_class": "gthread",
        "threads": config.THREADS,
        "timeout": 60,
        "graceful_timeout": 30,
        "keepalive": 5,
        "accesslog": "-",
        "loglevel": config.LOG_LEVEL.lower(),
    }).run()


def main():
    cli()


if __name__ == "__main__":
    main()
