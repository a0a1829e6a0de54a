import io
import logging
import os
import sys
import threading
from pathlib import Path

import cairosvg
from PIL import Image, ImageFont

from rover.errors import UndecodableImage
from rover.image_utils import FaviconImage

logger = logging.getLogger(__name__)

FONT_SUFFIXES = {".ttf", ".otf", ".ttc"}
PREFERRED_FAMILIES = ("Arial", "Helvetica", "Liberation Sans", "DejaVu Sans", "Noto Sans")


def system_font_dirs() -> list[Path]:
    home = Path.home()
    if sys.platform == "win32":
        windir = os.environ.get("WINDIR", r"C:\Windows")
        return [Path(windir) / "Fonts", home / "AppData/Local/Microsoft/Windows/Fonts"]
    if sys.platform == "darwin":
        return [Path("/System/Library/Fonts"), Path("/Library/Fonts"), home / "Library/Fonts"]
    return [
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        home / ".fonts",
        home / ".local/share/fonts",
    ]


class FontDatabase:
    """Font families available to the rasterizer.

    Populated from the system font directories (and the working directory) the
    first time it is read, then never modified.
    """

    def __init__(self, font_dirs=None, include_cwd=True):
        self._font_dirs = list(font_dirs) if font_dirs is not None else system_font_dirs()
        self._include_cwd = include_cwd
        self._families = None
        self._lock = threading.Lock()

    @property
    def families(self) -> frozenset[str]:
        if self._families is None:
            with self._lock:
                if self._families is None:
                    self._families = frozenset(self._load())
                    logger.debug("Loaded %d font families", len(self._families))
        return self._families

    def _font_files(self):
        # os.walk skips directories it cannot read
        for font_dir in self._font_dirs:
            for root, _dirs, files in os.walk(font_dir):
                yield from (Path(root, f) for f in files if Path(f).suffix.lower() in FONT_SUFFIXES)
        if self._include_cwd:
            for entry in os.scandir(os.getcwd()):
                if entry.is_file() and Path(entry.name).suffix.lower() in FONT_SUFFIXES:
                    yield Path(entry.path)

    def _load(self):
        for path in self._font_files():
            try:
                family, _style = ImageFont.truetype(str(path), 12).getname()
            except (OSError, ValueError):
                logger.debug("Skipping unreadable font %s", path)
                continue
            if family:
                yield family

    def font_family(self, preferred=PREFERRED_FAMILIES) -> str:
        """CSS font-family list: the preferred families installed here, then sans-serif."""
        available = [family for family in preferred if family in self.families]
        return ", ".join([*available, "sans-serif"])


def render_svg(svg: str, size: int) -> FaviconImage:
    """Rasterise an svg document at ``size`` pixels to a formatless image.

    The canvas is scaled before drawing so edges are anti-aliased at the
    output resolution.
    """
    try:
        png = cairosvg.svg2png(bytestring=svg.encode("utf-8"),
                               output_width=size, output_height=size)
        with Image.open(io.BytesIO(png)) as img:
            data = img.convert("RGBA")
    except (ValueError, OSError, SyntaxError) as e:
        raise UndecodableImage(f"Failed to render svg: {e}") from e
    return FaviconImage(data)
