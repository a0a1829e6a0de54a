from xml.sax.saxutils import escape

from rover.image_utils import FaviconImage
from rover.svg_utils import FontDatabase, render_svg

BACKGROUND = "#666666"
FOREGROUND = "#FFFFFF"

FALLBACK_SVG = """<svg viewBox="0 0 256 256" width="256" height="256" xmlns="http://www.w3.org/2000/svg">
    <rect width="100%" height="100%" fill="{background}" />
    <text x="50%" y="58%" font-family="{font_family}" font-size="200" fill="{foreground}" dominant-baseline="middle" text-anchor="middle">{glyph}</text>
</svg>"""


def fallback_glyph(name: str) -> str:
    glyph = (name or "").strip()[:1] or "?"
    return glyph.upper() if glyph.isascii() else glyph


def fallback_svg(name: str, font_family: str = "sans-serif") -> str:
    return FALLBACK_SVG.format(
        background=BACKGROUND,
        foreground=FOREGROUND,
        font_family=escape(font_family, {'"': "&quot;"}),
        glyph=escape(fallback_glyph(name)),
    )


def generate_fallback(name: str, size: int, fonts: FontDatabase | None = None) -> FaviconImage:
    """Placeholder icon: the first letter of ``name`` on a grey square."""
    font_family = fonts.font_family() if fonts is not None else "sans-serif"
    return render_svg(fallback_svg(name, font_family), size)
