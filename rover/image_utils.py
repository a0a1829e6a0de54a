"""Canonical favicon image: decoding, resizing and encoding.

Everything here is plain value-to-value work on Pillow images; the network
side lives in ``fetch_utils`` and the CPU-heavy calls are handed to a worker
pool by the caller.
"""
from __future__ import annotations

import io
import os
from dataclasses import dataclass, replace
from enum import Enum

from PIL import Image, ImageOps, UnidentifiedImageError, features

from rover.errors import UndecodableImage, UnsupportedOutputFormat

WEBP_QUALITY = 70


class ImageFormat(Enum):
    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    WEBP = "webp"
    PNM = "pnm"
    TIFF = "tiff"
    TGA = "tga"
    BMP = "bmp"
    ICO = "ico"
    SVG = "svg"

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]

    @classmethod
    def from_name(cls, name: str | None) -> ImageFormat | None:
        if not name:
            return None
        name = name.strip().lower()
        if name == "jpg":
            name = "jpeg"
        try:
            return cls(name)
        except ValueError:
            return None

    @classmethod
    def from_mime_type(cls, mime_type: str | None) -> ImageFormat | None:
        mime_type = (mime_type or "").split(";", 1)[0].strip().lower()
        for fmt, mime in _MIME_TYPES.items():
            if mime == mime_type:
                return fmt
        return _MIME_ALIASES.get(mime_type)

    @classmethod
    def from_path(cls, path) -> ImageFormat | None:
        ext = os.path.splitext(str(path))[1].lower().lstrip(".")
        return _EXTENSIONS.get(ext)

    @classmethod
    def from_pillow(cls, pillow_format: str | None) -> ImageFormat | None:
        return _PILLOW_FORMATS.get((pillow_format or "").upper())


_MIME_TYPES = {
    ImageFormat.PNG: "image/png",
    ImageFormat.JPEG: "image/jpeg",
    ImageFormat.GIF: "image/gif",
    ImageFormat.WEBP: "image/webp",
    ImageFormat.PNM: "image/x-portable-anymap",
    ImageFormat.TIFF: "image/tiff",
    ImageFormat.TGA: "image/x-tga",
    ImageFormat.BMP: "image/bmp",
    ImageFormat.ICO: "image/x-icon",
    ImageFormat.SVG: "image/svg+xml",
}

_MIME_ALIASES = {
    "image/jpg": ImageFormat.JPEG,
    "image/vnd.microsoft.icon": ImageFormat.ICO,
    "image/x-portable-pixmap": ImageFormat.PNM,
}

_EXTENSIONS = {
    "png": ImageFormat.PNG,
    "jpg": ImageFormat.JPEG,
    "jpeg": ImageFormat.JPEG,
    "gif": ImageFormat.GIF,
    "webp": ImageFormat.WEBP,
    "pnm": ImageFormat.PNM,
    "ppm": ImageFormat.PNM,
    "pgm": ImageFormat.PNM,
    "pbm": ImageFormat.PNM,
    "tif": ImageFormat.TIFF,
    "tiff": ImageFormat.TIFF,
    "tga": ImageFormat.TGA,
    "bmp": ImageFormat.BMP,
    "ico": ImageFormat.ICO,
    "svg": ImageFormat.SVG,
}

_PILLOW_FORMATS = {
    "PNG": ImageFormat.PNG,
    "JPEG": ImageFormat.JPEG,
    "MPO": ImageFormat.JPEG,
    "GIF": ImageFormat.GIF,
    "WEBP": ImageFormat.WEBP,
    "PPM": ImageFormat.PNM,
    "TIFF": ImageFormat.TIFF,
    "TGA": ImageFormat.TGA,
    "BMP": ImageFormat.BMP,
    "ICO": ImageFormat.ICO,
}

# Pillow writer, pixel modes it accepts as-is, mode to convert anything else to.
# WebP and SVG are absent on purpose: WebP has its own path, SVG has no writer.
_WRITERS = {
    ImageFormat.PNG: ("PNG", {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}, "RGBA"),
    ImageFormat.JPEG: ("JPEG", {"L", "RGB", "CMYK"}, "RGB"),
    ImageFormat.GIF: ("GIF", {"L", "P", "RGB", "RGBA"}, "RGBA"),
    ImageFormat.PNM: ("PPM", {"1", "L", "RGB"}, "RGB"),
    ImageFormat.TIFF: ("TIFF", {"1", "L", "LA", "P", "RGB", "RGBA", "CMYK"}, "RGBA"),
    ImageFormat.TGA: ("TGA", {"L", "LA", "P", "RGB", "RGBA"}, "RGBA"),
    ImageFormat.BMP: ("BMP", {"1", "L", "P", "RGB"}, "RGB"),
    ImageFormat.ICO: ("ICO", {"RGBA"}, "RGBA"),
}

_RESAMPLE_MODES = {"L", "LA", "RGB", "RGBA"}

# ICO entries cannot exceed 256px.
_ICO_MAX = 256

_DECODE_ERRORS = (UnidentifiedImageError, OSError, ValueError, SyntaxError,
                  Image.DecompressionBombError)


@dataclass(frozen=True)
class FaviconImage:
    data: Image.Image
    format: ImageFormat | None = None

    def __post_init__(self):
        width, height = self.data.size
        if width <= 0 or height <= 0:
            raise ValueError(f"image dimensions must be positive, got {width}x{height}")

    @property
    def size(self) -> tuple[int, int]:
        return self.data.size

    def resize(self, size: int) -> FaviconImage:
        """Scale and crop to exactly ``size`` x ``size`` without distortion."""
        data = self.data
        # Pillow falls back to nearest-neighbour for palette and bilevel images
        if data.mode not in _RESAMPLE_MODES:
            data = data.convert("RGBA")
        data = ImageOps.fit(data, (size, size), method=Image.Resampling.LANCZOS)
        return replace(self, data=data)

    def reformat(self, fmt: ImageFormat) -> FaviconImage:
        return replace(self, format=fmt)

    def encode(self, fmt: ImageFormat | None = None) -> bytes:
        fmt = fmt or self.format
        if fmt is ImageFormat.WEBP:
            return self._encode_webp()

        if fmt not in _WRITERS:
            raise UnsupportedOutputFormat()
        pillow_format, modes, fallback_mode = _WRITERS[fmt]
        data = self.data if self.data.mode in modes else self.data.convert(fallback_mode)

        params = {}
        if fmt is ImageFormat.ICO:
            width, height = data.size
            if width > _ICO_MAX or height > _ICO_MAX:
                raise UnsupportedOutputFormat(
                    f"Unsupported image format: ico is limited to {_ICO_MAX}px, got {width}x{height}")
            params["sizes"] = [data.size]

        buf = io.BytesIO()
        try:
            data.save(buf, format=pillow_format, **params)
        except KeyError as e:
            raise UnsupportedOutputFormat(f"Unsupported image format: {e}") from e
        return buf.getvalue()

    def _encode_webp(self) -> bytes:
        if not features.check("webp"):
            raise UnsupportedOutputFormat("Unsupported image format: webp support missing")
        data = self.data
        if data.mode not in ("RGB", "RGBA"):
            data = data.convert("RGBA")
        buf = io.BytesIO()
        data.save(buf, format="WEBP", quality=WEBP_QUALITY)
        return buf.getvalue()


def sniff_format(body: bytes) -> str | None:
    """Pillow's name for the container format of ``body``, from its signature only."""
    if not body:
        return None
    try:
        with Image.open(io.BytesIO(body)) as img:
            return img.format
    except _DECODE_ERRORS:
        return None


def decode_image(body: bytes) -> FaviconImage:
    try:
        with Image.open(io.BytesIO(body)) as img:
            img.load()
            fmt = ImageFormat.from_pillow(img.format)
            data = img.copy()
    except _DECODE_ERRORS as e:
        raise UndecodableImage(f"Failed to decode image: {e}") from e
    return FaviconImage(data, fmt)


def decode_webp(body: bytes) -> FaviconImage:
    if not features.check("webp"):
        raise UndecodableImage("Failed to decode image: webp support missing")
    try:
        with Image.open(io.BytesIO(body), formats=["WEBP"]) as img:
            img.seek(0)
            data = img.convert("RGBA")
    except _DECODE_ERRORS as e:
        raise UndecodableImage(f"Failed to decode image: {e}") from e
    return FaviconImage(data, ImageFormat.WEBP)
