from werkzeug.datastructures import MIMEAccept
from werkzeug.http import parse_accept_header

from rover import config
from rover.image_utils import ImageFormat

SUPPORTED_OUTPUT_FORMATS = (
    ImageFormat.PNG,
    ImageFormat.JPEG,
    ImageFormat.GIF,
    ImageFormat.WEBP,
    ImageFormat.PNM,
    ImageFormat.TIFF,
    ImageFormat.TGA,
    ImageFormat.BMP,
    ImageFormat.ICO,
)

DEFAULT_IMAGE_FORMAT = ImageFormat.from_name(config.DEFAULT_IMAGE_FORMAT) or ImageFormat.WEBP


class FormatNegotiator:
    """Picks an output encoding from an Accept header.

    The MIME catalogue is fixed at construction; order breaks ties between
    equally preferred types.
    """

    def __init__(self, formats=SUPPORTED_OUTPUT_FORMATS, default=DEFAULT_IMAGE_FORMAT):
        self.default = default
        self._formats = {fmt.mime_type: fmt for fmt in formats}
        self.mime_types = tuple(self._formats)

    def negotiate(self, accept: str | None) -> ImageFormat:
        if not accept or not accept.strip():
            return self.default
        best = parse_accept_header(accept, MIMEAccept).best_match(self.mime_types)
        return self._formats.get(best, self.default) if best else self.default
