class FaviconError(Exception):
    """Base for everything that can keep a real favicon from being served."""

    code = "favicon-error"
    default_message = "favicon error"

    def __str__(self):
        return super().__str__() or self.default_message


class LinkNotFound(FaviconError):
    code = "link-not-found"
    default_message = "link not found"


class MarkupParseError(FaviconError):
    code = "markup-parse-failure"
    default_message = "failed to parse html"


class NetworkError(FaviconError):
    code = "network-failure"
    default_message = "network request failed"


class UndecodableImage(FaviconError):
    code = "undecodable-image"
    default_message = "Cannot decode the image type"


class DecodeTaskError(FaviconError):
    code = "offloaded-decode-failure"
    default_message = "decode task failed"


class InvalidTargetUrl(FaviconError):
    code = "invalid-target-url"
    default_message = "Provided URL is not a valid url"


class UnsupportedOutputFormat(FaviconError):
    code = "unsupported-output-format"
    default_message = "Unsupported image format"
