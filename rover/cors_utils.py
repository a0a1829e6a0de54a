import re

ANY_ORIGIN = "*"
ALLOWED_METHODS = ("GET", "HEAD", "OPTIONS")


def is_pattern(origin: str) -> bool:
    return len(origin) >= 2 and origin.startswith("/") and origin.endswith("/")


class CorsOrigins:
    """Origins allowed to read responses, built once from configuration.

    ``*`` on its own allows everything. Entries written as ``/regex/`` are
    compiled once and matched anywhere in the origin; all other entries must
    match exactly.
    """

    def __init__(self, origins):
        origins = [o.strip() for o in origins if o and o.strip()] or [ANY_ORIGIN]
        self.allow_any = origins == [ANY_ORIGIN]
        self.exact = frozenset(o for o in origins if not is_pattern(o))
        patterns = []
        for origin in origins:
            if is_pattern(origin):
                try:
                    patterns.append(re.compile(origin[1:-1]))
                except re.error as e:
                    raise ValueError(f"invalid origin pattern {origin!r}: {e}") from e
        self.patterns = tuple(patterns)

    def is_allowed(self, origin: str | None) -> bool:
        if self.allow_any:
            return True
        if not origin:
            return False
        if origin in self.exact:
            return True
        return any(p.search(origin) for p in self.patterns)

    def allow_origin_header(self, origin: str | None) -> str | None:
        """Value for Access-Control-Allow-Origin, or None to deny."""
        if self.allow_any:
            return ANY_ORIGIN
        return origin if self.is_allowed(origin) else None
