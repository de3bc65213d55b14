from __future__ import annotations


class DrawkitError(Exception):
    """Base class for errors surfaced to drawkit callers."""


class ImageLoadError(DrawkitError, RuntimeError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to load image `{url}`: {reason}")
        self.url = url
        self.reason = reason


class GradientError(DrawkitError, ValueError):
    pass


class ColorParseError(DrawkitError, ValueError):
    pass


class UnsupportedMimeTypeError(DrawkitError, ValueError):
    def __init__(self, mime_type: str, allowed: tuple[str, ...]) -> None:
        super().__init__(f"unsupported mime type `{mime_type}`; expected one of {', '.join(allowed)}")
        self.mime_type = mime_type
