from __future__ import annotations

import io

import numpy as np
from PIL import Image

from drawkit.errors import UnsupportedMimeTypeError


MIME_FORMATS = {
    "image/png": "PNG",
    "image/jpeg": "JPEG",
    "image/webp": "WEBP",
}
ALLOWED_MIME_TYPES: tuple[str, ...] = tuple(MIME_FORMATS)


def validate_mime_type(mime_type: str) -> str:
    """Return the Pillow format for an allowed MIME type; never coerces."""

    if not isinstance(mime_type, str) or mime_type.strip().lower() not in MIME_FORMATS:
        raise UnsupportedMimeTypeError(str(mime_type), ALLOWED_MIME_TYPES)
    return MIME_FORMATS[mime_type.strip().lower()]


def encode_bitmap(bitmap: np.ndarray, mime_type: str = "image/png", quality: int | None = None) -> bytes:
    fmt = validate_mime_type(mime_type)
    image = Image.fromarray(bitmap, mode="RGBA")
    params: dict[str, object] = {}
    if fmt == "JPEG":
        image = image.convert("RGB")
    if fmt in ("JPEG", "WEBP") and quality is not None:
        if not 1 <= quality <= 100:
            raise ValueError("quality must be in [1, 100]")
        params["quality"] = int(quality)
    out = io.BytesIO()
    image.save(out, format=fmt, **params)
    return out.getvalue()
