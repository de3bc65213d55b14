from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
from pathlib import Path
import re
from typing import Sequence

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from drawkit.raster.canvas import paint_through_mask, solid_paint
from drawkit.style.colors import parse_color
from drawkit.style.units import parse_length


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_SIZE_PX = 30.0
GENERIC_FAMILIES = {
    "sans-serif": ("dejavusans", "arial", "helvetica", "liberationsans", "notosans"),
    "serif": ("dejavuserif", "times", "liberationserif", "notoserif"),
    "monospace": ("dejavusansmono", "menlo", "monaco", "couriernew", "courier", "liberationmono"),
}
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/System/Library/Fonts/Supplemental"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
)
_WEIGHT_WORDS = {"bold": 700, "bolder": 700, "lighter": 300, "normal": 400}
_STYLE_WORDS = {"italic", "oblique"}
_SIZE_TOKEN = re.compile(r"^(\d+(?:\.\d+)?|\.\d+)(px|pt|em|in|cm|mm|pc)?$", re.IGNORECASE)

FontLike = ImageFont.FreeTypeFont | ImageFont.ImageFont


@dataclass(frozen=True)
class FontSpec:
    family: str = "sans-serif"
    size_px: float = DEFAULT_FONT_SIZE_PX
    weight: int = 400
    italic: bool = False

    @property
    def bold(self) -> bool:
        return self.weight >= 600


@dataclass(frozen=True)
class TextMetrics:
    width: float
    ascent: float
    descent: float
    # Horizontal ink extent relative to the pen origin; may overhang the advance.
    ink_left: float = 0.0
    ink_right: float = 0.0

    @property
    def height(self) -> float:
        return self.ascent + self.descent


def parse_font(font: str) -> FontSpec:
    """Parse a CSS-like font shorthand, e.g. `bold 24px "DejaVu Sans"`."""

    weight = 400
    italic = False
    size_px: float | None = None
    tokens = font.split()
    family_tokens: list[str] = []
    for index, token in enumerate(tokens):
        lowered = token.lower()
        if size_px is None:
            if lowered in _WEIGHT_WORDS:
                weight = _WEIGHT_WORDS[lowered]
                continue
            if lowered.isdigit() and len(lowered) == 3:
                weight = int(lowered)
                continue
            if lowered in _STYLE_WORDS:
                italic = True
                continue
            if _SIZE_TOKEN.match(lowered):
                size_px = parse_length(lowered)
                continue
            if lowered in ("normal", "small-caps"):
                continue
        family_tokens = tokens[index:]
        break
    if size_px is None or size_px <= 0:
        LOGGER.warning("font %r has no usable size; using %spx", font, DEFAULT_FONT_SIZE_PX)
        size_px = DEFAULT_FONT_SIZE_PX
    family = " ".join(family_tokens).split(",")[0].strip().strip("'\"") or "sans-serif"
    return FontSpec(family=family, size_px=size_px, weight=weight, italic=italic)


def load_font(spec: FontSpec) -> FontLike:
    return _load_font(spec.family, round(spec.size_px, 2), spec.bold, spec.italic)


def measure_text(text: str, spec: FontSpec) -> TextMetrics:
    """Advance width plus actual ascent/descent of the inked glyphs."""

    font = load_font(spec)
    if not text:
        return TextMetrics(width=0.0, ascent=0.0, descent=0.0)
    advance = float(font.getlength(text))
    if isinstance(font, ImageFont.FreeTypeFont):
        left, top, right, bottom = font.getbbox(text, anchor="ls")
        return TextMetrics(
            width=advance,
            ascent=float(max(0, -top)),
            descent=float(max(0, bottom)),
            ink_left=float(min(0, left)),
            ink_right=float(max(advance, right)),
        )
    left, top, right, bottom = font.getbbox(text)
    return TextMetrics(
        width=advance,
        ascent=float(bottom - top),
        descent=0.0,
        ink_left=float(min(0, left)),
        ink_right=float(max(advance, right)),
    )


def draw_run(
    dst: np.ndarray,
    x: float,
    baseline: float,
    runs: Sequence[tuple[str, FontSpec, str]],
) -> float:
    """Draw (text, font, color) runs left to right; returns the end x."""

    height, width = dst.shape[:2]
    cursor = x
    for text, spec, color in runs:
        if not text:
            continue
        font = load_font(spec)
        mask_image = Image.new("L", (width, height), 0)
        draw = ImageDraw.Draw(mask_image)
        if isinstance(font, ImageFont.FreeTypeFont):
            draw.text((cursor, baseline), text, fill=255, font=font, anchor="ls")
        else:
            ascent = measure_text(text, spec).ascent
            draw.text((cursor, baseline - ascent), text, fill=255, font=font)
        coverage = np.asarray(mask_image, dtype=np.float32) / 255.0
        paint_through_mask(dst, solid_paint(parse_color(color), width, height), coverage)
        cursor += float(font.getlength(text))
    return cursor


@lru_cache(maxsize=64)
def _load_font(family: str, size_px: float, bold: bool, italic: bool) -> FontLike:
    size = max(1, int(round(size_px)))
    font_path = _resolve_font_path(family, bold, italic)
    if font_path is not None:
        try:
            return ImageFont.truetype(str(font_path), size=size)
        except OSError as exc:
            LOGGER.warning("could not load font file %s: %s", font_path, exc)
    return ImageFont.load_default(size=size)


def _resolve_font_path(family: str, bold: bool, italic: bool) -> Path | None:
    wanted = family.strip().lower()
    patterns = GENERIC_FAMILIES.get(wanted, (wanted.replace(" ", ""),) + GENERIC_FAMILIES["sans-serif"])
    candidates = _font_candidates()
    for pattern in patterns:
        matches = [path for path in candidates if pattern in path.stem.lower().replace(" ", "").replace("-", "")]
        if not matches:
            continue
        return min(matches, key=lambda path: _style_distance(path, bold, italic))
    return None


def _style_distance(path: Path, bold: bool, italic: bool) -> tuple[int, int]:
    stem = path.stem.lower()
    has_bold = "bold" in stem
    has_italic = "italic" in stem or "oblique" in stem
    mismatch = int(has_bold != bold) + int(has_italic != italic)
    return (mismatch, len(stem))


@lru_cache(maxsize=1)
def _font_candidates() -> tuple[Path, ...]:
    candidates: list[Path] = []
    for base in FONT_DIRS:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(base.rglob(ext))
    return tuple(sorted(candidates))
