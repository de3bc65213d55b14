from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping


LOGGER = logging.getLogger(__name__)

INCHES_TO_PX = 96.0
CM_TO_PX = INCHES_TO_PX / 2.54
MM_TO_PX = CM_TO_PX / 10.0
PT_TO_PX = INCHES_TO_PX / 72.0
PC_TO_PX = PT_TO_PX * 12.0
EM_TO_PX = 16.0

_UNIT_SCALE = {
    "": 1.0,
    "px": 1.0,
    "pt": PT_TO_PX,
    "pc": PC_TO_PX,
    "in": INCHES_TO_PX,
    "cm": CM_TO_PX,
    "mm": MM_TO_PX,
    "em": EM_TO_PX,
}
_NUMBER_WITH_UNIT = re.compile(r"^([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)([a-zA-Z]*)$")
_SENTINELS = frozenset({"center", "auto"})


def parse_length(token: str) -> float | None:
    """Parse one `12`, `12px`, `0.5in` style token into pixels, or None."""

    match = _NUMBER_WITH_UNIT.match(token.strip())
    if match is None:
        return None
    scale = _UNIT_SCALE.get(match.group(2).lower())
    if scale is None:
        return None
    return float(match.group(1)) * scale


def parse_numeric(value: Any, *, field: str = "value") -> Any:
    """Normalize a number-like style value.

    Returns a float when exactly one token resolves, an ordered list of floats
    for multi-value input, and the original value (with a warning) when any
    token fails. `center`/`auto` sentinels pass through silently.
    """

    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        if value.strip().lower() in _SENTINELS:
            return value
        tokens: list[Any] = value.split()
    elif isinstance(value, (list, tuple)):
        tokens = list(value)
    else:
        return value

    parsed: list[float] = []
    for token in tokens:
        number = _parse_token(token)
        if number is None:
            LOGGER.warning("could not parse `%s` value %r; leaving it unchanged", field, value)
            return value
        parsed.append(number)
    if not parsed:
        LOGGER.warning("empty `%s` value %r; leaving it unchanged", field, value)
        return value
    if len(parsed) == 1:
        return parsed[0]
    return parsed


def resolve_style(options: Mapping[str, Any], numeric_fields: Iterable[str]) -> dict[str, Any]:
    """Parse the named numeric fields of an option bag; everything else passes through."""

    wanted = set(numeric_fields)
    resolved: dict[str, Any] = {}
    for key, value in options.items():
        resolved[key] = parse_numeric(value, field=key) if key in wanted else value
    return resolved


def expand_box(value: Any, *, field: str = "box") -> tuple[float, float, float, float]:
    """CSS shorthand: (top-left|top, top-right|right, bottom-right|bottom, bottom-left|left)."""

    if value is None:
        return (0.0, 0.0, 0.0, 0.0)
    parsed = parse_numeric(value, field=field)
    if isinstance(parsed, float):
        return (parsed, parsed, parsed, parsed)
    if not isinstance(parsed, list) or not all(isinstance(v, float) for v in parsed):
        LOGGER.warning("invalid `%s` %r; using 0 on all sides", field, value)
        return (0.0, 0.0, 0.0, 0.0)
    if len(parsed) == 1:
        a = parsed[0]
        return (a, a, a, a)
    if len(parsed) == 2:
        a, b = parsed
        return (a, b, a, b)
    if len(parsed) == 3:
        a, b, c = parsed
        return (a, b, c, b)
    if len(parsed) == 4:
        a, b, c, d = parsed
        return (a, b, c, d)
    LOGGER.warning("invalid `%s` %r: expected 1-4 values, got %d; using 0 on all sides", field, value, len(parsed))
    return (0.0, 0.0, 0.0, 0.0)


def resolve_stroke_width(value: Any, default: float = 1.0) -> float:
    if value is None:
        return default
    parsed = parse_numeric(value, field="border_width")
    if isinstance(parsed, float) and parsed >= 0:
        return parsed
    LOGGER.warning("invalid border width %r; using %spx", value, default)
    return default


def require_number(value: Any, *, field: str, default: float = 0.0) -> float:
    """Scalar dimension after style resolution; warns and defaults otherwise."""

    if value is None:
        return default
    parsed = parse_numeric(value, field=field)
    if isinstance(parsed, float):
        return parsed
    LOGGER.warning("invalid `%s` %r; using %s", field, value, default)
    return default


def _parse_token(token: Any) -> float | None:
    if isinstance(token, bool):
        return None
    if isinstance(token, (int, float)):
        return float(token)
    if isinstance(token, str):
        return parse_length(token)
    return None
