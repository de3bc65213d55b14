from __future__ import annotations

from dataclasses import asdict, dataclass
import os
from pathlib import Path
import tomllib
from typing import Any, Mapping


CONFIG_ENV_VAR = "DRAWKIT_CONFIG"
DEFAULT_WIPE_INTERVAL_S = 3 * 24 * 60 * 60.0
DEFAULT_PLACEHOLDER_TTL_S = 5 * 60.0


@dataclass(frozen=True)
class DrawkitConfig:
    """Session-wide knobs for caching, image fetching and rasterization."""

    cache_wipe_interval_s: float = DEFAULT_WIPE_INTERVAL_S
    placeholder_ttl_s: float = DEFAULT_PLACEHOLDER_TTL_S
    fetch_timeout_s: float = 10.0
    supersample: int = 4
    default_font: str = "30px sans-serif"
    default_text_color: str = "#000000"
    encode_quality: int = 92


DEFAULT_CONFIG = DrawkitConfig()


def validate_config(overrides: Mapping[str, Any] | None = None) -> DrawkitConfig:
    """Merge overrides onto defaults, rejecting unknown keys and bad values."""

    raw: dict[str, Any] = asdict(DEFAULT_CONFIG)
    if overrides:
        for key, value in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown config key: {key}")
            raw[key] = value

    for key in ("cache_wipe_interval_s", "placeholder_ttl_s", "fetch_timeout_s"):
        if isinstance(raw[key], bool) or not isinstance(raw[key], (int, float)) or float(raw[key]) <= 0:
            raise ValueError(f"Config `{key}` must be a positive number")

    if isinstance(raw["supersample"], bool) or not isinstance(raw["supersample"], int) or not 1 <= raw["supersample"] <= 8:
        raise ValueError("Config `supersample` must be an integer in [1, 8]")

    if isinstance(raw["encode_quality"], bool) or not isinstance(raw["encode_quality"], int) or not 1 <= raw["encode_quality"] <= 100:
        raise ValueError("Config `encode_quality` must be an integer in [1, 100]")

    for key in ("default_font", "default_text_color"):
        if not isinstance(raw[key], str) or not raw[key].strip():
            raise ValueError(f"Config `{key}` must be a non-empty string")

    return DrawkitConfig(
        cache_wipe_interval_s=float(raw["cache_wipe_interval_s"]),
        placeholder_ttl_s=float(raw["placeholder_ttl_s"]),
        fetch_timeout_s=float(raw["fetch_timeout_s"]),
        supersample=int(raw["supersample"]),
        default_font=str(raw["default_font"]),
        default_text_color=str(raw["default_text_color"]),
        encode_quality=int(raw["encode_quality"]),
    )


def load_config(path: str | Path | None = None) -> DrawkitConfig:
    """Load a `[drawkit]` table from TOML.

    Falls back to `$DRAWKIT_CONFIG`, then to defaults when neither is set.
    """

    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR, "").strip()
        if not env_path:
            return DEFAULT_CONFIG
        path = env_path
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"drawkit config not found: {config_path}")
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    table = raw.get("drawkit", raw)
    if not isinstance(table, dict):
        raise ValueError("`drawkit` config section must be a table")
    return validate_config(table)
