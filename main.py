from __future__ import annotations

import argparse
import asyncio
from dataclasses import asdict
import json
import logging
from pathlib import Path

from drawkit.config import DrawkitConfig, load_config
from drawkit.session import DrawSession


FORMAT_MIME_TYPES = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "webp": "image/webp",
}


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="drawkit")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING")
    parser.add_argument("--config", type=Path, default=None, help="TOML file with a [drawkit] table.")
    sub = parser.add_subparsers(dest="command", required=True)

    demo = sub.add_parser("demo", help="Render a sample composition to an image file.")
    demo.add_argument("output", type=Path)
    demo.add_argument("--width", type=int, default=640)
    demo.add_argument("--height", type=int, default=360)
    demo.add_argument(
        "--format",
        choices=sorted(FORMAT_MIME_TYPES),
        default=None,
        help="Output format. Default: inferred from the output suffix, else png.",
    )
    demo.add_argument("--background", default="#f4f4f5")

    sub.add_parser("show-config", help="Print the effective configuration as JSON.")

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    config = load_config(args.config)

    if args.command == "demo":
        width, height = _resolve_dimensions(args.width, args.height)
        mime_type = _resolve_mime_type(args.output, args.format)
        data = asyncio.run(render_demo(width, height, mime_type, config=config, background=args.background))
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(data)
        print(f"wrote {args.output} ({width}x{height}, {mime_type}, {len(data)} bytes)")
        return

    if args.command == "show-config":
        print(json.dumps(asdict(config), indent=2, sort_keys=True))
        return

    raise RuntimeError(f"unsupported command: {args.command}")


async def render_demo(
    width: int,
    height: int,
    mime_type: str = "image/png",
    *,
    config: DrawkitConfig | None = None,
    background: str | None = None,
) -> bytes:
    """Card with a gradient header, a centered badge and a button chained below it."""

    session = DrawSession(width, height, config=config, background=background)
    card = await session.draw_rect(
        x="center",
        y="center",
        width=width * 0.8,
        height=height * 0.8,
        background_color="#ffffff",
        border_color="#d4d4d8",
        border_width=2,
        border_radius=18,
    )
    await session.draw_rect(
        x=card.x,
        y=card.y,
        width=card.width,
        height=card.height * 0.3,
        background_gradient={"angle": 90, "colors": ["#6366f1", "#ec4899"]},
        border_radius=[18, 18, 0, 0],
    )
    badge = await session.draw_circle(
        x="center",
        y=card.y + card.height * 0.3,
        radius=min(width, height) * 0.08,
        background_color="#fde68a",
        border_color="#f59e0b",
        border_width=3,
    )
    await session.draw_triangle(
        x="center",
        y="center",
        size=badge.width * 0.45,
        background_color="#f59e0b",
        reference="auto",
    )
    await session.draw_text(
        text="drawkit",
        x="center",
        y=badge.y + badge.height + 16,
        font="bold 28px sans-serif",
        color="#18181b",
    )
    await session.draw_line(
        x="center",
        y=card.y + card.height * 0.72,
        length=card.width * 0.6,
        line_width=2,
        line_color="#e4e4e7",
        line_cap="round",
    )
    await session.draw_button(
        x="center",
        y=card.y + card.height * 0.78,
        text="Get started",
        font="18px sans-serif",
        color="#ffffff",
        padding="8px 20px",
        background_color="#18181b",
        border_radius=10,
    )
    return await session.encode(mime_type)


def _resolve_dimensions(width: int, height: int) -> tuple[int, int]:
    if width <= 0:
        raise ValueError("width must be > 0")
    if height <= 0:
        raise ValueError("height must be > 0")
    return (width, height)


def _resolve_mime_type(output: Path, fmt: str | None) -> str:
    if fmt is not None:
        return FORMAT_MIME_TYPES[fmt]
    suffix = output.suffix.lower().lstrip(".")
    return FORMAT_MIME_TYPES.get(suffix, "image/png")


if __name__ == "__main__":
    main()
