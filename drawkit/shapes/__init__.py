from .button import draw_button
from .circle import draw_circle
from .line import draw_line
from .rect import draw_rect
from .text import draw_text
from .triangle import draw_triangle

__all__ = [
    "draw_button",
    "draw_circle",
    "draw_line",
    "draw_rect",
    "draw_text",
    "draw_triangle",
]
