from .position import PositionRequest, ResolvedPosition, bounding_size, resolve_position

__all__ = [
    "PositionRequest",
    "ResolvedPosition",
    "bounding_size",
    "resolve_position",
]
