from .images import ImageLoader, ImageStore, placeholder_bitmap, prepared_key
from .render_cache import PARTITIONS, CacheEntry, CacheStats, RenderCache, Transient

__all__ = [
    "CacheEntry",
    "CacheStats",
    "ImageLoader",
    "ImageStore",
    "PARTITIONS",
    "RenderCache",
    "Transient",
    "placeholder_bitmap",
    "prepared_key",
]
