"""2D primitive composition onto raster surfaces with a content-addressed render cache."""

from .cache import ImageLoader, ImageStore, RenderCache
from .config import DrawkitConfig, load_config, validate_config
from .errors import ColorParseError, DrawkitError, GradientError, ImageLoadError, UnsupportedMimeTypeError
from .geometry import GeometryDescriptor, ReferenceBox
from .session import DrawSession
from .style.gradient import ColorStop, Gradient, build_gradient

__all__ = [
    "ColorParseError",
    "ColorStop",
    "DrawSession",
    "DrawkitConfig",
    "DrawkitError",
    "GeometryDescriptor",
    "Gradient",
    "GradientError",
    "ImageLoadError",
    "ImageLoader",
    "ImageStore",
    "ReferenceBox",
    "RenderCache",
    "UnsupportedMimeTypeError",
    "build_gradient",
    "load_config",
    "validate_config",
]
