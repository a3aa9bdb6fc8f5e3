from __future__ import annotations

from facecomposer.loader.image_loader import AsyncImageLoader, LoadedImage

__all__ = [
    "AsyncImageLoader",
    "LoadedImage",
]
