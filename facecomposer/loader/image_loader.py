from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from PIL import Image, UnidentifiedImageError

from facecomposer.app.errors import LoadFailure

logger = logging.getLogger(__name__)

Source = Union[str, Path]


@dataclass(frozen=True)
class LoadedImage:
    """
    Decoded image handle. Owned by the loader; layers only reference it.
    """
    source: str
    resource: Any  # PIL.Image.Image
    width: int
    height: int


def _decode(path: Path) -> Image.Image:
    img = Image.open(path)
    # Force the full decode here so a truncated file fails now, not at flatten time.
    img.load()
    return img


class AsyncImageLoader:
    """
    Resolves a source path into a LoadedImage on a worker thread.

    Each call to `load` has exactly one outcome: the LoadedImage or a raised
    LoadFailure. Cached sources resolve without suspending, concurrent requests
    for the same source share one in-flight decode, failures are never cached.
    """

    def __init__(self, image_root: Optional[Source] = None):
        self.image_root = Path(image_root) if image_root is not None else None
        self._cache: Dict[str, LoadedImage] = {}
        self._pending: Dict[str, asyncio.Future] = {}

    def resolve_path(self, source: Source) -> Path:
        path = Path(source)
        if self.image_root is not None and not path.is_absolute():
            path = self.image_root / path
        return path

    def is_cached(self, source: Source) -> bool:
        return str(source) in self._cache

    def clear_cache(self) -> None:
        self._cache.clear()

    async def load(self, source: Source) -> LoadedImage:
        key = str(source)

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        pending = self._pending.get(key)
        if pending is not None:
            # shield: one waiter being cancelled must not cancel the shared decode
            return await asyncio.shield(pending)

        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[key] = fut
        try:
            loaded = await self._fetch(key)
        except asyncio.CancelledError:
            fut.cancel()
            raise
        except BaseException as e:
            fut.set_exception(e)
            # mark retrieved so an unawaited shared future does not warn on GC
            fut.exception()
            raise
        else:
            self._cache[key] = loaded
            fut.set_result(loaded)
            return loaded
        finally:
            self._pending.pop(key, None)

    async def _fetch(self, key: str) -> LoadedImage:
        path = self.resolve_path(key)
        try:
            img = await asyncio.to_thread(_decode, path)
        except FileNotFoundError as e:
            logger.error("Image source not found", extra={"source": key})
            raise LoadFailure(key, "not found") from e
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logger.error("Image source could not be decoded", extra={"source": key})
            raise LoadFailure(key, str(e)) from e

        width, height = img.size
        if width <= 0 or height <= 0:
            raise LoadFailure(key, "empty image")

        logger.debug("Loaded image %sx%s", width, height, extra={"source": key})
        return LoadedImage(source=key, resource=img, width=width, height=height)
