from __future__ import annotations

import logging
from typing import Any, Callable, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel

from facecomposer.app.errors import (
    LoadFailure,
    PersistenceCollision,
    PersistenceError,
)
from facecomposer.composition.layer import (
    BACKGROUND_NAME,
    Layer,
    LayerOptions,
    build_layer,
)
from facecomposer.composition.store import LayerStore
from facecomposer.composition.surface import RenderingSurface
from facecomposer.core.geometry import centered_position
from facecomposer.core.ids import new_session_id
from facecomposer.db.repositories import PersistenceStore
from facecomposer.loader.image_loader import AsyncImageLoader, LoadedImage, Source

logger = logging.getLogger(__name__)

SaveStatus = Literal["saved", "invalid_name", "collision", "failed"]
Notify = Callable[[str], None]


class SaveResult(BaseModel):
    name: Optional[str] = None
    status: SaveStatus
    error_code: Optional[int] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "saved"


def _log_notify(message: str) -> None:
    logger.error(message)


class CompositionController:
    """
    Single entry point for mutating a composition.

    Sequences image loads into the LayerStore and mirrors each accepted layer
    onto the RenderingSurface. One instance per composition session; once any
    image fails to load the session stays halted and a new controller is needed.
    """

    def __init__(
        self,
        surface: RenderingSurface,
        loader: AsyncImageLoader,
        persistence: PersistenceStore,
        *,
        surface_width: int,
        surface_height: int,
        notify: Optional[Notify] = None,
        session_id: Optional[str] = None,
    ):
        self.surface = surface
        self.surface_width = surface_width
        self.surface_height = surface_height
        self.loader = loader
        self.persistence = persistence
        self.notify = notify or _log_notify
        self.session_id = session_id or new_session_id()

        self.store = LayerStore()
        self._started = False
        self._changed = False
        self._pending_save = False

    # ---------- read-only state ----------
    @property
    def started(self) -> bool:
        return self._started

    @property
    def changed(self) -> bool:
        return self._changed

    @property
    def halted(self) -> bool:
        return self.store.halted

    @property
    def pending_save(self) -> bool:
        return self._pending_save

    @property
    def layers(self) -> List[Layer]:
        return list(self.store)

    def _extra(self, **kw: Any) -> dict:
        return {"session_id": self.session_id, **kw}

    # ---------- loading ----------
    async def _load(self, source: Source) -> Optional[LoadedImage]:
        if self.loader.is_cached(source):
            logger.debug("Reusing cached image", extra=self._extra(source=str(source)))
        try:
            return await self.loader.load(source)
        except LoadFailure:
            already_halted = self.store.halted
            self.store.halt()
            logger.error("Load failed, halting composition", extra=self._extra(source=str(source)))
            if not already_halted:
                self.notify("Error loading some image")
            return None

    # ---------- adds ----------
    async def add_background(self, source: Source) -> bool:
        if self.store.halted:
            return False

        image = await self._load(source)
        if image is None:
            return False

        x, y = centered_position(self.surface_width, self.surface_height, image.width, image.height)
        layer = build_layer(
            image,
            BACKGROUND_NAME,
            {"x": x, "y": y},
            is_background=True,
        )
        if not self.store.insert(layer):
            return False

        self._started = True
        self._changed = True
        self.surface.add_background_layer(layer)
        logger.info("Background added", extra=self._extra(layer=layer.name, source=image.source))
        return True

    async def add_image(
        self,
        source: Source,
        name: str,
        options: Union[LayerOptions, Mapping[str, Any], None] = None,
    ) -> bool:
        """
        Add a draggable, resizable overlay. Refused without loading when no
        background exists yet or the session is halted. A duplicate name is
        only detected once the image has loaded and is dropped silently.
        """
        if not self.store.has_background():
            logger.debug("Overlay refused, no background", extra=self._extra(layer=name))
            return False
        if self.store.halted:
            return False

        opts = LayerOptions.coerce(options)
        image = await self._load(source)
        if image is None:
            return False

        layer = build_layer(
            image,
            name,
            opts.model_dump(),
            is_draggable=True,
            is_resizable=True,
        )
        if not self.store.insert(layer):
            return False

        self._changed = True
        self.surface.add_layer(layer)
        logger.info("Layer added", extra=self._extra(layer=name, source=image.source))
        return True

    # ---------- removals ----------
    def remove_selected(self) -> Optional[str]:
        deleted = self.surface.remove_selected()
        if deleted is None:
            return None
        if not self.store.remove_by_name(deleted):
            logger.warning("Surface removed a layer unknown to the store", extra=self._extra(layer=deleted))
            return None
        self._changed = True
        return deleted

    async def remove_all(self) -> int:
        self._changed = True
        removed = await self.store.remove_all_except_background(self.surface.remove_layer)
        logger.info("Removed %d layers", removed, extra=self._extra())
        return removed

    # ---------- surface-only operations ----------
    def fit_background(self) -> None:
        self._changed = True
        self.surface.toggle_fit_background(BACKGROUND_NAME)

    def undo(self) -> None:
        # The store is not rolled back with the surface.
        logger.debug("Undo delegated to surface", extra=self._extra())
        self.surface.undo()

    async def export_flattened(self, callback: Optional[Callable[[str], Any]] = None) -> str:
        data = await self.surface.flatten()
        if callback is not None:
            callback(data)
        return data

    # ---------- persistence ----------
    async def save(self, name: Optional[str]) -> SaveResult:
        if not name:
            self.notify("Insert a name")
            return SaveResult(name=name, status="invalid_name", message="Insert a name")

        self._pending_save = True
        try:
            data = await self.export_flattened()
            await self.persistence.put(name, data, session_id=self.session_id)
        except PersistenceCollision as e:
            self.notify("Image already exists")
            return SaveResult(name=name, status="collision", error_code=e.code, message=str(e))
        except PersistenceError as e:
            logger.error("Save failed", extra=self._extra(key=name, code=e.code))
            return SaveResult(name=name, status="failed", error_code=e.code, message=str(e))
        finally:
            self._pending_save = False

        self.notify("saved")
        logger.info("Composition saved", extra=self._extra(key=name))
        return SaveResult(name=name, status="saved", message="saved")

    async def load(self, name: str, callback: Optional[Callable[[Optional[str]], Any]] = None) -> Optional[str]:
        data = await self.persistence.get(name)
        if callback is not None:
            callback(data)
        return data
