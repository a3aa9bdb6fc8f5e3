from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from facecomposer.app.settings import Settings
from facecomposer.composition.controller import CompositionController, Notify
from facecomposer.composition.surface import RenderingSurface
from facecomposer.core.ids import new_session_id
from facecomposer.db.repositories import PersistenceStore
from facecomposer.loader.image_loader import AsyncImageLoader

logger = logging.getLogger(__name__)


@dataclass
class CompositionContext:
    """
    Services shared by the compositions of one application run.
    Built once by the top-level wiring and passed explicitly.
    """
    settings: Settings
    loader: AsyncImageLoader
    persistence: PersistenceStore

    def new_composition(
        self,
        surface: RenderingSurface,
        notify: Optional[Notify] = None,
    ) -> CompositionController:
        """
        Fresh controller with an empty store. A halted composition is never
        reset; callers open a new one instead.
        """
        session_id = new_session_id()
        logger.info("Composition session opened", extra={"session_id": session_id})
        return CompositionController(
            surface,
            self.loader,
            self.persistence,
            surface_width=self.settings.surface_width,
            surface_height=self.settings.surface_height,
            notify=notify,
            session_id=session_id,
        )
