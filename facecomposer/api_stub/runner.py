from __future__ import annotations

from typing import Optional, Tuple
from dotenv import load_dotenv

load_dotenv()  # Load .env file

from facecomposer.app.settings import Settings, load_settings
from facecomposer.app.logging import setup_logging
from facecomposer.composition.controller import CompositionController, Notify
from facecomposer.composition.surface import RenderingSurface
from facecomposer.db.mongo import connect_mongo, ensure_indexes
from facecomposer.db.repositories import (
    InMemoryPersistenceStore,
    MongoPersistenceStore,
    PersistenceStore,
)
from facecomposer.loader.image_loader import AsyncImageLoader
from facecomposer.session.context import CompositionContext


def build_persistence(s: Settings) -> PersistenceStore:
    if s.persistence == "mongo":
        handles = connect_mongo(s.mongo_uri, s.mongo_db)  # type: ignore[arg-type]
        ensure_indexes(handles)
        return MongoPersistenceStore(handles["compositions"])
    return InMemoryPersistenceStore()


def build_context(settings: Optional[Settings] = None) -> CompositionContext:
    """
    Minimal wiring:
    - settings from env (.env honoured)
    - JSON logging
    - persistence backend (memory or Mongo)
    - shared image loader rooted at FACE_IMAGE_ROOT
    """
    s = settings or load_settings()
    setup_logging(s.log_level)

    return CompositionContext(
        settings=s,
        loader=AsyncImageLoader(s.image_root),
        persistence=build_persistence(s),
    )


def open_session(
    surface: RenderingSurface,
    *,
    notify: Optional[Notify] = None,
    settings: Optional[Settings] = None,
) -> Tuple[CompositionContext, CompositionController]:
    ctx = build_context(settings)
    return ctx, ctx.new_composition(surface, notify=notify)
