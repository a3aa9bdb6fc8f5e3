from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Literal

from facecomposer.app.errors import ConfigError

PersistenceBackend = Literal["memory", "mongo"]


def _get_env(name: str, default: str | None = None) -> str:
    v = os.getenv(name, default)
    if v is None or v == "":
        raise ConfigError(f"Missing required env var: {name}")
    return v


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"Env var {name} must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"Env var {name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    # Render surface
    surface_width: int
    surface_height: int

    # Image sources
    image_root: str

    # Persistence
    persistence: PersistenceBackend
    mongo_uri: str | None
    mongo_db: str

    log_level: str


def load_settings() -> Settings:
    backend = os.getenv("FACE_PERSISTENCE", "memory").lower().strip()
    if backend not in {"memory", "mongo"}:
        raise ConfigError(f"FACE_PERSISTENCE must be 'memory' or 'mongo', got {backend!r}")

    return Settings(
        surface_width=_get_int("FACE_SURFACE_WIDTH", 800),
        surface_height=_get_int("FACE_SURFACE_HEIGHT", 600),
        image_root=os.getenv("FACE_IMAGE_ROOT", "."),
        persistence=backend,  # type: ignore[arg-type]
        mongo_uri=_get_env("MONGO_URI") if backend == "mongo" else os.getenv("MONGO_URI"),
        mongo_db=os.getenv("MONGO_DB", "face_composer"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
