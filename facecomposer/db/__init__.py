from __future__ import annotations

"""
Database layer:
- Mongo connection
- Schemas
- Persistence stores (Mongo and in-memory)
"""

from facecomposer.db import mongo, repositories, schemas
from facecomposer.db.repositories import (
    InMemoryPersistenceStore,
    MongoPersistenceStore,
    PersistenceStore,
)

__all__ = [
    "mongo",
    "repositories",
    "schemas",
    "InMemoryPersistenceStore",
    "MongoPersistenceStore",
    "PersistenceStore",
]
