from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from facecomposer.app.errors import PersistenceCollision, PersistenceError, UNKNOWN_ERROR_CODE
from facecomposer.core.clock import utc_now
from facecomposer.core.hashing import sha256_of_text
from facecomposer.db.schemas import SavedComposition

logger = logging.getLogger(__name__)


@runtime_checkable
class PersistenceStore(Protocol):
    """
    Durable key/value store for flattened compositions.
    `put` raises PersistenceCollision (code 4) when the key is taken and
    PersistenceError for anything else; `get` resolves to None when absent.
    """

    async def put(self, key: str, value: str, session_id: Optional[str] = None) -> None: ...

    async def get(self, key: str) -> Optional[str]: ...


def _build_doc(key: str, value: str, session_id: Optional[str]) -> Dict[str, Any]:
    doc = SavedComposition(
        name=key,
        data=value,
        sha256=sha256_of_text(value),
        bytes=len(value.encode("utf-8")),
        session_id=session_id,
        created_at=utc_now(),
    )
    return doc.model_dump(by_alias=True)


class InMemoryPersistenceStore:
    def __init__(self) -> None:
        self.docs: Dict[str, Dict[str, Any]] = {}

    async def put(self, key: str, value: str, session_id: Optional[str] = None) -> None:
        if key in self.docs:
            raise PersistenceCollision(key)
        self.docs[key] = _build_doc(key, value, session_id)

    async def get(self, key: str) -> Optional[str]:
        doc = self.docs.get(key)
        return doc["data"] if doc else None


class MongoPersistenceStore:
    """
    Compositions collection keyed by name. pymongo is blocking, so every
    call runs on a worker thread.
    """

    def __init__(self, compositions: Collection):
        self.compositions = compositions

    async def put(self, key: str, value: str, session_id: Optional[str] = None) -> None:
        doc = _build_doc(key, value, session_id)
        try:
            await asyncio.to_thread(self.compositions.insert_one, doc)
        except DuplicateKeyError as e:
            raise PersistenceCollision(key) from e
        except PyMongoError as e:
            code = getattr(e, "code", None) or UNKNOWN_ERROR_CODE
            logger.error("Failed to save composition", extra={"key": key, "code": code})
            raise PersistenceError(str(e), code=code) from e

    async def get(self, key: str) -> Optional[str]:
        try:
            doc = await asyncio.to_thread(self.compositions.find_one, {"_id": key})
        except PyMongoError as e:
            raise PersistenceError(str(e), code=getattr(e, "code", None) or UNKNOWN_ERROR_CODE) from e
        if not doc:
            return None
        return doc.get("data")
