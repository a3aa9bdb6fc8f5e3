from __future__ import annotations

import logging
from collections import deque
from typing import Awaitable, Callable, Deque, Iterator, List, Optional

from facecomposer.app.errors import DuplicateName, InvalidOperation
from facecomposer.composition.layer import Layer

logger = logging.getLogger(__name__)

ConfirmRemoval = Callable[[str], Awaitable[Optional[str]]]


class LayerStore:
    """
    Ordered layers of one composition. Insertion order is paint order
    (later = on top). The background, if any, is always index 0.
    """

    def __init__(self) -> None:
        self._layers: List[Layer] = []
        self._halted = False

    # ---------- queries ----------
    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(list(self._layers))

    @property
    def halted(self) -> bool:
        return self._halted

    @property
    def background(self) -> Optional[Layer]:
        for layer in self._layers:
            if layer.is_background:
                return layer
        return None

    def has_background(self) -> bool:
        return self.background is not None

    def exists(self, name: str) -> bool:
        return any(layer.name == name for layer in self._layers)

    def get(self, name: str) -> Optional[Layer]:
        for layer in self._layers:
            if layer.name == name:
                return layer
        return None

    def names(self) -> List[str]:
        return [layer.name for layer in self._layers]

    # ---------- mutations ----------
    def halt(self) -> None:
        self._halted = True

    def check_insert(self, layer: Layer) -> None:
        """Raise InvalidOperation or DuplicateName if `layer` may not be inserted."""
        if self._halted:
            raise InvalidOperation("store halted after a load failure")
        if layer.is_background:
            if self._layers:
                raise InvalidOperation("background must be the first layer")
        elif not self.has_background():
            raise InvalidOperation("no background yet")
        if self.exists(layer.name):
            raise DuplicateName(layer.name)

    def insert(self, layer: Layer) -> bool:
        try:
            self.check_insert(layer)
        except (InvalidOperation, DuplicateName) as e:
            logger.debug("Layer dropped: %s", e, extra={"layer": layer.name})
            return False

        self._layers.append(layer)
        return True

    def remove_by_name(self, name: str) -> bool:
        for i, layer in enumerate(self._layers):
            if layer.name == name:
                del self._layers[i]
                return True
        return False

    async def remove_all_except_background(self, confirm: ConfirmRemoval) -> int:
        """
        Remove overlays back-to-front, one at a time. Each removal waits for
        `confirm(name)` to resolve to the deleted name before the next one starts.
        Returns the number of confirmed deletions.
        """
        queue: Deque[str] = deque(
            layer.name for layer in reversed(self._layers) if not layer.is_background
        )
        removed = 0
        while queue:
            name = queue.popleft()
            deleted = await confirm(name)
            if deleted is None:
                logger.warning("Removal not confirmed, keeping layer", extra={"layer": name})
                continue
            if self.remove_by_name(deleted):
                removed += 1
        return removed
