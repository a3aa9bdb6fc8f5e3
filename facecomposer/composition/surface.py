from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from facecomposer.composition.layer import Layer


@runtime_checkable
class RenderingSurface(Protocol):
    """
    Visual side of a composition: placement, drag/resize, hit-testing and
    flattening. The composition core never draws pixels itself.
    """

    def add_layer(self, layer: Layer) -> None: ...

    def add_background_layer(self, layer: Layer) -> None: ...

    async def remove_layer(self, name: str) -> Optional[str]:
        """Remove a layer visually; resolves to the deleted name, or None if nothing was removed."""
        ...

    def remove_selected(self) -> Optional[str]:
        """Remove the currently selected layer, if any, and return its name."""
        ...

    def toggle_fit_background(self, group_id: str) -> None: ...

    def undo(self) -> None: ...

    async def flatten(self) -> str:
        """Encoded bitmap of the current stacking (e.g. a PNG data URL)."""
        ...
