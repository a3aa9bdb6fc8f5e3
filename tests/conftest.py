"""
Shared fixtures for composition tests.

Provides a recording rendering surface, an in-memory persistence store,
PNG fixtures written with Pillow and a ready controller.
"""
from typing import List, Optional, Tuple

import pytest
from PIL import Image

from facecomposer.composition.controller import CompositionController
from facecomposer.db.repositories import InMemoryPersistenceStore
from facecomposer.loader.image_loader import AsyncImageLoader


# ── Fake collaborators ──────────────────────────────────────────────────

class FakeSurface:
    """Records every call; removals are confirmed unless told otherwise."""

    def __init__(self):
        self.layers: List = []
        self.background = None
        self.selected: Optional[str] = None
        self.refuse: set = set()
        self.removed: List[str] = []
        self.fit_toggles: List[str] = []
        self.undo_calls = 0
        self.flattened = "data:image/png;base64,AAAA"

    def add_layer(self, layer):
        self.layers.append(layer)

    def add_background_layer(self, layer):
        self.background = layer

    async def remove_layer(self, name):
        if name in self.refuse:
            return None
        self.removed.append(name)
        self.layers = [l for l in self.layers if l.name != name]
        return name

    def remove_selected(self):
        name, self.selected = self.selected, None
        if name is not None:
            self.layers = [l for l in self.layers if l.name != name]
        return name

    def toggle_fit_background(self, group_id):
        self.fit_toggles.append(group_id)

    def undo(self):
        self.undo_calls += 1

    async def flatten(self):
        return self.flattened


class SpyPersistence(InMemoryPersistenceStore):
    def __init__(self):
        super().__init__()
        self.put_calls: List[Tuple[str, str]] = []

    async def put(self, key, value, session_id=None):
        self.put_calls.append((key, value))
        await super().put(key, value, session_id=session_id)


# ── Images ──────────────────────────────────────────────────────────────

def write_png(path, size, color=(255, 0, 0, 255)):
    Image.new("RGBA", size, color).save(path, format="PNG")
    return str(path)


@pytest.fixture
def image_dir(tmp_path):
    """bg.png 100x100, a.png 100x200, wide.png 300x150, bad.png (not an image)"""
    write_png(tmp_path / "bg.png", (100, 100))
    write_png(tmp_path / "a.png", (100, 200), (0, 255, 0, 255))
    write_png(tmp_path / "wide.png", (300, 150), (0, 0, 255, 255))
    (tmp_path / "bad.png").write_bytes(b"this is not a png")
    return tmp_path


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def persistence():
    return SpyPersistence()


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def controller(image_dir, surface, persistence, notifications):
    """Controller on a 200x100 surface with images rooted at image_dir"""
    return CompositionController(
        surface,
        AsyncImageLoader(image_dir),
        persistence,
        surface_width=200,
        surface_height=100,
        notify=notifications.append,
        session_id="comp_test",
    )
