"""
Tests for CompositionController.

Verifies:
- background centering, started/changed flags
- overlay refusal before background, duplicate drop, halted session
- removals, fit, undo delegation
- export, save and load through the persistence store
"""
import asyncio

import pytest

from facecomposer.app.errors import KEY_EXISTS_ERROR_CODE, PersistenceError
from facecomposer.composition.layer import BACKGROUND_NAME, LayerOptions


def run(coro):
    return asyncio.run(coro)


async def _with_background(controller, *overlays):
    assert await controller.add_background("bg.png")
    for name in overlays:
        assert await controller.add_image("a.png", name, {"w": 50})


# ══════════════════════════════════════════════════════════════════════════
# Adding layers
# ══════════════════════════════════════════════════════════════════════════

class TestAddBackground:

    def test_centered_and_flags(self, controller, surface):
        assert run(controller.add_background("bg.png"))
        bg = controller.store.background
        assert (bg.x, bg.y) == (50, 0)
        assert bg.is_draggable is False and bg.is_resizable is False
        assert controller.started and controller.changed
        assert surface.background.name == BACKGROUND_NAME

    def test_flags_start_false(self, controller):
        assert controller.started is False
        assert controller.changed is False

    def test_second_background_refused(self, controller):
        async def go():
            await controller.add_background("bg.png")
            return await controller.add_background("wide.png")

        assert run(go()) is False
        assert len(controller.store) == 1


class TestAddImage:

    def test_refused_before_background(self, controller, surface):
        async def go():
            return [
                await controller.add_image("a.png", "a", {}),
                await controller.add_image("wide.png", "b", {"x": 1}),
            ]

        assert run(go()) == [False, False]
        assert len(controller.store) == 0
        assert surface.layers == []
        assert controller.changed is False
        assert not controller.loader.is_cached("a.png")

    def test_height_derived_from_width(self, controller, surface):
        run(_with_background(controller, "a"))
        layer = controller.store.get("a")
        assert (layer.w, layer.h) == (50, 100)
        assert layer.is_draggable and layer.is_resizable
        assert [l.name for l in surface.layers] == ["a"]

    def test_accepts_options_model(self, controller):
        async def go():
            await controller.add_background("bg.png")
            return await controller.add_image("wide.png", "w", LayerOptions(h=50, x=10))

        assert run(go())
        layer = controller.store.get("w")
        assert (layer.x, layer.w, layer.h) == (10, 100, 50)

    def test_duplicate_name_dropped(self, controller, surface):
        async def go():
            await _with_background(controller, "a")
            return await controller.add_image("wide.png", "a", {"x": 5})

        assert run(go()) is False
        assert len(controller.store) == 2
        assert controller.store.get("a").image.source == "a.png"
        assert len(surface.layers) == 1

    def test_duplicate_does_not_set_changed_alone(self, controller):
        run(_with_background(controller, "a"))
        controller._changed = False
        assert run(controller.add_image("a.png", "a", {})) is False
        assert controller.changed is False

    def test_concurrent_same_name_keeps_one(self, controller):
        async def go():
            await controller.add_background("bg.png")
            return await asyncio.gather(
                controller.add_image("a.png", "x", {}),
                controller.add_image("wide.png", "x", {}),
            )

        results = run(go())
        assert sorted(results) == [False, True]
        assert len(controller.store) == 2


class TestHalted:

    def test_load_failure_halts_session(self, controller, notifications):
        async def go():
            await _with_background(controller, "a")
            failed = await controller.add_image("bad.png", "b", {})
            after = [
                await controller.add_image("wide.png", "c", {}),
                await controller.add_image("a.png", "d", {}),
            ]
            return failed, after

        failed, after = run(go())
        assert failed is False
        assert after == [False, False]
        assert controller.halted
        assert controller.store.names() == [BACKGROUND_NAME, "a"]
        assert notifications == ["Error loading some image"]

    def test_background_failure_halts(self, controller):
        async def go():
            assert await controller.add_background("missing.png") is False
            return await controller.add_background("bg.png")

        assert run(go()) is False
        assert controller.started is False
        assert controller.halted

    def test_started_survives_removal(self, controller, surface):
        run(_with_background(controller, "a"))
        run(controller.remove_all())
        assert controller.started


# ══════════════════════════════════════════════════════════════════════════
# Removal and surface-only operations
# ══════════════════════════════════════════════════════════════════════════

class TestRemoval:

    def test_remove_selected(self, controller, surface):
        run(_with_background(controller, "a", "b"))
        controller._changed = False
        surface.selected = "a"
        assert controller.remove_selected() == "a"
        assert controller.store.names() == [BACKGROUND_NAME, "b"]
        assert controller.changed

    def test_remove_selected_nothing_selected(self, controller):
        run(_with_background(controller, "a"))
        controller._changed = False
        assert controller.remove_selected() is None
        assert controller.changed is False
        assert len(controller.store) == 2

    def test_remove_all_counts_confirmed_deletions(self, controller, surface):
        run(_with_background(controller, "a", "b", "c"))
        removed = run(controller.remove_all())
        assert removed == 3
        assert surface.removed == ["c", "b", "a"]
        assert controller.store.names() == [BACKGROUND_NAME]

    def test_remove_all_sets_changed_when_empty(self, controller):
        assert run(controller.remove_all()) == 0
        assert controller.changed

    def test_fit_background(self, controller, surface):
        run(_with_background(controller))
        controller._changed = False
        controller.fit_background()
        assert surface.fit_toggles == [BACKGROUND_NAME]
        assert controller.changed

    def test_undo_delegates_without_touching_store(self, controller, surface):
        run(_with_background(controller, "a"))
        controller.undo()
        assert surface.undo_calls == 1
        assert controller.store.names() == [BACKGROUND_NAME, "a"]


# ══════════════════════════════════════════════════════════════════════════
# Export / save / load
# ══════════════════════════════════════════════════════════════════════════

class TestPersistence:

    def test_export_invokes_callback(self, controller, surface):
        got = []
        data = run(controller.export_flattened(got.append))
        assert data == surface.flattened
        assert got == [surface.flattened]
        assert controller.changed is False

    @pytest.mark.parametrize("name", ["", None])
    def test_save_without_name_is_invalid(self, controller, persistence, notifications, name):
        result = run(controller.save(name))
        assert result.status == "invalid_name"
        assert not result.ok
        assert persistence.put_calls == []
        assert notifications == ["Insert a name"]

    def test_save_and_load(self, controller, surface, persistence):
        async def go():
            saved = await controller.save("mine")
            return saved, await controller.load("mine")

        saved, loaded = run(go())
        assert saved.ok
        assert loaded == surface.flattened
        assert persistence.docs["mine"]["session_id"] == "comp_test"
        assert controller.pending_save is False

    def test_save_collision_reported_distinctly(self, controller, notifications):
        async def go():
            await controller.save("mine")
            return await controller.save("mine")

        result = run(go())
        assert result.status == "collision"
        assert result.error_code == KEY_EXISTS_ERROR_CODE
        assert notifications[-1] == "Image already exists"

    def test_save_generic_failure(self, controller, persistence):
        async def broken_put(key, value, session_id=None):
            raise PersistenceError("disk full", code=13)

        persistence.put = broken_put
        result = run(controller.save("mine"))
        assert result.status == "failed"
        assert result.error_code == 13
        assert controller.pending_save is False

    def test_load_missing_resolves_none(self, controller):
        got = []
        assert run(controller.load("nothing", got.append)) is None
        assert got == [None]


# ══════════════════════════════════════════════════════════════════════════
# In-flight ordering
# ══════════════════════════════════════════════════════════════════════════

class TestInFlight:

    def test_oversized_background_halts(self, controller, notifications, monkeypatch):
        from PIL import Image

        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        assert run(controller.add_background("bg.png")) is False
        assert controller.halted
        assert controller.started is False
        assert notifications == ["Error loading some image"]

    def test_load_finishing_after_failure_is_dropped(self, controller, surface, monkeypatch):
        real_load = controller.loader.load

        async def go():
            await controller.add_background("bg.png")
            failed = asyncio.Event()

            async def gated_load(source):
                if source == "a.png":
                    await failed.wait()
                    return await real_load(source)
                try:
                    return await real_load(source)
                finally:
                    failed.set()

            monkeypatch.setattr(controller.loader, "load", gated_load)
            return await asyncio.gather(
                controller.add_image("bad.png", "b", {}),
                controller.add_image("a.png", "g", {}),
            )

        assert run(go()) == [False, False]
        assert controller.halted
        assert not controller.store.exists("g")
        assert surface.layers == []

    def test_pending_save_while_writing(self, controller, persistence):
        real_put = persistence.put

        async def go():
            entered = asyncio.Event()
            release = asyncio.Event()

            async def slow_put(key, value, session_id=None):
                entered.set()
                await release.wait()
                await real_put(key, value, session_id=session_id)

            persistence.put = slow_put
            task = asyncio.create_task(controller.save("mine"))
            await entered.wait()
            during = controller.pending_save
            release.set()
            result = await task
            return during, result

        during, result = run(go())
        assert during is True
        assert result.ok
        assert controller.pending_save is False
