"""
Test canvas coordinator against a local store
"""
import logging
from concurrent.futures import Executor, Future

import pytest

from config.base import BaseConfiguration
from tripcanvas.cache_manager import LocalCanvasStore
from tripcanvas.canvas_coordinator import CanvasCoordinator
from tripcanvas.data_models import GridItem, MomentImportance
from tripcanvas.ui_logic.interaction import InteractionState


class ImmediateExecutor(Executor):
    def submit(self, fn, *args, **kwargs):
        future = Future()
        future.set_result(fn(*args, **kwargs))
        return future


@pytest.fixture
def store(tmp_path):
    store = LocalCanvasStore(tmp_path / "canvas.json")
    store.add_items("trip-1", [
        GridItem("a", 0, 0, 1, 1),
        GridItem("b", 1, 0, 1, 2),
        GridItem("c", 0, 1, 1, 1),
    ])
    return store


@pytest.fixture
def coordinator(store):
    coordinator = CanvasCoordinator("trip-1", store, BaseConfiguration(), executor=ImmediateExecutor())
    yield coordinator
    coordinator.close()


def test_closed_canvas_has_no_items(coordinator):
    assert coordinator.items == []
    assert coordinator.layout() == {}
    with pytest.raises(RuntimeError):
        coordinator.place_new_moment("x")


def test_open_loads_trip(coordinator):
    items = coordinator.open(390)
    assert [item.id for item in items] == ["a", "b", "c"]
    layouts = coordinator.layout()
    assert layouts["b"].x == pytest.approx(200)
    assert layouts["b"].height == pytest.approx(210)
    assert coordinator.content_height() == pytest.approx(210 + 100)


def test_layout_waits_for_view_width(coordinator):
    coordinator.open()
    assert coordinator.layout() == {}

    coordinator.resize_view(0)
    assert coordinator.layout() == {}

    coordinator.resize_view(390)
    assert set(coordinator.layout()) == {"a", "b", "c"}


def test_place_new_moment_by_importance(coordinator):
    coordinator.open(390)
    hero = coordinator.place_new_moment("hero", MomentImportance.HERO)
    assert hero.position() == (0, 2, 2, 2)

    small = coordinator.place_new_moment("small", width=1, height=1)
    assert small.position() == (0, 4, 1, 1)
    assert [item.id for item in coordinator.items][-2:] == ["hero", "small"]


def test_place_new_moment_during_gesture(coordinator):
    coordinator.open(390)
    coordinator.controller.double_tap("a")
    with pytest.raises(RuntimeError):
        coordinator.place_new_moment("x")


def test_remove_moment_leaves_gap(coordinator):
    coordinator.open(390)
    assert coordinator.remove_moment("a") is True
    assert coordinator.remove_moment("a") is False
    by_id = {item.id: item.position() for item in coordinator.items}
    assert by_id == {"b": (1, 0, 1, 2), "c": (0, 1, 1, 1)}


def test_drop_is_saved_to_store(coordinator, store):
    coordinator.open(390)
    controller = coordinator.controller
    controller.long_press("c", 1.0)
    controller.drag_moved(184, -110)
    dropped = controller.drop()

    reloaded = {item.id: item.position() for item in store.load_items("trip-1")}
    assert reloaded == {item.id: item.position() for item in dropped}
    assert reloaded["c"] == (1, 0, 1, 1)


def test_save_failure_reaches_handler(coordinator):
    errors = []
    events = []
    coordinator.add_listener(events.append)
    coordinator.on_save_failed(errors.append)
    coordinator.open(390)

    # Placed locally only, so the store does not know it yet
    coordinator.place_new_moment("new")
    controller = coordinator.controller
    controller.long_press("a", 1.0)
    controller.drop()

    assert errors == ["Moment not found: new"]
    assert "dropped" in [event.kind for event in events]
    assert controller.state is InteractionState.IDLE

    coordinator.remove_listener(events.append)
    count = len(events)
    controller.double_tap("a")
    assert len(events) == count


def test_overlapping_layout_is_reported(tmp_path, caplog):
    store = LocalCanvasStore(tmp_path / "canvas.json")
    store.add_items("trip-1", [GridItem("a", 0, 0, 1, 2), GridItem("b", 0, 1, 1, 1)])
    coordinator = CanvasCoordinator("trip-1", store)

    with caplog.at_level(logging.WARNING):
        items = coordinator.open(390)

    assert "overlapping" in caplog.text
    assert [item.position() for item in items] == [(0, 0, 1, 2), (0, 1, 1, 1)]
    coordinator.close()


def test_revert_drops_moment_that_was_never_saved(coordinator):
    coordinator.open(390)
    coordinator.place_new_moment("draft", MomentImportance.SMALL)
    assert "draft" in [item.id for item in coordinator.items]

    assert coordinator.controller.revert_to_last_saved()
    assert [item.id for item in coordinator.items] == ["a", "b", "c"]
