"""Shared fixtures. Qt runs headless through the offscreen platform plugin."""
from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from mindcanvas.model.graph import MindMapGraph
from mindcanvas.model.state import MindMapState

TRAVEL_OUTLINE = [
    ("Destinations", ["Beaches", "Mountains"]),
    ("Budget", ["Flights", "Hotels"]),
    ("Packing", ["Clothes", "Documents"]),
]


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def travel_graph() -> MindMapGraph:
    return MindMapGraph.from_outline("Travel", TRAVEL_OUTLINE)


@pytest.fixture
def travel_state(travel_graph) -> MindMapState:
    state = MindMapState(graph=travel_graph, surface_width=800, surface_height=600)
    state.relayout()
    return state


@pytest.fixture
def controller(qapp, travel_state):
    from mindcanvas.controller.interaction import InteractionController

    return InteractionController(travel_state)


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path, monkeypatch):
    # Keep the data directory out of the real home
    monkeypatch.setenv("MINDCANVAS_HOME", str(tmp_path / "home"))
