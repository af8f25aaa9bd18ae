"""
Background Workers (Threading)
==============================
This module contains QThread subclasses for handling long-running tasks.

Why is this file needed?
------------------------
1. Responsiveness: Topic expansion calls an external language-model backend.
   If we ran it on the main thread, the GUI would freeze.
2. Signals: The worker hands back one complete graph through a Qt Signal,
   which is delivered on the GUI thread. The interactive core never sees
   partial data.

Classes:
    TopicGenerator: Protocol of the external expansion collaborator.
    ExpansionWorker: Runs a generator off the GUI thread.
"""
from __future__ import annotations

import logging
from typing import List, Protocol, Sequence, Tuple, runtime_checkable

from PySide6.QtCore import QThread, Signal

from mindcanvas.model.graph import MindMapGraph

logger = logging.getLogger(__name__)


@runtime_checkable
class TopicGenerator(Protocol):
    """External collaborator: topic -> [(main branch, [leaves...]), ...]."""
    def expand(self, topic: str) -> Sequence[Tuple[str, Sequence[str]]]: ...


class StaticTopicGenerator:
    """Generator backed by a fixed outline (outline files, tests)."""

    def __init__(self, outline: Sequence[Tuple[str, Sequence[str]]]) -> None:
        self._outline: List[Tuple[str, List[str]]] = [(m, list(leaves)) for m, leaves in outline]

    def expand(self, topic: str) -> List[Tuple[str, List[str]]]:
        return [(m, list(leaves)) for m, leaves in self._outline]


def expand_topic(generator: TopicGenerator, topic: str) -> MindMapGraph:
    """Run the generator and convert its output into a graph."""
    logger.info(f"Expanding topic '{topic}'...")
    outline = generator.expand(topic)
    return MindMapGraph.from_outline(topic, list(outline))


class ExpansionWorker(QThread):
    # Signals to update the UI from the background
    progress_updated = Signal(str)
    graph_ready = Signal(object)  # MindMapGraph
    error_occurred = Signal(str)

    def __init__(self, generator: TopicGenerator, topic: str) -> None:
        super().__init__()
        self.generator = generator
        self.topic = topic

    def run(self) -> None:
        try:
            self.progress_updated.emit(f"Generating mind map for '{self.topic}'...")
            graph = expand_topic(self.generator, self.topic)
            self.graph_ready.emit(graph)
        except Exception as e:
            # Failures of the external generator stay outside the core
            logger.error(f"Error in ExpansionWorker: {e}")
            self.error_occurred.emit(str(e))
