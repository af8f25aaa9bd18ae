"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Parses the command line and sets up logging.
2. Instantiates the shared state (MindMapState) and the store.
3. Instantiates the controller and the Main Window (View) and wires them.
4. Prevents circular import errors by being the orchestrator.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from mindcanvas.app.application import create_app, last_store_path
from mindcanvas.config import default_store_path
from mindcanvas.controller.interaction import InteractionController
from mindcanvas.controller.workers import StaticTopicGenerator
from mindcanvas.logging_config import setup_logging
from mindcanvas.model.errors import MindMapError
from mindcanvas.model.graph import DEFAULT_TOPIC, MindMapGraph
from mindcanvas.model.io import MindMapStore
from mindcanvas.model.outline import parse_outline
from mindcanvas.model.state import MindMapState
from mindcanvas.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mindcanvas", description="Interactive mind map editor.")
    parser.add_argument("--topic", default=None, help="central topic of a new mind map")
    parser.add_argument("--outline", type=Path, default=None,
                        help="open an outline file (bullets or JSON) in interactive mode")
    parser.add_argument("--open", dest="open_id", default=None, help="open a stored mind map by id")
    parser.add_argument("--store", default=None, help="path of the HDF5 mind map store")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    parser.add_argument("--log-file", default=None, help="also write the log to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)

    # 2. Create the Qt Application
    app = create_app()

    # 3. Initialize the shared state, the store and the controller
    store = MindMapStore(args.store or last_store_path() or default_store_path())
    logger.info(f"Using store {store.filepath}")
    state = MindMapState(graph=MindMapGraph(args.topic or DEFAULT_TOPIC))
    controller = InteractionController(state)

    # 4. Initialize the Main Window, passing the model and the controller
    window = MainWindow(state, controller, store)
    window.show()

    # 5. Optional start-up content
    if args.open_id:
        window.open_stored(args.open_id)
    elif args.outline is not None:
        try:
            topic, outline = parse_outline(args.outline.read_text(encoding="utf-8"))
        except (OSError, MindMapError) as e:
            logger.error(f"Could not read outline {args.outline}: {e}")
            window.on_expansion_failed(str(e))
        else:
            topic = args.topic or topic or args.outline.stem
            window.start_expansion(StaticTopicGenerator(outline), topic)

    # 6. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
