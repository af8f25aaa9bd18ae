"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths scattered throughout the code.
2. User data: The mind map store lives in one per-user directory, which can
   be redirected with the MINDCANVAS_HOME environment variable (tests,
   portable installs).

Exports:
    DATA_DIR_ENV (str): Name of the environment variable overriding the data directory.
    STORE_FILENAME (str): File name of the default store.
"""
import os
from pathlib import Path

DATA_DIR_ENV: str = "MINDCANVAS_HOME"
STORE_FILENAME: str = "mindmaps.h5"


def get_data_dir() -> Path:
    """Per-user data directory, created on demand."""
    override = os.environ.get(DATA_DIR_ENV)
    data_dir = Path(override).expanduser() if override else Path.home() / ".mindcanvas"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def default_store_path() -> str:
    """Absolute path of the default HDF5 store."""
    return str(get_data_dir() / STORE_FILENAME)
