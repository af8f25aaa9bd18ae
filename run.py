"""
Development launcher for MindCanvas
===================================
Starts the mind map editor straight from a source checkout, without
`pip install -e .`. Installed copies use the `mindcanvas` console script or
`python -m mindcanvas` instead.

The launcher puts 'src' on sys.path and, on Windows, gives the process its
own taskbar identity so the window is not grouped under python.exe.

Usage:
    $ python run.py [--topic TEXT] [--outline FILE] [--open ID] [--store PATH] [--debug]
"""
import sys
import os

SRC_DIR: str = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src')
sys.path.insert(0, SRC_DIR)

WINDOWS_APP_ID = 'MindCanvas.Desktop'
try:
    import ctypes
    ctypes.windll.shell32.SetCurrentProcessExplicitAppUserModelID(WINDOWS_APP_ID)
except (AttributeError, ImportError):
    # ctypes.windll only exists on Windows
    pass

from mindcanvas.main import main

if __name__ == "__main__":
    main()
