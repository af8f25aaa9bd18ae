"""Command-line interface."""
from mindcanvas.main import main

if __name__ == "__main__":
    main()
