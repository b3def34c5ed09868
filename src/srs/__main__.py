"""
Entry point for running Recall as a module.

Usage:
    python -m src.srs review
    python -m src.srs stats
    python -m src.srs --help
"""
from .cli import main

if __name__ == "__main__":
    main()
