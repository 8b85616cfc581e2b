"""
Entry point for running the trainer as a module.

Usage:
    python -m src.trainer study
    python -m src.trainer stats
    python -m src.trainer --help
"""
from .cli import main

if __name__ == "__main__":
    main()
