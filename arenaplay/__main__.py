"""
Entry point for running the arenaplay package as a module.

Usage:
    python -m arenaplay --help
    python -m arenaplay 10 --agent2 -2
"""

from arenaplay.cli import main

if __name__ == "__main__":
    main()
