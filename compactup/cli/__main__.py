"""
Entry point for running the compact CLI as a module.

Usage: python -m compactup.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
