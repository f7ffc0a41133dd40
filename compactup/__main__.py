"""
Entry point for running the compact CLI as a module.

Usage: python -m compactup [command] [options]
"""

from compactup.cli.parser import main

if __name__ == "__main__":
    main()
