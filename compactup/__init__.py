"""
compactup - version manager for the Compact compiler toolchain.

Installs published `compactc` releases into a root directory (default
~/.compact) and keeps a `bin/compactc` link pointing at the active one.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("compactup")
except PackageNotFoundError:
    __version__ = "0.1.0"
