"""
Root directory management for compactup.

This module resolves the compactup root directory and ensures its required
subdirectories exist.

Directory Structure:
    Root (~/.compact/ or $COMPACT_DIRECTORY):
        - bin/            : The `compactc` link to the active compiler
        - versions/       : Installed compilers, one directory per version
          - <version>/<target>/compactc      : Compiler entrypoint
          - <version>/<target>/artifact.zip  : Cached release archive
        - lock/           : Concurrent access control files
        - config.yaml     : Optional configuration file
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .exceptions import CompactupError

logger = logging.getLogger(__name__)

DIRECTORY_ENV_VAR = "COMPACT_DIRECTORY"

BIN_DIR_NAME = "bin"
VERSIONS_DIR_NAME = "versions"
LOCK_DIR_NAME = "lock"
CONFIG_FILE_NAME = "config.yaml"


class DirectoryError(CompactupError):
    """Raised when the root directory cannot be resolved or created."""

    pass


def get_default_root() -> Path:
    """
    Get the default root directory path.

    Returns:
        Path: ~/.compact

    Raises:
        DirectoryError: If the home directory cannot be determined
    """
    try:
        return Path.home() / ".compact"
    except RuntimeError as e:
        raise DirectoryError(
            "Cannot determine the home directory. "
            f"Set {DIRECTORY_ENV_VAR} to choose a compact directory."
        ) from e


def resolve_root(directory: Optional[Path] = None) -> Path:
    """
    Resolve the root directory.

    Precedence: explicit argument, then $COMPACT_DIRECTORY, then ~/.compact.

    Args:
        directory: Optional explicit root directory

    Returns:
        Absolute root directory path
    """
    if directory is None:
        env_value = os.environ.get(DIRECTORY_ENV_VAR)
        if env_value:
            directory = Path(env_value)
        else:
            directory = get_default_root()

    return Path(directory).expanduser().absolute()


def ensure_root_structure(root: Path) -> Path:
    """
    Create the root's required subdirectories if they don't exist.

    Succeeds without changes if they are already present.

    Args:
        root: Root directory

    Returns:
        The root directory

    Raises:
        DirectoryError: If a directory cannot be created
    """
    for subdir in (root / BIN_DIR_NAME, root / VERSIONS_DIR_NAME):
        if subdir.is_dir():
            continue
        try:
            subdir.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Created directory: {subdir}")
        except OSError as e:
            raise DirectoryError(
                f"Failed to create compact directory: {subdir}: {e}"
            ) from e

    return root


def get_config_path(root: Path) -> Path:
    """Return the default configuration file path for a root."""
    return root / CONFIG_FILE_NAME
