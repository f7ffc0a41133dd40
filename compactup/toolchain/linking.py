"""
compactup/toolchain/linking.py

Symlink management for the active compiler.

The link at `<root>/bin/compactc` is both how a compiler version is activated
and the only record of which version is active. Reading it back decomposes
the target path into (version, target); see ToolchainLayout.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.exceptions import NotFoundError, StateError
from ..core.platform import Target
from .layout import ToolchainLayout
from .version import Version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveToolchain:
    """The compiler the current link points at."""

    version: Version
    target: Target
    entrypoint: Path


class CurrentToolchainLink:
    """Reads and replaces the `bin/compactc` link of a root directory."""

    def __init__(self, layout: ToolchainLayout):
        """
        Initialize link manager.

        Args:
            layout: Layout of the root directory holding the link
        """
        self.layout = layout

    @property
    def path(self) -> Path:
        return self.layout.link_path

    def resolve(self) -> Optional[ActiveToolchain]:
        """
        Read the current compiler from the link.

        Returns:
            The active compiler, or None if no link exists

        Raises:
            StateError: If the link exists but is unreadable, dangling, or
                doesn't point at an entrypoint of the expected layout
        """
        link_path = self.path

        try:
            target_str = os.readlink(link_path)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StateError(f"Failed to read symbolic link: `{link_path}': {e}") from e

        entrypoint = Path(target_str)
        if not entrypoint.is_absolute():
            entrypoint = link_path.parent / entrypoint

        if not entrypoint.is_file():
            raise StateError(
                f"Expecting a file: `{entrypoint}' (linked from `{link_path}')"
            )

        version, target = self.layout.decompose(entrypoint)
        return ActiveToolchain(version=version, target=target, entrypoint=entrypoint)

    def activate(self, entrypoint: Path) -> ActiveToolchain:
        """
        Point the link at an installed compiler.

        The link is read back after being replaced, so a stale link or a
        concurrent activation is reported instead of assumed away.

        Args:
            entrypoint: Installed compiler entrypoint (layout-shaped path)

        Returns:
            The newly active compiler

        Raises:
            NotFoundError: If the entrypoint doesn't exist
            StateError: If a non-link occupies the link location, or the link
                doesn't resolve to the activated version afterwards
        """
        version, target = self.layout.decompose(entrypoint)
        entrypoint = Path(entrypoint).absolute()

        if not entrypoint.is_file():
            raise NotFoundError(f"Compiler is not installed: {entrypoint}")

        link_path = self.path

        if link_path.is_symlink():
            try:
                link_path.unlink()
            except OSError as e:
                raise StateError(
                    f"Failed to remove previous symlink `{link_path}': {e}"
                ) from e
        elif link_path.exists():
            raise StateError(
                f"Refusing to replace `{link_path}': it is not a symbolic link"
            )

        link_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            os.symlink(entrypoint, link_path)
        except OSError as e:
            raise StateError(
                f"Failed to create symlink from `{link_path}' to `{entrypoint}': {e}"
            ) from e
        logger.info(f"Created symlink: {link_path} -> {entrypoint}")

        active = self.resolve()
        if active is None:
            raise StateError("Failed to validate installed default compiler")

        if active.version != version or active.target != target:
            raise StateError(
                "Installation failed, the default compiler is still set to "
                f"version {active.version} ({active.target})"
            )

        return active

    def deactivate(self) -> bool:
        """
        Remove the link.

        Returns:
            True if a link was removed, False if none existed

        Raises:
            StateError: If a non-link occupies the link location
        """
        link_path = self.path

        if link_path.is_symlink():
            link_path.unlink()
            logger.info(f"Removed link: {link_path}")
            return True

        if link_path.exists():
            raise StateError(
                f"Refusing to remove `{link_path}': it is not a symbolic link"
            )

        return False
