"""
compactup/toolchain/cleanup.py

Removal of installed compilers and cached release archives.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..core.download import partial_path
from ..core.locking import LockManager
from .layout import ARCHIVE_NAME, ToolchainLayout
from .linking import CurrentToolchainLink

logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    """Result of cleanup operation."""

    removed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    space_reclaimed: int = 0
    link_removed: bool = False


class ToolchainCleanupManager:
    """Manages cleanup of a root directory."""

    def __init__(
        self,
        layout: ToolchainLayout,
        link: Optional[CurrentToolchainLink] = None,
        lock_manager: Optional[LockManager] = None,
        lock_timeout: int = 300,
    ):
        """
        Initialize cleanup manager.

        Args:
            layout: Layout of the root directory to clean
            link: Current compiler link (default: the layout's link)
            lock_manager: Lock manager (default: lock of the layout's root)
            lock_timeout: Seconds to wait for the root lock
        """
        self.layout = layout
        self.link = link or CurrentToolchainLink(layout)
        self.lock_manager = lock_manager or LockManager(layout.root)
        self.lock_timeout = lock_timeout

    def remove_versions(self, keep_current: bool = False) -> CleanupResult:
        """
        Remove installed compiler versions.

        Args:
            keep_current: Keep the active version and its link

        Returns:
            CleanupResult listing removed and kept versions

        Raises:
            StateError: If the current link is inconsistent
        """
        result = CleanupResult()

        with self.lock_manager.install_lock(timeout=self.lock_timeout):
            keep = None
            if keep_current:
                current = self.link.resolve()
                keep = current.version if current else None
            else:
                result.link_removed = self.link.deactivate()

            for version in self.layout.installed_versions():
                if version == keep:
                    result.skipped.append(str(version))
                    continue

                path = self.layout.version_dir(version)
                size = _calculate_directory_size(path)
                shutil.rmtree(path)
                result.removed.append(str(version))
                result.space_reclaimed += size
                logger.info(f"Removed compiler {version}: {path}")

        return result

    def remove_archives(self) -> CleanupResult:
        """
        Remove cached release archives, keeping unpacked compilers.

        Returns:
            CleanupResult listing the removed archive paths
        """
        result = CleanupResult()

        with self.lock_manager.install_lock(timeout=self.lock_timeout):
            archive = Path(ARCHIVE_NAME)
            for name in (archive.name, partial_path(archive).name):
                for path in sorted(self.layout.versions_dir.glob(f"*/*/{name}")):
                    result.space_reclaimed += path.stat().st_size
                    path.unlink()
                    result.removed.append(str(path))
                    logger.info(f"Removed cached archive: {path}")

        return result


def _calculate_directory_size(path: Path) -> int:
    """Total size in bytes of the regular files under a directory."""
    total = 0
    for file in path.rglob("*"):
        if file.is_file() and not file.is_symlink():
            total += file.stat().st_size
    return total
