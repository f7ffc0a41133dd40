"""
Concurrent access control for compactup.

Two compactup processes working on the same root directory could otherwise
interleave the cache-check-then-download sequence of an install, or the
remove-then-recreate sequence of the `bin/compactc` link. The install lock
serializes every operation that writes to the root.

Usage:
    from compactup.core.locking import LockManager

    lock_manager = LockManager(root)
    with lock_manager.install_lock(timeout=300):
        # Download, unpack and activate safely
        pass
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout

from .directory import LOCK_DIR_NAME
from .exceptions import LockTimeout

logger = logging.getLogger(__name__)


class LockManager:
    """
    Manages the advisory lock of a compactup root directory.

    Uses file-based locking with the `filelock` library for cross-process
    safety and automatic release on process death.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, root: Path):
        """
        Initialize lock manager.

        Args:
            root: compactup root directory (lock files go in root/lock/)
        """
        self.lock_dir = Path(root) / LOCK_DIR_NAME

    @property
    def install_lock_path(self) -> Path:
        return self.lock_dir / "install.lock"

    @contextmanager
    def install_lock(self, timeout: int = 300):
        """
        Acquire the root lock for installs, activation and cleanup.

        Args:
            timeout: Maximum wait time in seconds (default: 300 for long downloads)

        Yields:
            None

        Raises:
            LockTimeout: If lock can't be acquired within timeout
        """
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        lock_path = self.install_lock_path
        lock = FileLock(lock_path, timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired install lock: {lock_path}")
                yield
                logger.debug(f"Released install lock: {lock_path}")
        except Timeout as e:
            raise LockTimeout(
                f"Could not acquire install lock after {timeout}s. "
                "Another compact process may be installing a compiler."
            ) from e
