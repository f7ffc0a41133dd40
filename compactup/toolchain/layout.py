"""
On-disk layout of installed compilers.

    <root>/bin/compactc                                -> link to active entrypoint
    <root>/versions/<version>/<target>/compactc        compiler entrypoint
    <root>/versions/<version>/<target>/artifact.zip    cached release archive

The version and target of an entrypoint are encoded in its two parent
directories. `decompose` reads them back, which is how the active compiler is
recovered from the link alone. Changing this shape breaks every existing
installation.
"""

import logging
from pathlib import Path
from typing import List, Tuple

from ..core.directory import BIN_DIR_NAME, VERSIONS_DIR_NAME
from ..core.exceptions import ParseError, StateError
from ..core.platform import Target, UnsupportedPlatformError
from .version import Version

logger = logging.getLogger(__name__)

TOOLCHAIN_NAME = "compactc"
ARCHIVE_NAME = "artifact.zip"


class ToolchainLayout:
    """Path computations for a compactup root directory. Performs no I/O."""

    def __init__(self, root: Path):
        self.root = Path(root)

    @property
    def bin_dir(self) -> Path:
        return self.root / BIN_DIR_NAME

    @property
    def versions_dir(self) -> Path:
        return self.root / VERSIONS_DIR_NAME

    @property
    def link_path(self) -> Path:
        """Fixed location of the current compiler link."""
        return self.bin_dir / TOOLCHAIN_NAME

    def version_dir(self, version: Version) -> Path:
        return self.versions_dir / str(version)

    def target_dir(self, version: Version, target: Target) -> Path:
        """Directory the archive is unpacked in."""
        return self.version_dir(version) / target.value

    def archive_path(self, version: Version, target: Target) -> Path:
        return self.target_dir(version, target) / ARCHIVE_NAME

    def entrypoint_path(self, version: Version, target: Target) -> Path:
        return self.target_dir(version, target) / TOOLCHAIN_NAME

    def decompose(self, entrypoint: Path) -> Tuple[Version, Target]:
        """
        Recover the version and target from an entrypoint path.

        Args:
            entrypoint: Path of the form .../<version>/<target>/compactc

        Returns:
            (version, target)

        Raises:
            StateError: If the path doesn't have the expected shape
        """
        entrypoint = Path(entrypoint)

        if entrypoint.name != TOOLCHAIN_NAME:
            raise StateError(
                f"Expected the compiler entrypoint to be named "
                f"`{TOOLCHAIN_NAME}': {entrypoint}"
            )

        target_dir = entrypoint.parent
        try:
            target = Target.parse(target_dir.name)
        except UnsupportedPlatformError as e:
            raise StateError(
                f"Couldn't parse the target parent directory ({target_dir}): {e}"
            ) from e

        version_dir = target_dir.parent
        try:
            version = Version.parse(version_dir.name)
        except ParseError as e:
            raise StateError(
                f"Couldn't parse the version parent directory ({version_dir}): {e}"
            ) from e

        return version, target

    def installed_versions(self) -> List[Version]:
        """
        Versions that have a directory under versions/, ascending.

        Entries whose name isn't a version are ignored.
        """
        if not self.versions_dir.is_dir():
            return []

        versions = []
        for entry in self.versions_dir.iterdir():
            if not entry.is_dir():
                continue
            try:
                versions.append(Version.parse(entry.name))
            except ParseError:
                logger.debug(f"Skipping unrecognized version directory: {entry}")

        return sorted(versions)
