"""
Invocation of installed compilers.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ..core.exceptions import NotFoundError
from ..core.platform import Target
from .layout import ToolchainLayout
from .linking import CurrentToolchainLink
from .version import Version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Compiler:
    """An installed compiler."""

    version: Version
    target: Target
    entrypoint: Path

    @classmethod
    def open(cls, layout: ToolchainLayout, version: Version, target: Target) -> "Compiler":
        """
        Open an installed compiler.

        Raises:
            NotFoundError: If the version isn't installed for the target
        """
        entrypoint = layout.entrypoint_path(version, target)
        if not entrypoint.is_file():
            raise NotFoundError(f"Couldn't find compiler for {target} ({version})")
        return cls(version=version, target=target, entrypoint=entrypoint)

    @classmethod
    def current(cls, link: CurrentToolchainLink) -> "Compiler":
        """
        Open the compiler the current link points at.

        Raises:
            NotFoundError: If no default compiler is set
            StateError: If the link is inconsistent
        """
        active = link.resolve()
        if active is None:
            raise NotFoundError("No default compiler set")
        return cls(
            version=active.version, target=active.target, entrypoint=active.entrypoint
        )

    def command(self, args: Sequence[str]) -> List[str]:
        return [str(self.entrypoint), *args]

    def invoke(self, args: Sequence[str], cwd: Optional[Path] = None) -> int:
        """
        Run the compiler with inherited standard streams.

        Args:
            args: Compiler arguments
            cwd: Optional working directory

        Returns:
            Compiler exit code
        """
        cmd = self.command(args)
        logger.debug(f"Running {' '.join(cmd)}")
        result = subprocess.run(cmd, cwd=cwd)
        return result.returncode
