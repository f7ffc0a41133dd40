"""
Archive extraction through an external program.

Release archives are unpacked by running an extraction program (`unzip` by
default) with the archive as argument, from inside the directory the compiler
is installed in. Output is captured rather than streamed so that a failure can
be reported with everything needed to reproduce it by hand.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from ..core.exceptions import ExtractionError

logger = logging.getLogger(__name__)


class Unpacker:
    """Runs the external archive extraction program."""

    def __init__(self, program: str = "unzip", args: Optional[Sequence[str]] = None):
        """
        Initialize unpacker.

        Args:
            program: Extraction program name or path
            args: Arguments placed before the archive path (default: ['-o'],
                overwrite files left by an interrupted extraction)
        """
        self.program = program
        self.args = list(args) if args is not None else ["-o"]

    def command(self, archive: Path) -> List[str]:
        return [self.program, *self.args, str(archive)]

    def unpack(self, archive: Path, cwd: Path) -> None:
        """
        Extract an archive into a directory.

        Args:
            archive: Archive to extract
            cwd: Working directory of the extraction program

        Raises:
            ExtractionError: If the program can't be started or exits non-zero
        """
        cmd = self.command(archive)
        logger.debug(f"Running {' '.join(cmd)} in {cwd}")

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ExtractionError(
                f"Failed to spawn artifact extraction command: {e}",
                command=cmd,
                cwd=cwd,
            ) from e

        if result.returncode != 0:
            raise ExtractionError(
                "Artifact extraction failed",
                command=cmd,
                cwd=cwd,
                returncode=result.returncode,
                stderr=result.stderr,
            )

        logger.debug(f"Extraction output: {result.stdout.strip()}")
