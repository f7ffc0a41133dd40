"""
Centralized exception hierarchy for compactup.

Every error raised by the version manager derives from CompactupError so the
CLI boundary can report it uniformly.
"""

from pathlib import Path
from typing import Optional, Sequence, Union


# ============================================================================
# Base Exceptions
# ============================================================================


class CompactupError(Exception):
    """Base exception for all compactup errors."""

    pass


class ConfigError(CompactupError):
    """Configuration parsing or validation error."""

    pass


class LockTimeout(CompactupError):
    """Raised when the root directory lock cannot be acquired within timeout."""

    pass


# ============================================================================
# Version Exceptions
# ============================================================================


class ParseError(CompactupError, ValueError):
    """Malformed version or version specifier text."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid version '{text}': {reason}")


# ============================================================================
# Release Catalogue Exceptions
# ============================================================================


class FetchError(CompactupError):
    """Release source query or artifact download failed."""

    pass


class ChecksumError(FetchError):
    """Downloaded or cached artifact failed its integrity check."""

    pass


class FormatError(CompactupError):
    """A remote release record does not have the expected shape."""

    def __init__(self, message: str, release: Optional[str] = None):
        self.release = release
        if release:
            message = f"{message} (release: {release})"
        super().__init__(message)


class NotFoundError(CompactupError):
    """Requested version is unknown, or no toolchain is installed."""

    pass


# ============================================================================
# Installation Exceptions
# ============================================================================


class ExtractionError(CompactupError):
    """The archive extraction program failed."""

    def __init__(
        self,
        message: str,
        command: Sequence[str] = (),
        cwd: Optional[Union[str, Path]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.command = list(command)
        self.cwd = cwd
        self.returncode = returncode
        self.stderr = stderr

        details = []
        if self.command:
            details.append(f"Command={' '.join(self.command)} CWD={cwd}")
        if returncode is not None:
            details.append(f"Status: {returncode}")
        if stderr:
            details.append(f"Stderr: {stderr.strip()}")

        if details:
            message = message + "\n  " + "\n  ".join(details)
        super().__init__(message)


class StateError(CompactupError):
    """The current toolchain link is in an inconsistent state."""

    pass
