"""
Compiler versions and version specifiers.

A Version is a strict `major.minor.patch` triple. A version specifier is what
a user types on the command line: either an exact version or a `major.minor`
prefix that matches every patch release of that line.

Example:
    >>> spec = parse_version_spec("0.29")
    >>> spec.matches(Version(0, 29, 1))
    True
    >>> str(spec)
    '0.29'
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from ..core.exceptions import ParseError

# No leading zeros, no pre-release or build metadata.
_NUMBER = r"(0|[1-9][0-9]*)"
_VERSION_RE = re.compile(rf"{_NUMBER}\.{_NUMBER}\.{_NUMBER}")
_DECIMAL_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True, order=True)
class Version:
    """
    Immutable compiler version with semantic-version ordering.

    Example:
        >>> Version.parse("0.29.1") > Version.parse("0.29.0")
        True
    """

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Parse a strict `major.minor.patch` version.

        Args:
            text: Version string (e.g., '0.29.1')

        Returns:
            Parsed Version

        Raises:
            ParseError: If text is not a valid version
        """
        match = _VERSION_RE.fullmatch(text)
        if match:
            return cls(*(int(part) for part in match.groups()))

        raise ParseError(text, _diagnose(text))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def _diagnose(text: str) -> str:
    """Explain why text is not a valid `major.minor.patch` version."""
    if not text:
        return "empty string, expected a version number"

    parts = text.split(".")
    if len(parts) != 3:
        return f"expected major.minor.patch, found {len(parts)} component(s)"

    for name, part in zip(("major", "minor", "patch"), parts):
        if not part:
            return f"empty {name} version number"
        if not _DECIMAL_RE.fullmatch(part):
            return f"unexpected character in {name} version number: {part!r}"
        if len(part) > 1 and part.startswith("0"):
            return f"invalid leading zero in {name} version number"

    return "invalid version"


@dataclass(frozen=True)
class ExactSpec:
    """Matches exactly one version."""

    version: Version

    def matches(self, version: Version) -> bool:
        return self.version == version

    def exact_value(self) -> Optional[Version]:
        return self.version

    def __str__(self) -> str:
        return str(self.version)


@dataclass(frozen=True)
class PartialSpec:
    """Matches every patch release of a `major.minor` line."""

    major: int
    minor: int

    def matches(self, version: Version) -> bool:
        return version.major == self.major and version.minor == self.minor

    def exact_value(self) -> Optional[Version]:
        return None

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


VersionSpec = Union[ExactSpec, PartialSpec]


def parse_version_spec(text: str) -> VersionSpec:
    """
    Parse a user-supplied version specifier.

    An exact `major.minor.patch` version is tried first. Failing that, two
    decimal components form a partial specifier. Anything else reports the
    exact-version error, which is the more informative diagnostic.

    Args:
        text: Specifier text (e.g., '0.29.0' or '0.29')

    Returns:
        ExactSpec or PartialSpec

    Raises:
        ParseError: If text is neither form
    """
    try:
        return ExactSpec(Version.parse(text))
    except ParseError as exact_error:
        parts = text.split(".")
        if len(parts) == 2 and all(_DECIMAL_RE.fullmatch(part) for part in parts):
            return PartialSpec(int(parts[0]), int(parts[1]))
        raise exact_error
