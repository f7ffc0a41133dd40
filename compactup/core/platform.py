"""
Platform detection for compactup.

This module maps the host operating system and CPU architecture onto one of the
targets the Compact compiler is published for, and maps each target onto the
physical artifact kind (macOS or Linux) it is installed from.

Usage:
    from compactup.core.platform import detect_target

    target = detect_target()
    print(f"Target: {target}")            # x86_64-unknown-linux-musl
    print(f"Family: {target.family}")     # linux
"""

import functools
import platform
from enum import Enum
from typing import List

from .exceptions import CompactupError


class UnsupportedPlatformError(CompactupError):
    """Raised when the host platform has no published compiler artifact."""

    pass


class PlatformFamily(Enum):
    """Physical artifact kinds published for each release."""

    MACOS = "macos"
    LINUX = "linux"

    def __str__(self) -> str:
        return self.value


class Target(Enum):
    """
    Supported compiler targets.

    The values are the exact directory names used in the on-disk layout, so
    they must never change.
    """

    X86_64_LINUX_MUSL = "x86_64-unknown-linux-musl"
    X86_64_APPLE_DARWIN = "x86_64-apple-darwin"
    AARCH64_DARWIN = "aarch64-darwin"

    @property
    def family(self) -> PlatformFamily:
        """Artifact kind this target is installed from."""
        if self is Target.X86_64_LINUX_MUSL:
            return PlatformFamily.LINUX
        return PlatformFamily.MACOS

    @classmethod
    def parse(cls, text: str) -> "Target":
        """
        Parse a target from its directory name.

        Args:
            text: Target string (e.g., 'aarch64-darwin')

        Returns:
            Matching Target

        Raises:
            UnsupportedPlatformError: If text names no supported target
        """
        try:
            return cls(text)
        except ValueError:
            raise UnsupportedPlatformError(f"Unsupported target `{text}'") from None

    def __str__(self) -> str:
        return self.value


def get_supported_targets() -> List[str]:
    """Return the names of all supported targets."""
    return [target.value for target in Target]


@functools.lru_cache(maxsize=1)
def detect_target() -> Target:
    """
    Detect the compiler target for the current host.

    This function is cached - it only runs detection once per process.

    Returns:
        Target for the host

    Raises:
        UnsupportedPlatformError: If no compiler is published for the host
    """
    os_name = _detect_os()
    arch = _detect_architecture()

    if os_name == "linux" and arch == "x64":
        return Target.X86_64_LINUX_MUSL
    if os_name == "macos" and arch == "x64":
        return Target.X86_64_APPLE_DARWIN
    if os_name == "macos" and arch == "arm64":
        return Target.AARCH64_DARWIN

    raise UnsupportedPlatformError(
        f"No Compact compiler is published for {os_name}-{arch}. "
        f"Supported targets: {', '.join(get_supported_targets())}"
    )


def clear_target_cache():
    """Clear the cached target detection (used by tests)."""
    detect_target.cache_clear()


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'windows', 'linux', 'macos' or the raw system name
    """
    system = platform.system().lower()

    if system == "darwin":
        return "macos"
    return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', or the raw machine name
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    else:
        return machine
