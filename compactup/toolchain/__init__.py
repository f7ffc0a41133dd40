"""
Toolchain management module for compactup.

This module provides functionality for:
- Version and version specifier parsing
- Release catalogue loading and version selection
- The on-disk installation layout
- The current compiler link
- Installation, update checks, cleanup and compiler invocation
"""

from compactup.toolchain.version import (
    Version,
    VersionSpec,
    ExactSpec,
    PartialSpec,
    parse_version_spec,
)
from compactup.toolchain.catalogue import (
    ArtifactCatalogue,
    Asset,
    CompilerRelease,
    ReleaseSource,
    GitHubReleaseSource,
    release_from_payload,
)
from compactup.toolchain.layout import (
    ToolchainLayout,
    TOOLCHAIN_NAME,
    ARCHIVE_NAME,
)
from compactup.toolchain.linking import ActiveToolchain, CurrentToolchainLink
from compactup.toolchain.extractor import Unpacker
from compactup.toolchain.installer import (
    InstallPipeline,
    InstallOutcome,
    InstallStatus,
    InstallEvent,
)
from compactup.toolchain.upgrader import UpdateStatus, check_for_update
from compactup.toolchain.compiler import Compiler
from compactup.toolchain.cleanup import ToolchainCleanupManager, CleanupResult

__all__ = [
    "Version",
    "VersionSpec",
    "ExactSpec",
    "PartialSpec",
    "parse_version_spec",
    "ArtifactCatalogue",
    "Asset",
    "CompilerRelease",
    "ReleaseSource",
    "GitHubReleaseSource",
    "release_from_payload",
    "ToolchainLayout",
    "TOOLCHAIN_NAME",
    "ARCHIVE_NAME",
    "ActiveToolchain",
    "CurrentToolchainLink",
    "Unpacker",
    "InstallPipeline",
    "InstallOutcome",
    "InstallStatus",
    "InstallEvent",
    "UpdateStatus",
    "check_for_update",
    "Compiler",
    "ToolchainCleanupManager",
    "CleanupResult",
]
