"""
Core functionality for compactup.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    resolve_root,
    get_default_root,
    ensure_root_structure,
    get_config_path,
    DirectoryError,
)

from .config import (
    CompactupConfig,
    ReleaseSourceConfig,
    UnzipConfig,
    load_config,
)

from .locking import LockManager

from .platform import (
    PlatformFamily,
    Target,
    UnsupportedPlatformError,
    detect_target,
    get_supported_targets,
)

from .exceptions import (
    CompactupError,
    ConfigError,
    LockTimeout,
    ParseError,
    FetchError,
    ChecksumError,
    FormatError,
    NotFoundError,
    ExtractionError,
    StateError,
)

__all__ = [
    "resolve_root",
    "get_default_root",
    "ensure_root_structure",
    "get_config_path",
    "DirectoryError",
    "CompactupConfig",
    "ReleaseSourceConfig",
    "UnzipConfig",
    "load_config",
    "LockManager",
    "PlatformFamily",
    "Target",
    "UnsupportedPlatformError",
    "detect_target",
    "get_supported_targets",
    "CompactupError",
    "ConfigError",
    "LockTimeout",
    "ParseError",
    "FetchError",
    "ChecksumError",
    "FormatError",
    "NotFoundError",
    "ExtractionError",
    "StateError",
]
