"""
Shared utilities for CLI commands.

Provides the per-invocation command context and consistent console output.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from compactup.core.config import CompactupConfig, load_config
from compactup.core.directory import get_config_path, resolve_root
from compactup.core.locking import LockManager
from compactup.core.platform import Target, detect_target
from compactup.toolchain.catalogue import GitHubReleaseSource, ReleaseSource
from compactup.toolchain.extractor import Unpacker
from compactup.toolchain.layout import ToolchainLayout
from compactup.toolchain.linking import CurrentToolchainLink

logger = logging.getLogger(__name__)

LABEL = "compact"
ARROW = "→"


# ============================================================================
# Command Context
# ============================================================================


@dataclass
class CommandContext:
    """Everything a command needs, derived fresh from arguments and the filesystem."""

    root: Path
    config: CompactupConfig
    target: Target
    layout: ToolchainLayout
    link: CurrentToolchainLink
    source: ReleaseSource
    unpacker: Unpacker
    lock_manager: LockManager


def load_context(args) -> CommandContext:
    """
    Build the command context from parsed arguments.

    Args:
        args: Parsed arguments with directory, target and config

    Returns:
        CommandContext

    Raises:
        ConfigError: If the configuration file is invalid
        UnsupportedPlatformError: If the target is unknown or the host unsupported
    """
    root = resolve_root(args.directory)

    if args.config:
        config = load_config(Path(args.config), required=True)
    else:
        config = load_config(get_config_path(root))

    target = Target.parse(args.target) if args.target else detect_target()
    layout = ToolchainLayout(root)

    logger.debug(f"Using compact directory {root} for target {target}")

    return CommandContext(
        root=root,
        config=config,
        target=target,
        layout=layout,
        link=CurrentToolchainLink(layout),
        source=GitHubReleaseSource(config.release_source, timeout=config.http_timeout),
        unpacker=Unpacker(config.unzip.program, config.unzip.args),
        lock_manager=LockManager(root),
    )


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_status(*fields: object):
    """Print a `compact: a -- b -- c` status line."""
    safe_print(f"{LABEL}: " + " -- ".join(str(field) for field in fields))


def safe_print(message: str, file=None):
    """
    Print message with safe encoding handling for limited consoles.

    Falls back to ASCII-safe characters if Unicode symbols can't be encoded.

    Args:
        message: Message to print
        file: Output file (default: stdout)
    """
    try:
        print(message, file=file)
    except UnicodeEncodeError:
        safe_message = (
            message.replace("⚠️", "WARNING:")
            .replace("✅", "[OK]")
            .replace("❌", "[ERROR]")
            .replace("⬇️", "[DOWNLOAD]")
            .replace("📦", "[UNPACK]")
            .replace("🔍", "[FETCH]")
            .replace(ARROW, "->")
        )
        print(safe_message, file=file)
