"""
Clean command implementation.

Removes installed compilers, or only their cached release archives.
"""

import logging

from compactup.cli.utils import load_context, safe_print
from compactup.toolchain.cleanup import ToolchainCleanupManager

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the clean command.

    Args:
        args: Parsed command-line arguments with:
            - keep_current: Keep the default compiler
            - cache: Only remove cached archives

    Returns:
        Exit code (0 for success)
    """
    context = load_context(args)
    manager = ToolchainCleanupManager(
        context.layout,
        link=context.link,
        lock_manager=context.lock_manager,
        lock_timeout=context.config.lock_timeout,
    )

    if args.cache:
        result = manager.remove_archives()
        safe_print(f"compact: removed {len(result.removed)} cached archive(s)")
    else:
        result = manager.remove_versions(keep_current=args.keep_current)
        for version in result.removed:
            safe_print(f"compact: {version} -- removed")
        for version in result.skipped:
            safe_print(f"compact: {version} -- kept (default)")
        if not result.removed:
            safe_print("compact: nothing to remove")

    mb = result.space_reclaimed / 1024 / 1024
    safe_print(f"compact: reclaimed {mb:.1f} MB")
    return 0
