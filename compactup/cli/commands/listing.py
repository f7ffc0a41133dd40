"""
List command implementation.

Lists published compiler versions, or the installed ones with --installed.
The default compiler is marked with an arrow.
"""

import logging

from compactup.cli.utils import ARROW, load_context, safe_print
from compactup.toolchain.catalogue import ArtifactCatalogue

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list command.

    Args:
        args: Parsed command-line arguments with:
            - installed: List installed versions instead of published ones

    Returns:
        Exit code (0 for success)
    """
    context = load_context(args)
    current = context.link.resolve()
    current_version = current.version if current else None

    if args.installed:
        versions = context.layout.installed_versions()
        safe_print("compact: installed versions\n")
    else:
        versions = ArtifactCatalogue.load(context.source).versions()
        safe_print("compact: available versions\n")

    for version in versions:
        if version == current_version:
            safe_print(f"{ARROW} {version}")
        else:
            safe_print(f"  {version}")

    return 0
