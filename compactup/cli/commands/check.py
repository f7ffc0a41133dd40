"""
Check command implementation.

Compares the default compiler with the latest published release.
"""

import logging

from compactup.cli.utils import load_context, print_status, safe_print
from compactup.core.directory import ensure_root_structure
from compactup.toolchain.upgrader import check_for_update

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the check command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    context = load_context(args)
    ensure_root_structure(context.root)

    status = check_for_update(context.link, context.source)

    if status.current is None:
        safe_print("compact: ⚠️  no version installed.")
    elif status.up_to_date:
        print_status(status.current.target, "✅ Up to date", status.current.version)
    else:
        print_status(
            status.current.target, "⚠️  Update Available", status.current.version
        )

    if not status.up_to_date:
        safe_print(f"compact: Latest version available: {status.latest}.")

    return 0
