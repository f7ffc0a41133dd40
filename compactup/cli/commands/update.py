"""
Update command implementation.

Installs the latest or a specific compiler version and makes it the default.
"""

import logging

from compactup.cli.utils import load_context, print_status, safe_print
from compactup.core.download import DownloadProgress
from compactup.toolchain.installer import InstallEvent, InstallPipeline, InstallStatus
from compactup.toolchain.version import parse_version_spec

logger = logging.getLogger(__name__)

_MILESTONES = {
    "fetch": "🔍 Fetching information from server",
    "download": "⬇️  Downloading artifact",
    "unpack": "📦 Unpacking compiler",
}


def run(args) -> int:
    """
    Run the update command.

    Args:
        args: Parsed command-line arguments with:
            - version: Optional version specifier text
            - no_set_default: Don't activate the installed compiler

    Returns:
        Exit code (0 for success)
    """
    spec = parse_version_spec(args.version) if args.version else None
    context = load_context(args)

    pipeline = InstallPipeline(
        layout=context.layout,
        source=context.source,
        target=context.target,
        unpacker=context.unpacker,
        link=context.link,
        lock_manager=context.lock_manager,
        lock_timeout=context.config.lock_timeout,
        http_timeout=context.config.http_timeout,
        on_event=_report_event,
        progress_callback=_report_progress,
    )

    outcome = pipeline.install(spec, activate=not args.no_set_default)

    if outcome.status is InstallStatus.INSTALLED:
        print_status(outcome.target, outcome.version, "installed")
    else:
        print_status(outcome.target, outcome.version, "already installed")

    if outcome.activated:
        print_status(outcome.target, outcome.version, "✅ default.")

    return 0


def _report_event(event: InstallEvent):
    message = _MILESTONES.get(event.phase)
    if message and event.stage == "started":
        safe_print(f"{message}...")


def _report_progress(progress: DownloadProgress):
    logger.debug(f"Download progress: {progress}")
