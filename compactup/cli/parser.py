"""
compact CLI argument parser.

This module implements the command-line interface for compactup using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from compactup import __version__
from compactup.core.directory import DIRECTORY_ENV_VAR
from compactup.core.platform import get_supported_targets

logger = logging.getLogger(__name__)

ADDITIONAL_HELP = """
Usage examples:

  compact update              install the latest compiler and make it the default
  compact update 0.29         install the latest 0.29.x compiler
  compact list --installed    show installed compilers
  compact compile +0.29.1 --help
"""

# Global options that consume the following argument.
_VALUED_OPTIONS = ("--directory", "--target", "--config")


class CLI:
    """compact command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="compact",
            description="compact - manage Compact compiler toolchains",
            epilog=ADDITIONAL_HELP,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"compact {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--directory",
            type=Path,
            metavar="PATH",
            default=None,
            help=(
                "Compact artifact directory "
                f"(default: ${DIRECTORY_ENV_VAR} or ~/.compact)"
            ),
        )
        parser.add_argument(
            "--target",
            choices=get_supported_targets(),
            metavar="TARGET",
            default=None,
            help=argparse.SUPPRESS,
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: <directory>/config.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_check_command(subparsers)
        self._add_update_command(subparsers)
        self._add_list_command(subparsers)
        self._add_clean_command(subparsers)
        self._add_compile_command(subparsers)

        return parser

    def _add_check_command(self, subparsers):
        """Add 'check' subcommand."""
        subparsers.add_parser(
            "check",
            help="Check for updates with the remote server",
            description="Compare the default compiler with the latest release",
        )

    def _add_update_command(self, subparsers):
        """Add 'update' subcommand."""
        parser = subparsers.add_parser(
            "update",
            help="Update to the latest or a specific compiler version",
            description=(
                "Install the latest or a specific version of the Compact compiler "
                "and make it the default. A compiler that is already installed "
                "is not downloaded again."
            ),
        )
        parser.add_argument(
            "version",
            nargs="?",
            metavar="VERSION",
            help="Version to install, e.g. 0.29 or 0.29.0 (default: latest)",
        )
        parser.add_argument(
            "--no-set-default",
            action="store_true",
            help="Don't make the newly installed compiler the default one",
        )

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        parser = subparsers.add_parser(
            "list",
            help="List available compiler versions",
            description="List published or installed compiler versions",
        )
        parser.add_argument(
            "--installed", "-i", action="store_true", help="Show installed versions"
        )

    def _add_clean_command(self, subparsers):
        """Add 'clean' subcommand."""
        parser = subparsers.add_parser(
            "clean",
            help="Remove installed compiler versions",
            description="Remove installed compilers or cached release archives",
        )
        parser.add_argument(
            "--keep-current",
            "-k",
            action="store_true",
            help="Keep the version currently in use",
        )
        parser.add_argument(
            "--cache",
            action="store_true",
            help="Only remove cached release archives, keep installed compilers",
        )

    def _add_compile_command(self, subparsers):
        """Add 'compile' subcommand (arguments are forwarded verbatim)."""
        subparsers.add_parser(
            "compile",
            add_help=False,
            help="Run the compiler: compile [+VERSION] [ARGS...]",
            description="Call the compiler for the given VERSION (default compiler if omitted)",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Everything after `compile` belongs to the compiler and is stored
        unparsed in `compile_args`.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        args = list(sys.argv[1:] if args is None else args)

        index = _find_compile_command(args)
        if index is None:
            parsed = self.parser.parse_args(args)
            parsed.compile_args = []
            return parsed

        parsed = self.parser.parse_args(args[: index + 1])
        parsed.compile_args = args[index + 1 :]
        return parsed

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "check": "compactup.cli.commands.check",
            "update": "compactup.cli.commands.update",
            "list": "compactup.cli.commands.listing",
            "clean": "compactup.cli.commands.clean",
            "compile": "compactup.cli.commands.compiler",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def _find_compile_command(args: List[str]) -> Optional[int]:
    """Index of the `compile` command word, skipping values of global options."""
    skip_next = False
    for index, arg in enumerate(args):
        if skip_next:
            skip_next = False
            continue
        if arg in _VALUED_OPTIONS:
            skip_next = True
            continue
        if arg.startswith("-"):
            continue
        # The first positional is the command word.
        return index if arg == "compile" else None
    return None


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
