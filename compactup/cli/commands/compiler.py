"""
Compile command implementation.

`compact compile [+VERSION] [ARGS...]` runs the given compiler version, or the
default compiler, with the remaining arguments.
"""

import logging

from compactup.cli.utils import load_context
from compactup.toolchain.compiler import Compiler
from compactup.toolchain.version import Version

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the compile command.

    Args:
        args: Parsed command-line arguments with:
            - compile_args: Arguments after `compile`, verbatim

    Returns:
        Exit code of the compiler
    """
    version = None
    compiler_args = []

    for argument in args.compile_args:
        if argument.startswith("+"):
            version = Version.parse(argument[1:])
        else:
            compiler_args.append(argument)

    context = load_context(args)

    if version is not None:
        compiler = Compiler.open(context.layout, version, context.target)
    else:
        compiler = Compiler.current(context.link)

    return compiler.invoke(compiler_args)
