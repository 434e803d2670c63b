"""Command line argument parser for qtelnet."""

from __future__ import annotations

from argparse import (
    ArgumentParser,
    Namespace as Arguments,
    RawDescriptionHelpFormatter as Formatter,
)
from sys import argv as sys_argv, exit as sys_exit, stdin as sys_stdin

from qtelnet.constants import (
    CLI_ARGUMENTS,
    CLI_HELP_DESCRIPTION,
    CLI_HELP_EPILOGUE,
    CLI_HELP_NAME,
)

from .console import set_verbosity


def build_parser() -> ArgumentParser:
    """Create the argument parser with every qtelnet argument group.

    Returns:
        Configured ArgumentParser instance
    """
    parser = ArgumentParser(
        description=CLI_HELP_DESCRIPTION,
        epilog=CLI_HELP_EPILOGUE,
        prog=CLI_HELP_NAME,
        formatter_class=Formatter,
    )
    for category_name, args in CLI_ARGUMENTS.items():
        category = parser.add_argument_group(category_name)
        [category.add_argument(*flags, **kwargs) for flags, kwargs in args]
    return parser


def parse_args(argv: list[str] | None = None) -> Arguments:
    """Parse the command line and apply the requested verbosity.

    Args:
        argv: Arguments to parse, defaults to the process arguments

    Returns:
        The parsed arguments
    """
    parser = build_parser()
    if argv is None:
        argv = sys_argv[1:]

    # Nothing to read: no file given and nothing piped in
    if not argv and sys_stdin.isatty():
        parser.print_help()
        sys_exit(0)

    parsed_args = parser.parse_args(argv)
    set_verbosity(parsed_args.verbose)
    return parsed_args
