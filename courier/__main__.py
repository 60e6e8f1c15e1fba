"""
Command-line entry point: ``python -m courier <command> [options] [args...]``.

The project root is the nearest directory above the current one holding a
pyproject.toml. Log output goes through rich; the level comes from --verbose or
the COURIER_LOG_LEVEL environment variable (INFO by default).
"""
import argparse
import asyncio
import logging
import os
import sys

from rich.logging import RichHandler

from courier.directories import find_root
from courier.dispatch import Cli
from courier.faults import CourierError, console, trigger

__prog__ = "courier"

# Environment variable holding the default log level.
LOG_LEVEL = "COURIER_LOG_LEVEL"


def setup_logging(level=None):
    """
    Route the courier loggers to a RichHandler on stderr.
    """
    handler = RichHandler(console=console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger = logging.getLogger("courier")
    logger.handlers[:] = [handler]
    logger.setLevel(level or os.environ.get(LOG_LEVEL, "INFO").upper())
    logger.propagate = False
    return logger


def build_parser(cli):
    parser = argparse.ArgumentParser(
        prog=getattr(sys.modules["__main__"], "__prog__", __prog__),
        description="Run the commands of a project.",
    )
    parser.add_argument("--verbose", action="store_true", help="log debug messages and tracebacks")
    cli.configure(parser)
    return parser


def main(args=None):
    logger = setup_logging()
    try:
        cli = Cli(find_root(os.getcwd()))
        parser = build_parser(cli)
        namespace = parser.parse_args(args)
        if namespace.verbose:
            logger.setLevel(logging.DEBUG)
        cli.show_stack = namespace.verbose
        if not callable(getattr(namespace, "handler", None)):
            parser.print_help()
            return 2
        asyncio.run(namespace.handler(namespace))
    except CourierError as fault:
        trigger(fault, shell=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
