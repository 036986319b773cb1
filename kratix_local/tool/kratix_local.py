"""Command line tool for registering clusters with a local kratix platform."""

import argparse
import asyncio
import logging
import sys
import traceback

from kratix_local.exceptions import KratixException
from . import get, register

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for registering clusters with a local kratix platform.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    register.RegisterAction.register(subparsers)
    get.GetAction.register(subparsers)
    return parser


def main() -> None:
    """Kratix-local command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args()

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except KratixException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("kratix-local error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
