"""
Command line entry point for ghstat.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from ghstat import __version__
from ghstat.config import get_greenhouse_settings, load_config
from ghstat.errors import GhstatError
from ghstat.greenhouse import CookieStore, Greenhouse
from ghstat.logging_utils import configure_logging
from ghstat.manager import Manager
from ghstat.taskmaster import RunContext

logger = logging.getLogger(__name__)

DESCRIPTION = "A utility for gathering role-specific statistics from Greenhouse."

EPILOG = """\
ghstat is configured with a YAML file, read from the first of:

  ./ghstat.yaml
  $HOME/.config/ghstat/ghstat.yaml

The file lists hiring leads and the Greenhouse ids of their roles:

  leads:
    - name: Joe Bloggs
      roles:
        - 1234567

A Greenhouse session from a previous run is reused when possible. Otherwise
ghstat asks for Ubuntu One credentials; set U1_LOGIN and U1_PASSWORD to
skip those prompts. The one-time password is always prompted.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghstat",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "leads",
        nargs="*",
        help="Only process the named hiring leads. Names match ignoring case and surrounding spaces.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="format",
        default="pretty",
        help="Choose the output format ('pretty', 'markdown' or 'json').",
    )
    parser.add_argument(
        "-c",
        "--config",
        dest="config",
        default=None,
        help="Path to a specific config file to use.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config).with_options(
            formatter=args.format,
            verbose=args.verbose,
            filter=args.leads,
        )
        manager = Manager(
            config,
            Greenhouse(settings=get_greenhouse_settings()),
            sys.stdout,
            session_store=CookieStore(),
            context=RunContext.for_terminal(args.verbose),
        )
        manager.execute()
    except GhstatError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.error("interrupted")
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
