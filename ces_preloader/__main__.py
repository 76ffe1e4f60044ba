"""
Entry point for the ces_preloader component.
"""

import argparse
import asyncio
import logging
import sys

from .application.exceptions import FleetError, PreloaderError
from .infrastructure.containers import Container

logger = logging.getLogger(__name__)


def setup_logging(level: str):
    """Applies basic logging configuration."""
    logging.basicConfig(level=level)


async def run_application(args: argparse.Namespace) -> int:
    """Wires and runs the application using the DI container."""

    container = Container()
    container.cli_args.from_dict(vars(args))
    setup_logging(level=args.log_level or container.config().logging.level)

    try:
        preloader_service = container.preloader_service()
    except PreloaderError as e:
        logger.error(f"An application error occurred: {e}")
        return 1

    # The shared client exists from here on and must be closed.
    try:
        await preloader_service.ensure_all(years=args.years)
    except FleetError as e:
        logger.error(f"Preloading incomplete: {e}")
        return 1
    except PreloaderError as e:
        logger.error(f"An application error occurred: {e}")
        return 1
    finally:
        await container.http_client().aclose()

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Download the Censo da Educação Superior microdata"
    )

    parser.add_argument(
        "--years",
        nargs="+",
        type=int,
        help="Years to download (default: every supported year).",
    )

    parser.add_argument(
        "--input-dir",
        help="Directory for the CSV extracts (default: from settings).",
    )

    parser.add_argument(
        "--concurrent-downloads",
        type=int,
        help="Maximum number of years processed at once.",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from settings).",
    )

    return parser


if __name__ == "__main__":
    cli_args = build_parser().parse_args()

    sys.exit(asyncio.run(run_application(cli_args)))
