#!/usr/bin/env python3
"""
Person table store demo entry point.
"""
import argparse
import asyncio
import sys

from shared.config.settings import settings
from shared.utils.exceptions import TableStorageException
from shared.utils.logging_config import get_logger, setup_logging
from table_store_app.application.interfaces.di_container import DIContainer
from table_store_app.application.services.store_actions import StoreActions

logger = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=settings.app_title)
    parser.add_argument("--table", default=settings.persons_table_name,
                        help="Table to run the demo against")
    parser.add_argument("--repository-type", default=settings.repository_type,
                        choices=["azure_table_storage", "in_memory"],
                        help="Table backend")
    parser.add_argument("--skip-insert", action="store_true",
                        help="Do not insert the sample persons, for re-runs against an existing table")
    parser.add_argument("--no-pause", action="store_true",
                        help="Exit on error without waiting for Enter")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> None:
    container = DIContainer(repository_type=args.repository_type, table_name=args.table)
    try:
        actions = StoreActions(container.get_table_service(), skip_insert=args.skip_insert)
        await actions.run()
    finally:
        await container.close_all_services()


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        log_to_console=settings.log_to_console
    )
    logger.info(f"Starting {settings.app_title} ({settings.environment}) against table '{args.table}'")

    try:
        asyncio.run(run(args))
    except TableStorageException as e:
        logger.error("Error loading/creating table")
        logger.error(str(e))
    except Exception as e:
        logger.error(str(e), exc_info=True)
    else:
        return 0

    if not args.no_pause:
        try:
            input("Press Enter to exit...")
        except EOFError:
            # stdin closed or redirected, nothing to wait for
            pass
    return 1


if __name__ == "__main__":
    sys.exit(main())
