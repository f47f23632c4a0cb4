"""Entry point for the PhotoViewer client.

Usage:
    python -m photoviewer [options]

Options:
    --api-url URL      Backend server URL (default: PHOTOVIEWER_API_URL or http://10.0.2.2:8000)
    --data-dir DIR     Where the encrypted credential store lives (default: ~/.photoviewer)
    --log-dir DIR      Log file directory (default: <data-dir>/logs)
    --debug            Show debug output on the console
"""

import argparse
import asyncio
import logging
import sys

from .app import Application
from .config import ClientConfig
from .errors import SecurityInitializationError
from .logging import get_logger, setup_logging
from .shell import Shell

logger = get_logger("main")


def parse_args(argv: list[str] | None = None) -> ClientConfig:
    parser = argparse.ArgumentParser(description="PhotoViewer console client")
    parser.add_argument("--api-url", default="", help="Backend server URL")
    parser.add_argument("--data-dir", default="", help="Credential store directory")
    parser.add_argument("--log-dir", default="", help="Log file directory")
    parser.add_argument("--debug", action="store_true", help="Verbose console logging")

    args = parser.parse_args(argv)

    return ClientConfig(
        api_url=args.api_url,
        data_dir=args.data_dir,
        log_dir=args.log_dir,
        debug=args.debug,
    )


async def run(app: Application):
    async with app.client:
        await Shell(app).run()


def main(argv: list[str] | None = None) -> int:
    config = parse_args(argv)
    log_dir = setup_logging(config.log_dir, logging.DEBUG if config.debug else logging.WARNING)

    logger.info("PhotoViewer starting")
    logger.info(f"  Logs:       {log_dir}")
    logger.info(f"  Backend:    {config.api_url}")
    logger.info(f"  Store:      {config.store_path}")

    # The store must be usable before any session decision is made
    try:
        app = Application.create(config)
    except SecurityInitializationError as e:
        logger.critical(f"Cannot open credential store: {e}")
        print(f"Fatal: cannot open credential store: {e}", file=sys.stderr)
        return 1

    try:
        asyncio.run(run(app))
    except (KeyboardInterrupt, EOFError):
        pass

    logger.info("PhotoViewer stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
