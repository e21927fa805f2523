"""Command-line entry point: ``python -m oidc_exchange``."""

from __future__ import annotations

import asyncio
import logging
import sys

from .config import get_settings
from .errors import OIDCExchangeError
from .runner import run

LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(level_name: str) -> None:
    level = LOG_LEVELS.get(level_name.strip().lower(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request URL at INFO.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def main() -> int:
    try:
        settings = get_settings()
        configure_logging(settings.log_level)
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        print("Aborted by user", file=sys.stderr)
        return 130
    except OIDCExchangeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
