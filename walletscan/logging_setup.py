"""Logging configuration for the CLI and embedding applications."""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_NOISY_LOGGERS = ("aiohttp", "asyncio")


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger; unknown level names fall back to INFO."""
    numeric = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, force=True)
    logging.getLogger().setLevel(numeric)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def shorten_address(address: str | None) -> str:
    """Render ``0x1234567890...`` as ``0x123456...abcd`` for log lines."""
    if not address:
        return "<none>"
    if len(address) <= 14:
        return address
    return f"{address[:8]}...{address[-4:]}"
