"""Shared logging helpers for dokploy-sync."""

from __future__ import annotations

import logging

_HTTP_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    *,
    level: int = logging.INFO,
    force: bool = False,
    quiet_http: bool = True,
) -> None:
    """Initialise the root logger once for CLI and front-end use.

    httpx reports every request at INFO, which drowns out reconciliation
    messages; ``quiet_http`` raises those loggers to WARNING unless DEBUG output
    was requested explicitly.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    if quiet_http and level > logging.DEBUG:
        for name in _HTTP_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
