"""Process-wide logging setup.

``configure_logging()`` is called once at application start. The level comes
from the argument, then from ``settings.log_level``.
"""

from __future__ import annotations

import logging
import sys

log = logging.getLogger("svyasa")

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        from svyasa.core.settings import settings

        level = settings.log_level
    if isinstance(level, str):
        return _LEVELS.get(level.upper(), logging.INFO)
    return level


def configure_logging(level: int | str | None = None) -> None:
    resolved = _resolve_level(level)
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(resolved)

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s:%(lineno)d | %(message)s",
            datefmt="%m-%d %H:%M:%S",
        )
    )
    handler.setLevel(resolved)
    root.addHandler(handler)

    # aiosqlite logs every statement at DEBUG
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
