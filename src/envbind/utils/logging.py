from __future__ import annotations

import logging
from contextlib import suppress

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: int | str = logging.WARNING, fmt: str = _FORMAT) -> logging.Logger:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger("envbind")
    configured_level = getattr(root, "_envbind_logs_level", None)
    if configured_level == level and root.handlers:
        return root

    _close_handlers(root)
    root.setLevel(level)
    root.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(console_handler)

    root._envbind_logs_level = level  # type: ignore[attr-defined]
    return root


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        with suppress(Exception):
            handler.close()
