"""Logging setup for the modelsync CLI."""

from __future__ import annotations

import logging

# httpx logs every request at INFO; only surface it when debugging.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, level: int | str = logging.INFO, force: bool = False) -> None:
    """Configure the root logger for CLI output.

    ``level`` accepts a number or a level name such as ``"debug"``. Above DEBUG
    the HTTP client libraries are held at WARNING so request lines do not
    interleave with the records printed on stdout.
    """

    resolved = _resolve_level(level)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    library_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelNamesMapping().get(level.upper())
    if resolved is None:
        raise ValueError(f"Unknown log level: {level}")
    return resolved
