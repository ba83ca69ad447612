"""Logging setup for the relkit command line."""

from __future__ import annotations

import logging

from .config import RuntimeSettings

_LOGGER_NAMES = ("relkit", "relkit_pipeline")


def configure_logging(settings: RuntimeSettings) -> None:
    """Attach one console handler to the relkit loggers.

    Stage banners are INFO; command lines, checksums and URLs are DEBUG and only
    show when verbose or debug mode is on.
    """

    level = logging.DEBUG if settings.verbose or settings.debug else logging.INFO
    formatter = logging.Formatter("%(message)s" if level == logging.INFO else "[%(name)s] %(levelname)s %(message)s")
    for name in _LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = False
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)


__all__ = ["configure_logging"]
