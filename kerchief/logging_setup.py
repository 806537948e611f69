"""Logging configuration for the kerchief command line."""

from __future__ import annotations

import logging
import logging.config

LOGGER_NAME = "kerchief"


def setup_logging(verbosity: int = 0) -> None:
    """Configure the ``kerchief`` logger.

    - WARNING by default, INFO at verbosity 1, DEBUG at 2 and above
    - Messages go to stderr so they never mix with the printed listings.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"std": {"format": "%(asctime)s %(levelname)s %(name)s - %(message)s"}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "std",
                    "level": level,
                    "stream": "ext://sys.stderr",
                }
            },
            "loggers": {
                LOGGER_NAME: {"handlers": ["console"], "level": level, "propagate": False},
            },
        }
    )
