"""
Logging setup for controller_proxy.

Every module logs through ``get_logger(<module>)``. With the standard library
the loggers are children of ``controller_proxy``, so applications can route
or silence them as one tree. The mode is taken from the
``CONTROLLER_PROXY_LOGGING`` environment variable on first use unless
``logging_config.set_mode()`` was called before.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from logging.config import dictConfig
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger  # type: ignore[import-not-found]

ENV_VAR = "CONTROLLER_PROXY_LOGGING"

ROOT_LOGGER = "controller_proxy"


class LoggingModes(Enum):
    # silence the controller_proxy logger tree
    NO_LOGS = 0
    # stderr handler with a plain format, installed by us
    STREAM = 1
    # leave configuration to the application
    SIMPLE = 2
    # route through loguru
    LOGURU = 3


def mode_from_env(environ: Mapping[str, str] | None = None) -> LoggingModes:
    """Mode named by CONTROLLER_PROXY_LOGGING, SIMPLE when unset or unknown."""
    env = os.environ if environ is None else environ
    name = env.get(ENV_VAR, "").strip().upper()
    return LoggingModes.__members__.get(name, LoggingModes.SIMPLE)


def _dict_config(mode: LoggingModes, level: int) -> dict[str, Any]:
    if mode == LoggingModes.STREAM:
        root = {"handlers": ["stderr"], "propagate": False, "level": level}
    else:
        root = {"handlers": [], "propagate": False, "level": logging.CRITICAL + 1}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {
                "format": "%(levelname)-8s %(asctime)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "stderr": {"class": "logging.StreamHandler", "formatter": "plain"},
        },
        "loggers": {ROOT_LOGGER: root},
    }


class LoggingConfig:
    def __init__(self) -> None:
        self._mode: LoggingModes | None = None

    def get_mode(self) -> LoggingModes:
        if self._mode is None:
            self.set_mode(mode_from_env())
        if self._mode is None:
            raise RuntimeError("Logging mode must be set by set_mode() method")
        return self._mode

    def set_mode(
        self, mode: LoggingModes = LoggingModes.STREAM, level: int = logging.INFO
    ) -> None:
        """
        Configure logging for the library. STREAM and NO_LOGS apply a
        'logging.config.dictConfig()' to the "controller_proxy" logger only;
        SIMPLE and LOGURU leave logging configuration untouched. Call this
        before creating controllers, since modules fetch their loggers at
        import time.

        Args:
            mode (LoggingModes, optional): The mode to set logging to. Defaults to
            LoggingModes.STREAM.
            level (int, optional): Level of the stream handler. Defaults to logging.INFO.
        """
        self._mode = mode
        if mode in (LoggingModes.STREAM, LoggingModes.NO_LOGS):
            dictConfig(_dict_config(mode, level))


# Singleton for logging configuration
logging_config = LoggingConfig()


def get_logger(name: str) -> logging.Logger | LoguruLogger:
    """
    Get the logger a module of this package logs with.

    Args:
        name (str): Module name, appended to "controller_proxy.".

    Returns:
        A standard logging.Logger, or the loguru logger in LOGURU mode.
    """
    if logging_config.get_mode() == LoggingModes.LOGURU:
        from loguru import logger

        return logger.bind(name=f"{ROOT_LOGGER}.{name}")
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
