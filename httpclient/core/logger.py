# httpclient/core/logger.py

import logging

from httpclient.core import config

PACKAGE_LOGGER = "httpclient"


def _configure_package_logger() -> logging.Logger:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        package_logger.addHandler(handler)
        package_logger.setLevel(config.LOG_LEVEL)
        package_logger.debug(f"Logger '{PACKAGE_LOGGER}' initialized with level={config.LOG_LEVEL}")
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Retourne un logger rattaché au logger du package 'httpclient'.
    Le handler et le niveau (LOG_LEVEL) ne sont posés qu'une fois, sur le parent.
    """
    _configure_package_logger()
    return logging.getLogger(name)
