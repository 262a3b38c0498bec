import logging
import sys
import time

from clubexpress_courts import config

PACKAGE_LOGGER = "clubexpress_courts"


def configure_package_logging(debug: bool = config.DEBUG) -> logging.Logger:
    """Sets the level of the package loggers and, in debug mode, sends them to stderr.

    Only the `clubexpress_courts` logger tree is touched; the host application's root
    logger is left alone. Calling it again does not add a second handler.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if debug and not any(getattr(h, "_clubexpress_debug", False) for h in package_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s.%(funcName)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        formatter.converter = time.localtime
        handler.setFormatter(formatter)
        handler._clubexpress_debug = True
        package_logger.addHandler(handler)

    return package_logger
