"""
Package logger for the thumbnail composer.

Every module logs through the single ``thumbnail_composer`` logger
defined here, which keeps output on one stderr handler and lets the CLI
change verbosity in one place.
"""

import logging

LOGGER_NAME = "thumbnail_composer"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

# -q/-v steps, from quietest to loudest
_VERBOSITY_LEVELS = (
    logging.CRITICAL,
    logging.ERROR,
    logging.WARNING,
    logging.INFO,
    logging.DEBUG,
)
_DEFAULT_STEP = _VERBOSITY_LEVELS.index(logging.INFO)


def setup_logger(
        name: str = LOGGER_NAME,
        level: int = logging.INFO,
        formatter: logging.Formatter | None = None,
        handler: logging.Handler | None = None,
) -> logging.Logger:
    """
    Return the named logger with a single formatted handler attached.

    The handler is only added the first time; later calls just reset the
    level, so importing modules in any order never duplicates output.
    Propagation is switched off so host applications that configure the
    root logger do not print every message twice.

    Args:
        name: Logger name.
        level: Logging level (e.g., logging.INFO, logging.DEBUG).
        formatter: Formatter for a newly created handler.
        handler: Handler to attach instead of a stderr stream handler.

    """
    logger_instance = logging.getLogger(name)
    logger_instance.setLevel(level)
    if not logger_instance.handlers:
        target = handler if handler is not None else logging.StreamHandler()
        target.setFormatter(formatter or logging.Formatter(LOG_FORMAT))
        logger_instance.addHandler(target)
        logger_instance.propagate = False
    return logger_instance


def verbosity_level(verbose: int = 0, quiet: int = 0) -> int:
    """
    Map counted ``-v``/``-q`` flags onto a logging level.

    Each ``-v`` moves one step towards DEBUG and each ``-q`` one step
    towards CRITICAL, starting from INFO. Extra flags saturate.
    """
    step = _DEFAULT_STEP + verbose - quiet
    step = max(0, min(step, len(_VERBOSITY_LEVELS) - 1))
    return _VERBOSITY_LEVELS[step]


def set_verbosity(level: int, name: str = LOGGER_NAME) -> logging.Logger:
    """Apply ``level`` to the named logger and all of its handlers."""
    logger_instance = logging.getLogger(name)
    logger_instance.setLevel(level)
    for handler in logger_instance.handlers:
        handler.setLevel(level)
    return logger_instance


logger = setup_logger()
