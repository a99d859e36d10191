"""Logger lookup for guitar tuner modules."""

import logging
from typing import Dict

PACKAGE_LOGGER = "guitar_tuner"

# Loggers already handed out, keyed by requested name
_logger_cache: Dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """
    Get the logger for a module.

    Names outside the package (``__main__`` when a module is run with
    ``python -m``) are nested under ``guitar_tuner`` so setup_logging()
    still controls them.

    Args:
        name: The full module name (e.g., 'guitar_tuner.note_matcher')

    Returns:
        A logger instance; handlers and levels come from setup_logging()
    """
    logger = _logger_cache.get(name)
    if logger is None:
        qualified = name
        if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
            qualified = f"{PACKAGE_LOGGER}.{name.strip('_') or 'root'}"
        logger = logging.getLogger(qualified)
        _logger_cache[name] = logger
    return logger
