"""Centralized logging configuration for the guitar tuner.

All output goes to stderr by default: when the tuner runs as an MCP stdio
server, stdout carries the JSON-RPC stream and must stay clean.
"""

import logging
import sys
from typing import Optional, Dict, TextIO

# Log levels for different modules
MODULE_LOG_LEVELS: Dict[str, int] = {
    # Core modules
    "guitar_tuner": logging.INFO,
    "guitar_tuner.note_matcher": logging.INFO,  # Set to DEBUG for per-string cents
    "guitar_tuner.audio": logging.INFO,
    "guitar_tuner.audio.pitch_estimator": logging.INFO,
    "guitar_tuner.session": logging.INFO,
    "guitar_tuner.core": logging.INFO,
    "guitar_tuner.services": logging.INFO,
    "guitar_tuner.server": logging.INFO,
    "guitar_tuner.cli": logging.WARNING,  # CLI prints its own output
    "guitar_tuner.logger": logging.WARNING,
    # Libraries/third-party
    "mcp": logging.WARNING,
    "sounddevice": logging.WARNING,
    "aubio": logging.ERROR,
    # Root logger
    "": logging.ERROR,
}

# Shared console handler
_console_handler: Optional[logging.Handler] = None


def setup_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """Set up logging configuration for the application.

    Args:
        level: If provided, override all 'guitar_tuner' log levels with this level (e.g., "DEBUG").
        stream: Stream for the shared handler, stderr when omitted.
    """
    global _console_handler

    # Create a single, shared console handler if it doesn't exist
    if _console_handler is None or stream is not None:
        _console_handler = logging.StreamHandler(stream or sys.stderr)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        _console_handler.setFormatter(formatter)

    # Determine log levels
    log_levels = MODULE_LOG_LEVELS.copy()
    if level:
        numeric_level = logging.getLevelName(level.upper())
        if isinstance(numeric_level, int):
            for module_name in log_levels:
                if module_name.startswith("guitar_tuner"):
                    log_levels[module_name] = numeric_level
        else:
            logging.getLogger(__name__).error(f"Invalid log level: {level}")

    # Apply module-specific levels
    for module_name, module_level in log_levels.items():
        logger = logging.getLogger(module_name if module_name else "")
        logger.setLevel(module_level)

        # Only the top of each hierarchy gets the handler; children propagate to it
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        if "." not in module_name:
            logger.addHandler(_console_handler)
            logger.propagate = False

    logging.getLogger("guitar_tuner").info("Logging configuration complete")
