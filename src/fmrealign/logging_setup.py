import logging
import json
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

PACKAGE_LOGGER = "fmrealign"

# Attributes every LogRecord carries; anything else came in via extra={}
STANDARD_ATTRS = {
    'args', 'asctime', 'created', 'exc_info', 'exc_text', 'filename',
    'funcName', 'levelname', 'levelno', 'lineno', 'module',
    'msecs', 'message', 'msg', 'name', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'thread', 'threadName',
    'taskName',
}


class JsonLinesFormatter(logging.Formatter):
    """Formats log records as JSON objects, one per line."""
    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in STANDARD_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def setup_logger(
    log_path: Optional[Path] = None,
    level: str = "INFO",
    verbose: bool = False
) -> logging.Logger:
    """
    Configure the package logger for a realignment run.

    Outputs structured JSON Lines to log_path (if given) and plain text to
    stdout if verbose.

    Args:
        log_path: Full path to the log file to create
        level: Logging level (default: INFO)
        verbose: If True, also output to stdout

    Returns:
        The configured ``fmrealign`` logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(JsonLinesFormatter())
        logger.addHandler(file_handler)

    if verbose:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(console_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger
