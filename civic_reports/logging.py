"""Logging from config and env.

Levels (inclusive):
- ERROR: failed writes to storage
- WARNING: recovered problems (unreadable stored issues) and ERROR
- INFO: issues created, sample data seeded, server start, WARNING, and ERROR
- DEBUG: persist/query details and all levels above

Configure via config.yaml (logging.level, logging.format) or env (LOGGING_LEVEL, LOGGING_FORMAT).
"""

import logging

from civic_reports.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    """Map level name to logging constant, INFO if unknown."""
    return LEVELS.get(level.upper().strip(), logging.INFO)


class CivicLogging:
    """Configures root logger from LoggingConfig."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT

    def setup(self) -> None:
        """Apply level and format to the root logger."""
        logging.basicConfig(
            level=self._level,
            format=self._format,
            force=True,
        )
