"""Logging setup for the CLI entrypoint"""

import logging


LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class FallbackFilter(logging.Filter):
    """Drop records from third-party loggers below WARNING."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name.startswith("mdblog") or record.levelno >= logging.WARNING


def configure_logging(level: str = "INFO") -> None:
    """Configure the root handler once; repeated calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(FallbackFilter())
        root.addHandler(handler)
    root.setLevel(level)
