"""Logging setup for the TaskDash client.

Every module asks ``get_logger(__name__)`` for its logger; the first call
configures the root handler from ``TD_LOG_LEVEL``. Request chatter from
urllib3 is held at WARNING so gateway logs stay readable.
"""
import logging
import os

DEFAULT_LEVEL = os.getenv("TD_LOG_LEVEL", "INFO").upper()


def setup_logging(level: str = DEFAULT_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
