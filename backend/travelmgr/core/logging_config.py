"""
Logging configuration.
"""
import logging
import sys
from typing import Optional

from travelmgr.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"


def setup_logging(log_level: Optional[str] = None) -> None:
    """
    Configure the root logger for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to
            ``settings.LOG_LEVEL``.
    """
    level = (log_level or settings.LOG_LEVEL).upper()

    root = logging.getLogger()
    root.setLevel(level)

    # Avoid stacking handlers when the app module is reloaded
    if not any(getattr(h, "_travelmgr", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler._travelmgr = True
        root.addHandler(handler)

    # SQL echo is controlled by DB_ECHO, keep the engine logger quiet otherwise
    if not settings.DB_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
