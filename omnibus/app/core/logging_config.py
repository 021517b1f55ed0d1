"""
Logging setup for the API process.
"""

import logging

from omnibus.app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure the root ``omnibus`` logger once per process."""
    logger = logging.getLogger("omnibus")
    if logger.handlers:
        return
    
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel((level or settings.log_level).upper())
    logger.propagate = False
