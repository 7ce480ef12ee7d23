"""
Logging setup for the rate engine.

Modules log through ``logging.getLogger(__name__)``; the embedding
application calls configure_logging() once at startup.
"""
import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """
    Configure root logging with the standard format.

    Args:
        level: Log level name or number. Defaults to settings.LOG_LEVEL.
    """
    if level is None:
        from shipping_rates.core.config import settings
        level = settings.LOG_LEVEL

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    logging.getLogger("shipping_rates").setLevel(level)
