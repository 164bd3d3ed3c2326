"""Logging setup"""
import logging
from typing import Optional

from .settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for applications embedding the conversation manager.

    Args:
        level: Level name (e.g. "DEBUG"). Defaults to settings.LOG_LEVEL.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
    # The realtime websocket client is chatty at INFO
    logging.getLogger("realtime").setLevel(logging.WARNING)
