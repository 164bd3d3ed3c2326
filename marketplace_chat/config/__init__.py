"""Configuration"""
from .settings import settings, Settings
from .logging import configure_logging

__all__ = ["settings", "Settings", "configure_logging"]
