"""User-facing notification model (toast equivalent)"""
from enum import Enum
from datetime import datetime, timezone
from pydantic import BaseModel, Field


class NotificationVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Notification(BaseModel):
    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
