"""
Conversation Models

Pydantic models for two-party conversations, their messages and the
display projections built for the inbox.
"""
from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime

from marketplace_chat.config import settings


class Message(BaseModel):
    """Schema for a message row"""
    id: str = Field(..., description="Message UUID")
    conversation_id: str = Field(..., description="Parent conversation UUID")
    sender_id: str = Field(..., description="Sender user UUID")
    receiver_id: str = Field(..., description="Receiver user UUID (the other participant)")
    content: str = Field(..., min_length=1, description="Message text")
    created_at: datetime = Field(..., description="Creation timestamp")
    read: bool = Field(False, description="Read by the receiver")
    image_url: Optional[str] = Field(None, description="Attached image (never written by this library)")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": "msg-uuid-123",
                "conversation_id": "conv-uuid-456",
                "sender_id": "user-uuid-a",
                "receiver_id": "user-uuid-b",
                "content": "Gostaria de Comprar o Bike (R$ 120,00)",
                "created_at": "2025-10-10T10:00:00Z",
                "read": False,
            }
        }


class Conversation(BaseModel):
    """Schema for a conversation row. Participant order carries no meaning."""
    id: str = Field(..., description="Conversation UUID")
    participant1: str = Field(..., description="First participant slot")
    participant2: str = Field(..., description="Second participant slot")
    last_message_id: Optional[str] = Field(None, description="Pointer to the most recent message")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last pointer update")

    class Config:
        from_attributes = True

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.participant1, self.participant2)

    def other_participant(self, user_id: str) -> str:
        """Return the counterpart of user_id in this conversation"""
        if user_id == self.participant1:
            return self.participant2
        if user_id == self.participant2:
            return self.participant1
        raise ValueError(f"User {user_id} is not a participant of conversation {self.id}")


class Profile(BaseModel):
    """Display projection of a user profile"""
    id: str = Field(..., description="Profile UUID (user id for synthetic profiles)")
    user_id: str = Field(..., description="Owner user UUID")
    name: Optional[str] = Field(None, description="Display name")
    avatar_url: Optional[str] = Field(None, description="Avatar reference")

    class Config:
        from_attributes = True

    @property
    def display_name(self) -> str:
        return self.name or settings.DEFAULT_PROFILE_NAME

    @classmethod
    def placeholder(cls, user_id: str) -> "Profile":
        """Synthetic profile used when the real one cannot be loaded"""
        return cls(id=user_id, user_id=user_id, name=settings.DEFAULT_PROFILE_NAME, avatar_url=None)


class Listing(BaseModel):
    """Product or service a conversation is started from"""
    id: Optional[str] = Field(None, description="Listing UUID")
    title: str = Field(..., min_length=1, description="Listing title")
    price: Optional[float] = Field(None, ge=0, description="Price in BRL")
    is_item: bool = Field(True, description="True for products, False for services")

    class Config:
        json_schema_extra = {
            "example": {"id": "item-uuid", "title": "Bike", "price": 120, "is_item": True}
        }


class FormattedConversation(BaseModel):
    """Inbox entry, recomputed on every inbox load"""
    id: str = Field(..., description="Conversation UUID")
    participant: Profile = Field(..., description="The viewer's counterpart")
    last_message: Optional[Message] = Field(None, description="Most recent message snapshot")
    unread_count: int = Field(0, ge=0, description="Unread messages addressed to the viewer")
    last_activity: Optional[datetime] = Field(None, description="Last message time, else creation time")
