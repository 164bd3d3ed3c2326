"""Data models"""
from .conversation import Message, Conversation, Profile, Listing, FormattedConversation
from .notification import Notification, NotificationVariant
from .viewer import Viewer
from .marketplace import Favorite, CartItem

__all__ = [
    "Message",
    "Conversation",
    "Profile",
    "Listing",
    "FormattedConversation",
    "Notification",
    "NotificationVariant",
    "Viewer",
    "Favorite",
    "CartItem",
]
