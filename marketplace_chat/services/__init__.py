"""Business logic services"""
from .notification_service import Notifier
from .profile_service import ProfileService
from .conversation_service import ConversationService
from .message_service import MessageService
from .unread_service import UnreadCounter
from .realtime_service import RealtimeSync, merge_message
from .conversation_manager import (
    ConversationManager,
    MessagingSession,
    StartState,
    compose_opener,
    create_conversation_manager,
)
from .favorites_service import FavoritesService
from .cart_service import CartService
from .supabase_client import get_supabase_client

__all__ = [
    "Notifier",
    "ProfileService",
    "ConversationService",
    "MessageService",
    "UnreadCounter",
    "RealtimeSync",
    "merge_message",
    "ConversationManager",
    "MessagingSession",
    "StartState",
    "compose_opener",
    "create_conversation_manager",
    "FavoritesService",
    "CartService",
    "get_supabase_client",
]
