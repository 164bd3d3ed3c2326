"""Shared fixtures for the conversation manager tests."""

import pytest

from marketplace_chat.services.conversation_manager import ConversationManager
from marketplace_chat.services.conversation_service import ConversationService
from marketplace_chat.services.message_service import MessageService
from marketplace_chat.services.notification_service import Notifier
from marketplace_chat.services.profile_service import ProfileService
from marketplace_chat.services.realtime_service import RealtimeSync
from marketplace_chat.services.unread_service import UnreadCounter
from tests.fakes import FakeSupabaseClient

BUYER_ID = "user-a"
SELLER_ID = "user-b"
OTHER_ID = "user-c"


@pytest.fixture
def client():
    """Fresh in-memory Supabase client."""
    return FakeSupabaseClient()


@pytest.fixture
def profiles(client):
    client.seed("profiles", user_id=BUYER_ID, name="Ana", avatar_url="https://cdn.example/ana.png")
    client.seed("profiles", user_id=SELLER_ID, name="Bruno", avatar_url=None)
    return client


@pytest.fixture
def conversation_service(client):
    return ConversationService(client)


@pytest.fixture
def message_service(client, conversation_service):
    return MessageService(client, conversation_service)


@pytest.fixture
def unread_counter(client):
    return UnreadCounter(client)


@pytest.fixture
def profile_service(client):
    return ProfileService(client)


@pytest.fixture
def realtime(client):
    return RealtimeSync(client)


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def buyer(client, profiles, notifier):
    """Conversation manager for the buyer."""
    return ConversationManager(client, BUYER_ID, notifier=notifier)


@pytest.fixture
def seller(client, profiles):
    """Conversation manager for the seller, sharing the same backend."""
    return ConversationManager(client, SELLER_ID, notifier=Notifier())
