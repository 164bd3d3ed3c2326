"""
Message Service

Appends messages to conversations, marks them read and retrieves history.
"""
import logging
from typing import List, Optional
from datetime import datetime, timezone
from pydantic import ValidationError as PydanticValidationError
from supabase import AsyncClient

from marketplace_chat.config import settings
from marketplace_chat.core.exceptions import TransientBackendError, ValidationError
from marketplace_chat.models.conversation import Message
from marketplace_chat.services.conversation_service import ConversationService

logger = logging.getLogger(__name__)


def _parse_messages(rows: List[dict]) -> List[Message]:
    """Build Message objects from stored rows; a row that fails validation is a backend fault"""
    try:
        return [Message(**row) for row in rows]
    except PydanticValidationError as e:
        logger.error(f"Invalid message row returned by the backend: {e}")
        raise TransientBackendError(f"Invalid message data: {str(e)}") from e


class MessageService:
    """Service for the messages table"""

    def __init__(self, client: AsyncClient, conversations: Optional[ConversationService] = None):
        """
        Initialize Message Service

        Args:
            client: Supabase async client instance
            conversations: Conversation service used to move the last-message pointer
        """
        self.client = client
        self.conversations = conversations or ConversationService(client)

    @property
    def table(self):
        return self.client.table(settings.MESSAGES_TABLE)

    async def list_messages(self, conversation_id: str) -> List[Message]:
        """
        Get all messages of a conversation, oldest first.

        Raises:
            TransientBackendError: If the query fails
        """
        try:
            response = await (
                self.table
                .select("*")
                .eq("conversation_id", conversation_id)
                .order("created_at", desc=False)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching messages for conversation {conversation_id}: {e}")
            raise TransientBackendError(f"Failed to load messages: {str(e)}") from e

        messages = _parse_messages(response.data or [])
        logger.debug(f"Retrieved {len(messages)} messages for conversation {conversation_id}")
        return messages

    async def send_message(
        self,
        conversation_id: str,
        sender_id: str,
        receiver_id: str,
        content: str
    ) -> Message:
        """
        Insert a message and move the conversation's last-message pointer.

        The two writes are not atomic. When the pointer update fails the
        message still exists and the send is reported as successful; list
        views derive the last message by query, so they recover on reload.

        Args:
            conversation_id: UUID of the conversation
            sender_id: UUID of the sending participant
            receiver_id: UUID of the other participant
            content: Message text, trimmed before validation

        Returns:
            Created message

        Raises:
            ValidationError: If content is empty or sender equals receiver
            TransientBackendError: If the insert fails
        """
        text = (content or "").strip()
        if not text:
            raise ValidationError("A mensagem não pode estar vazia")
        if sender_id == receiver_id:
            raise ValidationError("Você não pode enviar mensagens para si mesmo")

        try:
            response = await self.table.insert({
                "conversation_id": conversation_id,
                "sender_id": sender_id,
                "receiver_id": receiver_id,
                "content": text,
                "read": False,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
        except Exception as e:
            logger.error(f"Error sending message in conversation {conversation_id}: {e}")
            raise TransientBackendError(f"Failed to send message: {str(e)}") from e

        if not response.data:
            raise TransientBackendError("Failed to send message")

        message = _parse_messages(response.data[:1])[0]

        try:
            await self.conversations.set_last_message(conversation_id, message.id)
        except TransientBackendError as e:
            logger.warning(f"Message {message.id} stored but last-message pointer is stale: {e}")

        logger.info(f"Sent message {message.id} in conversation {conversation_id}")
        return message

    async def mark_read(self, conversation_id: str, receiver_id: str) -> int:
        """
        Mark every unread message addressed to receiver_id as read.

        Returns:
            Number of messages flipped to read (0 when nothing was unread)

        Raises:
            TransientBackendError: If the update fails
        """
        try:
            response = await (
                self.table
                .update({"read": True})
                .eq("conversation_id", conversation_id)
                .eq("receiver_id", receiver_id)
                .eq("read", False)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error marking messages read in conversation {conversation_id}: {e}")
            raise TransientBackendError(f"Failed to mark messages as read: {str(e)}") from e

        updated = len(response.data or [])
        if updated:
            logger.info(f"Marked {updated} messages read in conversation {conversation_id}")
        return updated

    async def get_last_message(self, conversation_id: str) -> Optional[Message]:
        """
        Most recent message of a conversation, derived by query.

        Raises:
            TransientBackendError: If the query fails
        """
        try:
            response = await (
                self.table
                .select("*")
                .eq("conversation_id", conversation_id)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise TransientBackendError(f"Failed to load last message: {str(e)}") from e

        if not response.data:
            return None
        return _parse_messages(response.data[:1])[0]
