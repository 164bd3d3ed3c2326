"""
Conversation Service

Service layer for finding, creating and listing two-party conversations
in Supabase.
"""
import logging
from typing import List, Optional, Tuple
from datetime import datetime, timezone
from supabase import AsyncClient

from marketplace_chat.config import settings
from marketplace_chat.core.exceptions import TransientBackendError, ValidationError
from marketplace_chat.models.conversation import Conversation
from marketplace_chat.services.supabase_client import is_unique_violation

logger = logging.getLogger(__name__)


def canonical_pair(user_a: str, user_b: str) -> Tuple[str, str]:
    """Order a participant pair so the smaller id lands in participant1"""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


def pair_filter(user_a: str, user_b: str) -> str:
    """PostgREST OR filter matching the pair in either slot order"""
    return (
        f"and(participant1.eq.{user_a},participant2.eq.{user_b}),"
        f"and(participant1.eq.{user_b},participant2.eq.{user_a})"
    )


class ConversationService:
    """Service for managing conversations in Supabase"""

    def __init__(self, client: AsyncClient):
        self.client = client

    @property
    def table(self):
        return self.client.table(settings.CONVERSATIONS_TABLE)

    async def find_conversation(self, user_a: str, user_b: str) -> Optional[Conversation]:
        """
        Find the conversation between two users, regardless of slot order.

        More than one row means two creators raced past the lookup; the
        oldest row is used and the duplicate is logged.

        Raises:
            TransientBackendError: If the query fails
        """
        try:
            response = await (
                self.table
                .select("*")
                .or_(pair_filter(user_a, user_b))
                .order("created_at", desc=False)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error looking up conversation between {user_a} and {user_b}: {e}")
            raise TransientBackendError(f"Failed to look up conversation: {str(e)}") from e

        if not response.data:
            return None

        if len(response.data) > 1:
            ids = [row["id"] for row in response.data]
            logger.warning(
                f"Found {len(ids)} conversations between {user_a} and {user_b}: {ids}. "
                f"Using oldest {ids[0]}"
            )

        return Conversation(**response.data[0])

    async def find_or_create_conversation(self, self_id: str, other_id: str) -> str:
        """
        Return the id of the conversation between two users, creating it if needed.

        Participants are stored in canonical order. A unique violation on insert
        means a concurrent call created the row first; it is then re-fetched.

        Args:
            self_id: UUID of the viewer
            other_id: UUID of the counterpart

        Returns:
            Conversation UUID

        Raises:
            ValidationError: If both ids are the same user
            TransientBackendError: If the lookup or insert fails
        """
        if not self_id or not other_id:
            raise ValidationError("Participante inválido")
        if self_id == other_id:
            raise ValidationError("Você não pode enviar mensagens para si mesmo")

        existing = await self.find_conversation(self_id, other_id)
        if existing:
            logger.debug(f"Reusing conversation {existing.id}")
            return existing.id

        participant1, participant2 = canonical_pair(self_id, other_id)
        try:
            response = await self.table.insert({
                "participant1": participant1,
                "participant2": participant2,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }).execute()

        except Exception as e:
            if not is_unique_violation(e):
                logger.error(f"Error creating conversation: {e}")
                raise TransientBackendError(f"Failed to create conversation: {str(e)}") from e

            logger.info(f"Conversation between {self_id} and {other_id} created concurrently, re-fetching")
            existing = await self.find_conversation(self_id, other_id)
            if existing is None:
                raise TransientBackendError("Conversation vanished after unique violation") from e
            return existing.id

        if not response.data:
            raise TransientBackendError("Failed to create conversation")

        conversation_id = response.data[0]["id"]
        logger.info(f"Created conversation {conversation_id} between {self_id} and {other_id}")
        return conversation_id

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        """
        Get a conversation by ID.

        Raises:
            TransientBackendError: If the query fails
        """
        try:
            response = await self.table.select("*").eq("id", conversation_id).limit(1).execute()
        except Exception as e:
            logger.error(f"Error fetching conversation {conversation_id}: {e}")
            raise TransientBackendError(f"Failed to fetch conversation: {str(e)}") from e

        if not response.data:
            return None
        return Conversation(**response.data[0])

    async def list_conversations(self, user_id: str) -> List[Conversation]:
        """
        List every conversation the user takes part in, newest first.

        Raises:
            TransientBackendError: If the query fails
        """
        try:
            response = await (
                self.table
                .select("*")
                .or_(f"participant1.eq.{user_id},participant2.eq.{user_id}")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error listing conversations for user {user_id}: {e}")
            raise TransientBackendError(f"Failed to list conversations: {str(e)}") from e

        conversations = [Conversation(**row) for row in response.data or []]
        logger.info(f"Listed {len(conversations)} conversations for user {user_id}")
        return conversations

    async def set_last_message(self, conversation_id: str, message_id: str) -> None:
        """
        Point the conversation at its most recent message.

        Raises:
            TransientBackendError: If the update fails
        """
        try:
            await (
                self.table
                .update({
                    "last_message_id": message_id,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })
                .eq("id", conversation_id)
                .execute()
            )
        except Exception as e:
            raise TransientBackendError(f"Failed to update last message of {conversation_id}: {str(e)}") from e
