"""Unread badge counts for the inbox"""
import logging
from supabase import AsyncClient

from marketplace_chat.config import settings
from marketplace_chat.core.exceptions import TransientBackendError

logger = logging.getLogger(__name__)


class UnreadCounter:

    def __init__(self, client: AsyncClient):
        self.client = client

    async def count_unread(self, conversation_id: str, viewer_id: str) -> int:
        """
        Count messages in a conversation addressed to the viewer and still unread.

        Raises:
            TransientBackendError: If the query fails
        """
        try:
            response = await (
                self.client.table(settings.MESSAGES_TABLE)
                .select("id", count="exact")
                .eq("conversation_id", conversation_id)
                .eq("receiver_id", viewer_id)
                .eq("read", False)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error counting unread messages in {conversation_id}: {e}")
            raise TransientBackendError(f"Failed to count unread messages: {str(e)}") from e

        return response.count or 0

    async def count_total(self, viewer_id: str) -> int:
        """
        Count unread messages addressed to the viewer across all conversations.

        Raises:
            TransientBackendError: If the query fails
        """
        try:
            response = await (
                self.client.table(settings.MESSAGES_TABLE)
                .select("id", count="exact")
                .eq("receiver_id", viewer_id)
                .eq("read", False)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error counting unread messages for viewer {viewer_id}: {e}")
            raise TransientBackendError(f"Failed to count unread messages: {str(e)}") from e

        return response.count or 0
