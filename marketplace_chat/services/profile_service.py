"""
Profile Service

Resolves display profiles for conversation counterparts.
"""
import logging
from supabase import AsyncClient

from marketplace_chat.config import settings
from marketplace_chat.models.conversation import Profile

logger = logging.getLogger(__name__)


class ProfileService:
    """Read-only access to the profiles table"""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def resolve_profile(self, user_id: str) -> Profile:
        """
        Fetch the display profile of a user.

        Never raises: a missing row or any backend failure yields the
        placeholder profile so the UI is never blocked on it.

        Args:
            user_id: UUID of the user

        Returns:
            Stored profile, or Profile.placeholder(user_id)
        """
        try:
            response = await (
                self.client.table(settings.PROFILES_TABLE)
                .select("id, user_id, name, avatar_url")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )

            if not response.data:
                logger.warning(f"Profile not found for user {user_id}, using placeholder")
                return Profile.placeholder(user_id)

            return Profile(**response.data[0])

        except Exception as e:
            logger.warning(f"Error fetching profile for user {user_id}: {e}")
            return Profile.placeholder(user_id)
