"""Viewer resolution from the Supabase client's own auth session"""
import logging

from supabase import AsyncClient

from marketplace_chat.core.exceptions import AuthenticationError
from marketplace_chat.models.viewer import Viewer

logger = logging.getLogger(__name__)


async def get_current_viewer(client: AsyncClient) -> Viewer:
    """
    Return the signed-in viewer of the given client.

    Raises:
        AuthenticationError: If nobody is signed in or the lookup fails
    """
    try:
        response = await client.auth.get_user()
    except Exception as e:
        logger.warning(f"Could not read authenticated user: {e}")
        raise AuthenticationError("Could not resolve the authenticated user") from e

    user = getattr(response, "user", None) if response else None
    if user is None:
        raise AuthenticationError("No authenticated user")

    return Viewer(user_id=user.id, email=getattr(user, "email", None), role=getattr(user, "role", None))
