"""
JWT Token Handler

Resolves the viewer from a Supabase access token.
Uses python-jose for JWT operations.
"""
import logging
from typing import Dict, Any
from jose import jwt, JWTError

from marketplace_chat.config import settings
from marketplace_chat.core.exceptions import AuthenticationError
from marketplace_chat.models.viewer import Viewer

logger = logging.getLogger(__name__)


def decode_jwt_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a Supabase JWT token.

    Args:
        token: Access token issued by Supabase Auth

    Returns:
        Decoded JWT payload as dictionary

    Raises:
        AuthenticationError: If token is invalid, expired, or malformed
    """
    if not settings.is_jwt_configured:
        logger.error("Supabase JWT configuration is missing")
        raise AuthenticationError("Authentication service is not configured")

    if not token:
        raise AuthenticationError("Token is required")

    try:
        # Supabase signs access tokens with HS256
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience="authenticated",
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_aud": True,
            }
        )

        logger.debug(f"JWT token decoded successfully for user: {payload.get('sub')}")
        return payload

    except jwt.ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise AuthenticationError("Token has expired")

    except jwt.JWTClaimsError as e:
        logger.warning(f"JWT claims error: {e}")
        raise AuthenticationError("Invalid token claims")

    except JWTError as e:
        logger.warning(f"JWT validation error: {e}")
        raise AuthenticationError("Invalid token")


def extract_viewer_from_token(token: str) -> Viewer:
    """
    Build the Viewer from a Supabase access token.

    Raises:
        AuthenticationError: If token is invalid or carries no subject
    """
    payload = decode_jwt_token(token)

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("User ID (sub) not found in token")

    viewer = Viewer(
        user_id=user_id,
        email=payload.get("email"),
        role=payload.get("role"),
        exp=payload.get("exp"),
    )
    logger.info(f"Viewer extracted from token: {viewer.user_id}")
    return viewer
