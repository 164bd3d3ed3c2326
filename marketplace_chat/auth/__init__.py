"""
Authentication Module

Resolves the current viewer from a Supabase JWT or client session.
"""
from marketplace_chat.auth.jwt_handler import decode_jwt_token, extract_viewer_from_token
from marketplace_chat.auth.session import get_current_viewer

__all__ = [
    "decode_jwt_token",
    "extract_viewer_from_token",
    "get_current_viewer",
]
