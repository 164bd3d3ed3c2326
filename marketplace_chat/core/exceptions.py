"""Custom exceptions for the conversation manager."""
from typing import Any, Dict, Optional


class MessagingError(Exception):
    """Base exception for marketplace messaging."""

    def __init__(
        self,
        message: str,
        error_code: str = "MESSAGING_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(MessagingError):
    """Rejected input (empty content, messaging yourself, ...). Raised before any write."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="VALIDATION_ERROR", details=details)


class TransientBackendError(MessagingError):
    """Any failure from the Supabase query, insert or subscribe calls."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="BACKEND_ERROR", details=details)


class ConversationNotFoundError(MessagingError):
    """Conversation id unknown or not visible to the viewer."""

    def __init__(self, conversation_id: str):
        super().__init__(
            message=f"Conversation {conversation_id} not found",
            error_code="CONVERSATION_NOT_FOUND",
            details={"conversation_id": conversation_id},
        )


class ConfigurationError(MessagingError):
    """Configuration-related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="CONFIGURATION_ERROR", details=details)


class AuthenticationError(MessagingError):
    """Authentication-related errors."""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, error_code="AUTHENTICATION_ERROR", details=details)
