"""
Viewer Model

The authenticated user on whose behalf operations run, populated from
Supabase JWT claims or from the client session.
"""
from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime, timezone


class Viewer(BaseModel):
    user_id: str = Field(..., description="Unique user identifier (sub claim from JWT)")
    email: Optional[str] = Field(None, description="User's email address")
    role: Optional[str] = Field(None, description="User role from JWT")
    exp: Optional[int] = Field(None, description="Token expiration timestamp")

    @property
    def is_token_expired(self) -> bool:
        """Check if the token is expired. Session-derived viewers carry no exp."""
        if not self.exp:
            return False
        return datetime.now(timezone.utc).timestamp() > self.exp
