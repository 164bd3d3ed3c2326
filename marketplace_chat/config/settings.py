"""
Application Configuration
Centralized configuration management using environment variables
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables"""

    # Supabase Configuration
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")  # Anon key, RLS applies to the viewer
    SUPABASE_SERVICE_KEY: str = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
    SUPABASE_JWT_SECRET: str = os.getenv("SUPABASE_JWT_SECRET", "")

    # Realtime Configuration
    REALTIME_SCHEMA: str = os.getenv("REALTIME_SCHEMA", "public")

    # Table names
    CONVERSATIONS_TABLE: str = "conversations"
    MESSAGES_TABLE: str = "messages"
    PROFILES_TABLE: str = "profiles"
    FAVORITES_TABLE: str = "favorites"
    CART_ITEMS_TABLE: str = "cart_items"

    # Display fallbacks
    DEFAULT_PROFILE_NAME: str = os.getenv("DEFAULT_PROFILE_NAME", "Usuário")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def is_supabase_configured(self) -> bool:
        """Check if Supabase client configuration is present"""
        return bool(self.SUPABASE_URL and (self.SUPABASE_KEY or self.SUPABASE_SERVICE_KEY))

    @property
    def is_jwt_configured(self) -> bool:
        """Check if the JWT secret needed to verify access tokens is present"""
        return bool(self.SUPABASE_JWT_SECRET)


# Global settings instance
settings = Settings()
