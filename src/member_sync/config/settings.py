"""
Application settings using Pydantic Settings.

Environment variables are loaded from .env file.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.
    
    Create a .env file in the project root to override any of these values.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # ========================================================================
    # Database
    # ========================================================================
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "congress"
    MEMBERS_COLLECTION: str = "members"
    
    # ========================================================================
    # External APIs
    # ========================================================================
    
    # ProPublica Congress API (sent as X-API-Key)
    PROPUBLICA_API_KEY: Optional[str] = None
    
    # Timeout for a single upstream request, applied by the HTTP transport
    HTTP_TIMEOUT: float = 30.0
    
    # Pause between consecutive requests to the same upstream (seconds)
    REQUEST_COOL_DOWN: float = 0.5
    
    # ========================================================================
    # Sync behaviour
    # ========================================================================
    
    # Consecutive failures (with no success ever) before a source is skipped
    SOURCE_FAIL_LIMIT: int = 3
    PICTURE_FAIL_LIMIT: int = 3
    
    # Validity of the cached congress-legislators dataset
    LEGISLATOR_CACHE_HOURS: int = 24
    
    # ========================================================================
    # Profile pictures
    # ========================================================================
    PICTURE_DIR: str = "data/profile_pictures"
    PICTURE_BASE_URI: str = "https://ustwstorage.blob.core.windows.net/public-image/profile_pictures"
    
    # ========================================================================
    # Logging
    # ========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    
    @property
    def legislator_cache_millis(self) -> int:
        """Cache validity of the legislators dataset in epoch millis"""
        return self.LEGISLATOR_CACHE_HOURS * 3600 * 1000


# Singleton instance
settings = Settings()
