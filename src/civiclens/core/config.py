"""Configuration management for CivicLens."""

from pydantic_settings import BaseSettings
from pydantic import Field

from .constants import CooldownConstants


class Settings(BaseSettings):
    """Application settings."""
    
    # Gemini API (OpenAI-compatible endpoint)
    gemini_api_key: str = Field("", description="Gemini API key")
    GEMINI_API_KEY: str = Field("", description="Gemini API key (alternative naming)")
    gemini_model: str = Field("gemini-2.0-flash", description="Gemini model name")
    gemini_base_url: str = Field(
        "https://generativelanguage.googleapis.com/v1beta/openai/",
        description="OpenAI-compatible Gemini endpoint",
    )
    gemini_temperature: float = Field(0.3, description="Sampling temperature")
    gemini_max_tokens: int = Field(500, description="Maximum output tokens")
    request_timeout: float = Field(20.0, description="Request timeout in seconds")
    
    @property
    def effective_gemini_key(self) -> str:
        """Get the effective Gemini API key from either field."""
        return self.gemini_api_key or self.GEMINI_API_KEY
    
    # Demo mode: local keyword classifier only
    demo_mode: bool = Field(True, description="Use mock analysis instead of the API")
    
    # Cooldown between submissions
    disable_cooldown: bool = Field(False, description="Disable the submission cooldown")
    cooldown_seconds: int = Field(CooldownConstants.DEFAULT_SECONDS, description="Cooldown between submissions")
    
    # Durable local storage
    storage_dir: str = Field(".civiclens", description="Local storage directory")
    
    # Firestore
    firestore_project: str = Field("", description="Google Cloud project for Firestore")
    firestore_collection: str = Field("complaints", description="Firestore collection name")
    
    # LLM response cache
    llm_cache_enabled: bool = Field(True, description="Cache remote analysis responses")
    llm_cache_ttl_hours: int = Field(24, description="Cache time-to-live in hours")
    
    # Logging
    log_level: str = Field("INFO", description="Logging level")
    
    # Retry settings
    max_retries: int = Field(3, description="Maximum retry attempts")
    retry_delay: float = Field(1.0, description="Base retry delay in seconds")
    retry_backoff: float = Field(2.0, description="Retry backoff multiplier")
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()
