"""
Configuration settings for the inbox triage service.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # === Application ===
    APP_NAME: str = "Inbox Triage"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    
    # === Ollama Configuration ===
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "mistral"
    OLLAMA_TIMEOUT: int = 60  # transport timeout, seconds
    
    # === Generation Bounds ===
    GENERATION_TIMEOUT_SECONDS: float = 30.0
    PROMPT_TOKEN_BUDGET: int = 3500
    MAX_RETRIES: int = 3  # attempts = MAX_RETRIES + 1
    
    # === Consensus ===
    CONSENSUS_THRESHOLD: int = 2
    CONSENSUS_MAX_ATTEMPTS: Optional[int] = None  # None = sample until agreement
    CONSENSUS_FALLBACK: Literal["raise", "most_frequent"] = "raise"
    
    # === Persistence ===
    STORE_PATH: str = "db.json"
    
    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
