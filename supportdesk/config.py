"""Configuration management using pydantic-settings."""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


DEFAULT_ESCALATION_KEYWORDS = (
    "speak to admin,talk to human,real person,human support,superadmin,"
    "talk to someone,speak to someone,contact support,need help from admin,"
    "escalate,manager,supervisor"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=7788, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")

    # Storage Configuration
    database_path: str = Field(default="./data/support_desk.db", description="DuckDB database file")

    # Text-Completion Gateway Configuration
    gateway_base_url: str = Field(
        default="https://ai.gateway.lovable.dev/v1",
        description="OpenAI-compatible API base URL"
    )
    gateway_api_key: Optional[str] = Field(default=None, description="Gateway API key")
    gateway_model: str = Field(default="google/gemini-3-flash-preview", description="Completion model")
    gateway_timeout: float = Field(default=30.0, gt=0, description="Gateway call timeout in seconds")

    # Router Configuration
    history_limit: int = Field(default=10, ge=0, description="Messages of context sent to the gateway")
    escalation_keywords: str = Field(
        default=DEFAULT_ESCALATION_KEYWORDS,
        description="Phrases that escalate a conversation (comma separated)"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_file: str = Field(default="./logs/app.log", description="Log file path")

    def get_escalation_keywords(self) -> List[str]:
        """Get list of escalation keywords, lower-cased."""
        return [k.strip().lower() for k in self.escalation_keywords.split(",") if k.strip()]


# Global settings instance
settings = Settings()
