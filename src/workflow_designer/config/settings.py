"""Configuration and settings management using pydantic-settings."""
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable loading."""

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_DESIGNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Core settings
    env: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=True, description="Emit JSON log lines")

    # Boundary API settings
    api_base_url: str | None = Field(
        default=None,
        description="Base URL of the definitions API; unset means offline mode",
    )
    api_token: SecretStr | None = Field(
        default=None,
        description="Bearer token for the definitions API",
    )
    request_timeout_s: int = Field(
        default=30,
        description="Timeout for each API request in seconds",
    )
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")

    # Start node webhook activation
    webhook_base_url: str = Field(
        default="",
        description="Public base URL used to build start-node webhook URLs",
    )

    @field_validator("request_timeout_s")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate that the request timeout is positive."""
        if v <= 0:
            raise ValueError("request_timeout_s must be positive")
        return v

    @property
    def is_offline(self) -> bool:
        """No API configured: built-in catalog and local files only."""
        return not self.api_base_url


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
