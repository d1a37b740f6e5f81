"""
Shared configuration management for the Redis learning project.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LearningConfig(BaseSettings):
    """Settings read from the environment (or a local .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_name: str = Field(default="redis-learning")
    log_level: str = Field(default="info")
    log_format: str = Field(default="console")

    # Redis connection
    redis_host: str = Field(default="localhost")
    redis_port: int = Field(default=6379)
    redis_password: Optional[str] = Field(default=None)
    redis_db: int = Field(default=0)
    redis_socket_timeout: float = Field(default=5.0)

    # Observability
    metrics_port: int = Field(default=0)

    @property
    def redis_url(self) -> str:
        """Connection URL assembled from the individual Redis settings."""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"


def get_config(**overrides) -> LearningConfig:
    """Get a fresh configuration instance."""
    return LearningConfig(**overrides)
