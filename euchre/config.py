"""Application configuration using Pydantic settings."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    environment: str = Field(default="development", description="Environment")
    frontend_url: str = Field(default="http://localhost:5173", description="Frontend URL")
    log_level: str = Field(default="INFO", description="Log level for euchre loggers")

    # MongoDB
    mongodb_host: str = Field(default="localhost", description="MongoDB host")
    mongodb_port: int = Field(default=27017, description="MongoDB port")
    mongodb_database: str = Field(default="euchre", description="MongoDB database name")
    mongodb_username: Optional[str] = Field(default=None, description="MongoDB username")
    mongodb_password: Optional[str] = Field(default=None, description="MongoDB password")

    # Redis
    broker_redis_host: str = Field(default="localhost", description="Redis host")
    broker_redis_port: int = Field(default=6379, description="Redis port")
    broker_redis_password: Optional[str] = Field(default=None, description="Redis password")
    redis_db: int = Field(default=0, description="Redis database number")

    # Game Configuration
    next_hand_delay_seconds: float = Field(
        default=3.0, description="Pause between hand scoring and the next deal"
    )
    message_log_size: int = Field(default=15, description="Entries kept in a game's message log")
    chat_history_size: int = Field(default=50, description="Chat messages kept per game")

    # Persistence
    snapshot_interval_seconds: int = Field(default=30, description="Seconds between snapshots")
    game_expiry_hours: int = Field(
        default=24, description="Games untouched for this long are purged from storage"
    )

    @property
    def mongodb_uri(self) -> str:
        """Build MongoDB connection URI."""
        if self.mongodb_username and self.mongodb_password:
            return f"mongodb://{self.mongodb_username}:{self.mongodb_password}@{self.mongodb_host}:{self.mongodb_port}"
        return f"mongodb://{self.mongodb_host}:{self.mongodb_port}"

    @property
    def redis_url(self) -> str:
        """Build Redis connection URL."""
        if self.broker_redis_password:
            return f"redis://:{self.broker_redis_password}@{self.broker_redis_host}:{self.broker_redis_port}/{self.redis_db}"
        return f"redis://{self.broker_redis_host}:{self.broker_redis_port}/{self.redis_db}"


# Global settings instance
settings = Settings()
