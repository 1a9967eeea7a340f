"""Configuration management using pydantic-settings."""

from pathlib import Path
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PRODUCT_NAME = "code-like-a-pro"


def backup_file_name(product_name: str) -> str:
    """Fixed file name for post backups of ``product_name``."""
    return f"{product_name}-posts-backup.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="JOURNAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Product / local tier
    product_name: str = Field(
        default=DEFAULT_PRODUCT_NAME, description="Product name used in file names"
    )
    data_dir: Path = Field(default=Path("./data"), description="Data directory path")
    profile: str = Field(default="default", description="Local storage profile name")
    local_quota_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum serialized size of a single local key (0 disables the check)",
    )

    # Remote tier
    remote_backend: Literal["auto", "drive", "firestore", "none"] = Field(
        default="auto", description="Remote adapter selection"
    )
    remote_timeout: float = Field(default=30.0, description="HTTP timeout for remote calls")
    remote_max_attempts: int = Field(
        default=1, description="Attempts per remote request (1 disables automatic retries)"
    )
    drive_file_name: str = Field(
        default=f"{DEFAULT_PRODUCT_NAME}-posts.json", description="Posts file name in the user's drive"
    )
    drive_api_url: str = Field(
        default="https://www.googleapis.com", description="Google APIs base URL"
    )
    firestore_api_url: str = Field(
        default="https://firestore.googleapis.com/v1", description="Firestore REST base URL"
    )
    identity_toolkit_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Identity Toolkit REST base URL",
    )

    # Static identity provider (tokens obtained out of band)
    oauth_access_token: str = Field(default="", description="Pre-obtained Google OAuth access token")
    oauth_user_id: str = Field(default="", description="User id reported with the static token")
    oauth_email: str = Field(default="", description="Email reported with the static token")

    log_level: str = Field(default="INFO", description="Console log level")

    @property
    def local_store_dir(self) -> Path:
        """Directory backing the local key-value store."""
        return self.data_dir / "profiles" / self.profile

    @property
    def logs_dir(self) -> Path:
        """Path to log file directory."""
        return self.data_dir / "logs"

    @property
    def export_file_name(self) -> str:
        """Fixed file name for post backups."""
        return backup_file_name(self.product_name)

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.local_store_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    @property
    def has_static_token(self) -> bool:
        """Check if a pre-obtained OAuth token is configured."""
        return bool(self.oauth_access_token)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
