"""
Configuration module using Pydantic Settings.

All settings are read once at process start from environment variables (or
a .env file) into an immutable Settings instance, which is then passed to
every component that needs it. Missing secrets fail construction, so the
process aborts at startup instead of failing per request.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import URL


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Settings are validated using Pydantic with type hints and frozen after
    construction.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = Field(default="user-service")
    version: str = Field(default="0.1.0")
    environment: Literal["development", "staging", "production"] = Field(default="development")
    debug: bool = Field(default=False)

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=9000, ge=1, le=65535)

    # -------------------------------------------------------------------------
    # Session and Access Token Configuration
    # -------------------------------------------------------------------------
    session_expire_millis: int = Field(default=604800000, ge=1)  # 7 days
    access_token_expire_millis: int = Field(default=900000, ge=1)  # 15 minutes
    access_token_private_key: SecretStr = Field(
        ...,
        description="PEM encoded RSA private key for signing access tokens",
    )
    access_token_public_key: str = Field(
        ...,
        description="PEM encoded RSA public key for verifying access tokens",
    )

    # -------------------------------------------------------------------------
    # Password Hashing (Argon2id)
    # -------------------------------------------------------------------------
    hash_cost: int = Field(default=2, ge=1, le=10)  # Argon2 time cost
    hash_memory_cost: int = Field(default=65536, ge=8)  # KiB
    hash_parallelism: int = Field(default=4, ge=1, le=16)

    # -------------------------------------------------------------------------
    # Database Configuration
    # -------------------------------------------------------------------------
    database_user: str = Field(default="postgres")
    database_password: SecretStr = Field(
        ...,
        description="Database password. Has no default.",
    )
    database_host: str = Field(default="localhost")
    database_port: int = Field(default=5432, ge=1, le=65535)
    database_name: str = Field(default="user")
    database_connection_timeout_millis: int = Field(default=0, ge=0)  # 0 = wait forever
    database_max_client_count: int = Field(default=20, ge=1)
    database_should_use_tls: bool = Field(default=False)

    # -------------------------------------------------------------------------
    # Logging Configuration
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")

    # -------------------------------------------------------------------------
    # Database Initialiser
    # -------------------------------------------------------------------------
    admin_email_address: str | None = Field(default=None)
    admin_password: SecretStr | None = Field(default=None)
    should_force_initialisation: bool = Field(default=False)

    @field_validator("database_password", "access_token_private_key")
    @classmethod
    def secret_not_empty(cls, v: SecretStr) -> SecretStr:
        """Reject secrets that are set but empty."""
        if not v.get_secret_value():
            raise ValueError("must not be empty")
        return v

    @field_validator("access_token_public_key")
    @classmethod
    def public_key_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def database_url(self) -> URL:
        """Database URL for the asyncpg driver."""
        return URL.create(
            drivername="postgresql+asyncpg",
            username=self.database_user,
            password=self.database_password.get_secret_value(),
            host=self.database_host,
            port=self.database_port,
            database=self.database_name,
        )


@lru_cache
def get_settings() -> Settings:
    """Build the settings once per process."""
    return Settings()
