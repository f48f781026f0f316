"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock modes enable local development without external services.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Baluplix Video API"
    api_version: str = "v1"
    admin_token: str = Field(
        default="",
        description="Shared admin secret. Sent as X-Admin-Token. Empty means every admin call is rejected."
    )

    # S3 / R2 Storage Configuration
    s3_bucket_name: str = Field(
        default="baluplix-videos",
        description="Bucket holding uploaded video objects"
    )
    s3_region: str = Field(
        default="us-east-1",
        description="Bucket region. Use 'auto' for Cloudflare R2."
    )
    s3_access_key_id: str = Field(
        default="",
        description="Access key ID for the storage account"
    )
    s3_secret_access_key: str = Field(
        default="",
        description="Secret access key for the storage account"
    )
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom endpoint for S3-compatible storage (R2, MinIO). None means AWS."
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real object storage."
    )

    # Snowflake Configuration
    snowflake_account: str = Field(
        default="",
        description="Snowflake account identifier"
    )
    snowflake_user: str = Field(
        default="",
        description="Snowflake service account username"
    )
    snowflake_password: str = Field(
        default="",
        description="Snowflake service account password"
    )
    snowflake_private_key_path: Optional[str] = Field(
        default=None,
        description="Path to RSA private key file for key-pair authentication"
    )
    snowflake_database: str = Field(
        default="BALUPLIX",
        description="Snowflake database name"
    )
    snowflake_schema: str = Field(
        default="CATALOG",
        description="Snowflake schema name"
    )
    snowflake_warehouse: str = Field(
        default="COMPUTE_WH",
        description="Snowflake warehouse for query execution"
    )
    snowflake_role: Optional[str] = Field(
        default=None,
        description="Snowflake role to use (optional)"
    )
    snowflake_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real Snowflake connection. Enables local dev without DB."
    )

    # Upload / playback workflow
    storage_key_prefix: str = Field(
        default="videos/",
        description="Namespace prefix for every generated storage key"
    )
    upload_url_expiry_seconds: int = Field(
        default=900,
        gt=0,
        description="Lifetime of presigned upload URLs (15 minutes)."
    )
    playback_url_expiry_seconds: int = Field(
        default=3600,
        gt=0,
        description="Lifetime of signed playback URLs (60 minutes). Longer than uploads since viewing sessions run long."
    )
    upstream_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Per-call timeout for metadata store and object storage calls."
    )
    verify_uploads: bool = Field(
        default=False,
        description="Check that the storage object exists before recording metadata."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on whether we're in mock mode.
        """
        missing = []

        if not self.admin_token:
            missing.append("ADMIN_TOKEN")

        if not self.snowflake_mock_mode:
            if not self.snowflake_account:
                missing.append("SNOWFLAKE_ACCOUNT")
            if not self.snowflake_user:
                missing.append("SNOWFLAKE_USER")
            if not self.snowflake_password and not self.snowflake_private_key_path:
                missing.append("SNOWFLAKE_PASSWORD or SNOWFLAKE_PRIVATE_KEY_PATH")

        if not self.storage_mock_mode:
            if not self.s3_access_key_id:
                missing.append("S3_ACCESS_KEY_ID")
            if not self.s3_secret_access_key:
                missing.append("S3_SECRET_ACCESS_KEY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, call get_settings.cache_clear() to reset.
    """
    return Settings()
