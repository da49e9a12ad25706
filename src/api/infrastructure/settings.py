"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        MEMBERSHIP_DB_HOST: Database host (default: localhost)
        MEMBERSHIP_DB_PORT: Database port (default: 5432)
        MEMBERSHIP_DB_DATABASE: Database name (default: membership)
        MEMBERSHIP_DB_USERNAME: Database user (default: membership)
        MEMBERSHIP_DB_PASSWORD: Database password (required in production)
        MEMBERSHIP_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        MEMBERSHIP_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="MEMBERSHIP_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="membership", description="Database name")
    username: str = Field(default="membership", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class MembershipSettings(BaseSettings):
    """Instance-wide policy consumed by the membership resolver.

    Passed explicitly into the services that need them rather than read
    from process-wide state.

    Environment variables:
        MEMBERSHIP_LFS_ENABLED: Global LFS switch (default: true)
        MEMBERSHIP_DEFAULT_BRANCH_PROTECTION: 0-3 (default: 2, full protection)
        MEMBERSHIP_BASE_URL: Canonical external URL (default: http://localhost)
        MEMBERSHIP_ASSET_HOST: Optional host serving uploads
        MEMBERSHIP_TWO_FACTOR_GRACE_PERIOD_DEFAULT: Hours (default: 48)
        MEMBERSHIP_TWO_FACTOR_CASCADE_MAX_ATTEMPTS: Per-user attempts (default: 3)
    """

    model_config = SettingsConfigDict(
        env_prefix="MEMBERSHIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    lfs_enabled: bool = Field(default=True, description="Global LFS switch")
    default_branch_protection: int = Field(
        default=2,
        description=(
            "Protection applied to default branches "
            "(0 none, 1 developers can push, 2 full, 3 developers can merge)"
        ),
        ge=0,
        le=3,
    )
    base_url: str = Field(
        default="http://localhost", description="Canonical external URL"
    )
    asset_host: str | None = Field(
        default=None, description="Host serving uploaded assets, if any"
    )
    two_factor_grace_period_default: int = Field(
        default=48,
        description="Grace period (hours) when no group imposes one",
        ge=0,
    )
    two_factor_cascade_max_attempts: int = Field(
        default=3,
        description="Attempts per user when recomputing two-factor requirements",
        ge=1,
        le=10,
    )

    @model_validator(mode="after")
    def strip_trailing_slashes(self) -> "MembershipSettings":
        """Normalize URLs so paths can be appended safely."""
        self.base_url = self.base_url.rstrip("/")
        if self.asset_host is not None:
            self.asset_host = self.asset_host.rstrip("/")
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Membership Service", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def membership(self) -> MembershipSettings:
        """Get membership policy settings."""
        return get_membership_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_membership_settings() -> MembershipSettings:
    """Get cached membership policy settings."""
    return MembershipSettings()
