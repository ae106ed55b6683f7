"""Configuration management with pydantic-settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hopdriver.exceptions import InvalidURLError
from hopdriver.hosts import HostRoots, host_of

DEFAULT_HOST = "http://www.example.com"


class DriverSettings(BaseSettings):
    """hopdriver settings loaded from environment variables.

    All settings use the HOPDRIVER_ prefix for environment variables.
    Assignments are validated, so a live instance can be toggled between
    navigations (``settings.app_host = "http://app.test"``); the driver
    reads host roots and the server-error flag at the moment it needs them.
    """

    # Host classification
    app_host: str | None = Field(
        default=None,
        description="Base URL of the application under test; only its host is local",
    )
    default_host: str | None = Field(
        default=DEFAULT_HOST,
        description="Base URL for relative paths when app_host is not set",
    )
    local_hosts: list[str] = Field(
        default_factory=list,
        description="Extra hostnames treated as local alongside default_host (JSON list)",
    )

    # Navigation policy
    raise_server_errors: bool = Field(
        default=False,
        description="Raise ServerError when a navigation ends with status >= 400",
    )
    follow_redirects: bool = Field(default=True, description="Follow 3xx redirects")
    redirect_limit: int = Field(
        default=5,
        gt=0,
        description="Maximum redirects followed per navigation",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Network transport timeout in seconds",
    )

    # Logging configuration
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: str = Field(default="console", description="Log format: console or json")

    model_config = SettingsConfigDict(
        env_prefix="HOPDRIVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    @field_validator("app_host", "default_host")
    @classmethod
    def _check_host_url(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        try:
            host = host_of(value)
        except InvalidURLError as exc:
            raise ValueError(str(exc)) from exc
        if host is None:
            raise ValueError(f"host URL must be absolute: {value!r}")
        return value

    @field_validator("local_hosts")
    @classmethod
    def _normalize_local_hosts(cls, value: list[str]) -> list[str]:
        return [h.strip().lower() for h in value if h and h.strip()]

    def host_roots(self) -> HostRoots:
        """Snapshot the current host configuration for one classification."""
        return HostRoots(
            app_host=self.app_host,
            default_host=self.default_host,
            local_hosts=frozenset(self.local_hosts),
        )


# Global settings instance
_settings: DriverSettings | None = None


def get_settings() -> DriverSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = DriverSettings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None
