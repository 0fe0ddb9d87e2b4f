"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can be overridden by an environment variable (PARALLELS_BRIDGE_ prefix)
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults work out-of-the-box on a macOS host with Parallels Desktop installed
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="PARALLELS_BRIDGE_", case_sensitive=False,
    )

    # Controller
    prlctl_binary: str = "prlctl"
    prlctl_timeout_seconds: float = 120.0
    prlctl_max_output_bytes: int = 10 * 1024 * 1024

    # createVM waits this long after starting a VM before configuring it
    vm_boot_wait_seconds: float = 5.0

    # Screenshots (system temp dir when unset)
    screenshot_dir: str | None = None

    # Audit log
    database_url: str = "sqlite+aiosqlite:///./parallels_bridge.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_sqlite_url(cls, v: str) -> str:
        """Plain sqlite:// URLs need the async driver."""
        if isinstance(v, str) and v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    database_pool_size: int = 5
    database_max_overflow: int = 5
    audit_tool_calls: bool = True

    # HTTP surface
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
