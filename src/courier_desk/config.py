"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="COURIER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Courier Desk API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for the state file and exports.")
    state_file: str = Field(
        default="courier-app-storage.json",
        description="File name (under data_root) holding credentials, entries and Drive tokens.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Upstream courier services
    hoorin_base_url: str = Field(
        default="https://dash.hoorin.com/api/courier/api",
        description="Courier aggregator search endpoint.",
    )
    hoorin_api_key: Optional[str] = Field(default=None, description="API key for the courier aggregator.")
    steadfast_base_url: str = Field(default="https://portal.packzy.com/api/v1")
    http_timeout_seconds: float = Field(default=30.0, gt=0.0)
    http_max_retries: int = Field(default=2, ge=0)
    http_backoff_seconds: float = Field(default=0.5, ge=0.0)
    max_parallel_feeds: int = Field(default=2, ge=1)
    dedicated_feed_slug: str = Field(
        default="steadfast",
        description="Aggregator courier whose row is replaced by the dedicated fraud-check feed.",
    )

    # AI extraction
    openai_api_key: Optional[str] = Field(default=None)
    openai_base_url: Optional[str] = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")

    # Google Drive backup
    google_client_id: Optional[str] = Field(default=None)
    google_client_secret: Optional[str] = Field(default=None)
    app_url: str = Field(
        default="http://localhost:3000",
        description="Public base URL used to build the OAuth redirect and post-auth redirects.",
    )

    report_timezone: Optional[str] = Field(
        default=None,
        description="IANA zone used for report date filters and CSV timestamps (host local time if unset).",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @property
    def state_path(self) -> Path:
        return self.data_root / self.state_file

    @property
    def google_redirect_uri(self) -> str:
        return f"{self.app_url.rstrip('/')}/api/backup/callback"


settings = Settings()
