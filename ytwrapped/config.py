"""Configuration management for the YouTrack Wrapped application."""

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from ytwrapped.errors import ValidationError
from ytwrapped.models import Credential

if TYPE_CHECKING:
    from ytwrapped.store.settings_store import SavedSettings

MIN_YEAR = 1970


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_prefix="YTW_",
        extra="ignore",
    )

    youtrack_url: str = Field(
        default="",
        description="Base URL of the YouTrack instance, e.g. https://example.youtrack.cloud.",
    )
    youtrack_token: SecretStr = Field(
        default=SecretStr(""),
        description="Permanent token used as a bearer credential.",
    )
    year: int | None = Field(
        default=None,
        ge=MIN_YEAR,
        description="Calendar year to summarize.",
    )
    article_projects: str = Field(
        default="",
        description="Comma-separated project short names to read knowledge base articles from.",
    )
    timezone: str | None = Field(
        default=None,
        description="IANA timezone used for calendar statistics. Defaults to the local zone.",
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding collected datasets and aggregated reports.",
    )
    output_dir: Path = Field(
        default=Path("public"),
        description="Directory the rendered report is published to.",
    )
    saved_settings_path: Path = Field(
        default=Path.home() / ".config" / "ytwrapped" / "settings.json",
        description="Where remembered connection settings are stored.",
    )

    @property
    def article_project_list(self) -> list[str]:
        """Return the article project short names, trimmed and without blanks."""
        return [name.strip() for name in self.article_projects.split(",") if name.strip()]

    def credential(self) -> Credential:
        """Return the connection credential or raise when part of it is missing."""
        if not self.youtrack_url.strip():
            msg = "YTW_YOUTRACK_URL must be configured"
            raise ValidationError(msg)
        if not self.youtrack_token.get_secret_value().strip():
            msg = "YTW_YOUTRACK_TOKEN must be configured"
            raise ValidationError(msg)
        return Credential(base_url=self.youtrack_url.strip(), token=self.youtrack_token)

    def require_year(self) -> int:
        """Return the configured year or raise when it is missing."""
        if self.year is None:
            msg = "YTW_YEAR must be configured (or pass --year)"
            raise ValidationError(msg)
        if self.year < MIN_YEAR:
            msg = f"YTW_YEAR must be {MIN_YEAR} or later, got {self.year}"
            raise ValidationError(msg)
        return self.year

    def dataset_path(self, year: int) -> Path:
        """Location of the collected dataset for a year."""
        return self.data_dir / "raw" / f"{year}.json"

    def report_path(self, year: int) -> Path:
        """Location of the aggregated report for a year."""
        return self.data_dir / "agg" / f"{year}.json"


def load_settings(saved: "SavedSettings | None" = None) -> AppSettings:
    """Load settings, filling connection fields the environment leaves empty from saved values."""
    settings = AppSettings()
    if saved is None:
        return settings
    updates: dict[str, object] = {}
    if not settings.youtrack_url:
        updates["youtrack_url"] = saved.base_url
    if not settings.youtrack_token.get_secret_value():
        updates["youtrack_token"] = saved.token
    if settings.year is None and saved.year is not None:
        updates["year"] = saved.year
    if not settings.article_projects and saved.article_projects:
        updates["article_projects"] = saved.article_projects
    if updates:
        settings = settings.model_copy(update=updates)
    return settings
