"""Persistence for remembered connection settings."""

from __future__ import annotations

import logging
from pathlib import Path

import orjson
from pydantic import BaseModel, SecretStr, ValidationError, field_serializer


LOGGER = logging.getLogger(__name__)


class SavedSettings(BaseModel):
    """Connection settings the user chose to remember between runs."""

    base_url: str
    token: SecretStr
    year: int | None = None
    article_projects: str = ""

    @field_serializer("token", when_used="json")
    def _reveal_token(self, token: SecretStr) -> str:
        return token.get_secret_value()


class SettingsStore:
    """Read and write a single JSON settings file."""

    def __init__(self, path: Path) -> None:
        """Create a store backed by the provided file path."""
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Return the backing file path."""
        return self._path

    def load(self) -> SavedSettings | None:
        """Return the remembered settings, or None when absent or unreadable."""
        if not self._path.exists():
            return None
        try:
            payload = orjson.loads(self._path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as error:
            LOGGER.warning("Skipping unreadable settings file %s: %s", self._path, error)
            return None
        try:
            return SavedSettings.model_validate(payload)
        except ValidationError as error:
            LOGGER.warning("Skipping invalid settings file %s: %s", self._path, error)
            return None

    def save(self, settings: SavedSettings) -> None:
        """Write the settings, replacing any previous file."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_bytes(orjson.dumps(settings.model_dump(mode="json"), option=orjson.OPT_INDENT_2))
        LOGGER.info("Saved connection settings to %s", self._path)

    def clear(self) -> None:
        """Forget any remembered settings."""
        if self._path.exists():
            self._path.unlink()
            LOGGER.info("Cleared saved connection settings at %s", self._path)
