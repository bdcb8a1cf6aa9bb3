"""Shared pytest fixtures for the YouTrack Wrapped test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import SecretStr

from ytwrapped.config import AppSettings
from ytwrapped.models import Credential

if TYPE_CHECKING:
    from pathlib import Path

pytest_plugins = ("respx",)



@pytest.fixture
def credential() -> Credential:
    """Provide a credential pointing at a fake YouTrack instance."""
    return Credential(base_url="https://youtrack.example.com/", token=SecretStr("token"))  # pragma: allowlist secret


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    """Provide application settings with deterministic defaults for tests."""
    return AppSettings.model_validate(
        {
            "youtrack_url": "https://youtrack.example.com",
            "youtrack_token": "token",  # pragma: allowlist secret
            "year": 2025,
            "article_projects": "KB",
            "timezone": "UTC",
            "data_dir": tmp_path / "data",
            "output_dir": tmp_path / "public",
            "saved_settings_path": tmp_path / "settings.json",
        },
    )
