from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import SecretStr

from ytwrapped.config import AppSettings, load_settings
from ytwrapped.errors import ValidationError
from ytwrapped.store.settings_store import SavedSettings

ENV_NAMES = (
    "YTW_YOUTRACK_URL",
    "YTW_YOUTRACK_TOKEN",
    "YTW_YEAR",
    "YTW_ARTICLE_PROJECTS",
    "YTW_TIMEZONE",
    "YTW_DATA_DIR",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def _saved() -> SavedSettings:
    return SavedSettings(
        base_url="https://saved.example.com",
        token=SecretStr("saved-token"),
        year=2024,
        article_projects="KB",
    )


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Settings should load from YTW_ prefixed environment variables."""
    monkeypatch.setenv("YTW_YOUTRACK_URL", "https://env.example.com/")
    monkeypatch.setenv("YTW_YOUTRACK_TOKEN", "env-token")
    monkeypatch.setenv("YTW_YEAR", "2025")
    monkeypatch.setenv("YTW_ARTICLE_PROJECTS", " KB, ,DOCS ")
    monkeypatch.setenv("YTW_DATA_DIR", "out")

    settings = AppSettings()

    assert settings.year == 2025
    assert settings.article_project_list == ["KB", "DOCS"]
    assert settings.credential().base_url == "https://env.example.com"
    assert settings.dataset_path(2025) == Path("out/raw/2025.json")
    assert settings.report_path(2025) == Path("out/agg/2025.json")


def test_settings_read_dotenv_file(tmp_path: Path) -> None:
    """Settings should load from a .env file in the working directory."""
    (tmp_path / ".env").write_text("YTW_YOUTRACK_URL=https://dotenv.example.com\nYTW_YEAR=2023\n", encoding="utf-8")

    settings = AppSettings()

    assert settings.youtrack_url == "https://dotenv.example.com"
    assert settings.year == 2023


@pytest.mark.parametrize(
    ("values", "message"),
    [
        ({"youtrack_token": "token"}, "YTW_YOUTRACK_URL must be configured"),
        ({"youtrack_url": "https://yt.example.com"}, "YTW_YOUTRACK_TOKEN must be configured"),
        ({"youtrack_url": "https://yt.example.com", "youtrack_token": "   "}, "YTW_YOUTRACK_TOKEN must be configured"),
    ],
)
def test_credential_requires_url_and_token(values: dict[str, str], message: str) -> None:
    """A missing URL or token should name the variable to configure."""
    settings = AppSettings.model_validate(values)

    with pytest.raises(ValidationError, match=message):
        settings.credential()


def test_require_year() -> None:
    """The year should be required before collection."""
    with pytest.raises(ValidationError, match="YTW_YEAR must be configured"):
        AppSettings.model_validate({}).require_year()
    assert AppSettings.model_validate({"year": 2025}).require_year() == 2025


def test_load_settings_fills_gaps_from_saved_settings() -> None:
    """Remembered settings should fill fields the environment leaves empty."""
    settings = load_settings(_saved())

    assert settings.youtrack_url == "https://saved.example.com"
    assert settings.youtrack_token.get_secret_value() == "saved-token"
    assert settings.year == 2024
    assert settings.article_projects == "KB"


def test_environment_wins_over_saved_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment values should take precedence over remembered ones."""
    monkeypatch.setenv("YTW_YOUTRACK_URL", "https://env.example.com")
    monkeypatch.setenv("YTW_YEAR", "2025")

    settings = load_settings(_saved())

    assert settings.youtrack_url == "https://env.example.com"
    assert settings.year == 2025
    assert settings.youtrack_token.get_secret_value() == "saved-token"


def test_load_settings_without_saved_settings() -> None:
    """Without remembered settings the defaults should stay untouched."""
    settings = load_settings(None)

    assert settings.youtrack_url == ""
    assert settings.year is None


def test_require_year_rejects_remembered_year_before_1970() -> None:
    """A remembered year before 1970 should be rejected."""
    saved = SavedSettings(base_url="https://saved.example.com", token=SecretStr("saved-token"), year=1969)

    settings = load_settings(saved)

    with pytest.raises(ValidationError, match="YTW_YEAR must be 1970 or later, got 1969"):
        settings.require_year()
