"""Tests for configuration settings."""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from jiracap.config.auth import (
    AuthError,
    get_api_token,
    get_jira_email,
    get_jira_url,
    get_verify_ssl,
)
from jiracap.config.settings import (
    Settings,
    get_config_dir,
    get_settings,
    get_settings_path,
    reset_settings,
    save_settings,
)


class TestSettings:
    """Tests for the Settings model."""

    def test_defaults(self) -> None:
        """Defaults match Jira Cloud's usual custom fields."""
        settings = Settings()

        assert settings.story_points_field == "customfield_10016"
        assert settings.sprint_field == "customfield_10020"
        assert settings.max_results == 100
        assert settings.hourly_rate == 150
        assert settings.group_by == "epic"
        assert settings.revenue == {}

    def test_invalid_page_size(self) -> None:
        """Page size must be positive."""
        with pytest.raises(ValidationError):
            Settings(max_results=0)

    def test_set_revenue(self) -> None:
        """set_revenue stores and clears amounts."""
        settings = Settings()

        settings.set_revenue("Acme", 1200)
        assert settings.revenue == {"Acme": 1200}

        settings.set_revenue("Acme", 0)
        assert settings.revenue == {}

    def test_clear_unknown_revenue(self) -> None:
        """Clearing a group without revenue is a no-op."""
        settings = Settings()
        settings.set_revenue("Nobody", 0)
        assert settings.revenue == {}


class TestSettingsPersistence:
    """Tests for settings file loading and saving."""

    def test_get_config_dir_creates_directory(self) -> None:
        """get_config_dir creates the directory if needed."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch("jiracap.config.settings.Path.home", return_value=Path(tmpdir)):
                reset_settings()
                config_dir = get_config_dir()

                assert config_dir.exists()
                assert config_dir == Path(tmpdir) / ".jiracap"

    def test_settings_path(self) -> None:
        """get_settings_path returns correct path."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch("jiracap.config.settings.Path.home", return_value=Path(tmpdir)):
                reset_settings()
                path = get_settings_path()

                assert path == Path(tmpdir) / ".jiracap" / "config.toml"

    def test_get_settings_default(self) -> None:
        """get_settings returns default settings when file doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch("jiracap.config.settings.Path.home", return_value=Path(tmpdir)):
                reset_settings()
                settings = get_settings()

                assert settings == Settings()

    def test_save_and_load(self) -> None:
        """Saved settings load back from TOML."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch("jiracap.config.settings.Path.home", return_value=Path(tmpdir)):
                reset_settings()
                settings = Settings(story_points_field="customfield_10042", hourly_rate=90)
                settings.set_revenue("Acme Corp", 15000)
                save_settings(settings)

                reset_settings()
                loaded = get_settings()

                assert loaded.story_points_field == "customfield_10042"
                assert loaded.hourly_rate == 90
                assert loaded.revenue == {"Acme Corp": 15000}

    def test_settings_cached(self) -> None:
        """get_settings returns the cached instance."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch("jiracap.config.settings.Path.home", return_value=Path(tmpdir)):
                reset_settings()
                assert get_settings() is get_settings()

        reset_settings()


class TestAuth:
    """Tests for credentials from the environment."""

    def test_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The site URL loses its trailing slash."""
        monkeypatch.setenv("JIRA_URL", "https://acme.atlassian.net/")
        assert get_jira_url() == "https://acme.atlassian.net"

    @pytest.mark.parametrize(
        "var,getter",
        [
            ("JIRA_URL", get_jira_url),
            ("JIRA_EMAIL", get_jira_email),
            ("JIRA_TOKEN", get_api_token),
        ],
    )
    def test_missing(self, monkeypatch: pytest.MonkeyPatch, var: str, getter: object) -> None:
        """Missing variables raise AuthError naming the variable."""
        monkeypatch.delenv(var, raising=False)
        with pytest.raises(AuthError, match=var):
            getter()

    @pytest.mark.parametrize(
        "value,expected",
        [("true", True), ("1", True), ("false", False), ("NO", False), ("off", False)],
    )
    def test_verify_ssl(self, monkeypatch: pytest.MonkeyPatch, value: str, expected: bool) -> None:
        """JIRA_VERIFY_SSL toggles certificate verification."""
        monkeypatch.setenv("JIRA_VERIFY_SSL", value)
        assert get_verify_ssl() is expected

    def test_verify_ssl_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Certificates are verified by default."""
        monkeypatch.delenv("JIRA_VERIFY_SSL", raising=False)
        assert get_verify_ssl() is True
