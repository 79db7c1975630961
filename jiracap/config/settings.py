"""Configuration settings management."""

from pathlib import Path

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Application settings stored locally."""

    # Jira field mapping (custom field ids vary per site)
    story_points_field: str = Field(
        default="customfield_10016", description="Custom field holding story points"
    )
    sprint_field: str = Field(
        default="customfield_10020", description="Custom field holding sprint membership"
    )
    max_results: int = Field(default=100, gt=0, description="Page size for issue searches")

    # Client profitability
    hourly_rate: float = Field(default=150.0, ge=0, description="Internal cost per hour")
    group_by: str = Field(default="epic", description="Default grouping: 'epic' or 'project'")
    revenue: dict[str, float] = Field(
        default_factory=dict, description="User-entered revenue per group key"
    )

    def set_revenue(self, group: str, amount: float) -> None:
        """Set or clear (amount 0) the revenue of a group."""
        if amount:
            self.revenue[group] = amount
        else:
            self.revenue.pop(group, None)


# Global settings instance (lazy loaded)
_settings: Settings | None = None
_settings_path: Path | None = None


def get_config_dir() -> Path:
    """Get the configuration directory, creating it if needed."""
    config_dir = Path.home() / ".jiracap"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_settings_path() -> Path:
    """Get the path to the settings file."""
    return get_config_dir() / "config.toml"


def get_settings() -> Settings:
    """Load settings from disk, or return defaults."""
    global _settings, _settings_path

    settings_path = get_settings_path()

    # Return cached settings if path hasn't changed
    if _settings is not None and _settings_path == settings_path:
        return _settings

    _settings_path = settings_path

    if settings_path.exists():
        import tomllib

        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
        _settings = Settings.model_validate(data)
    else:
        _settings = Settings()

    return _settings


def save_settings(settings: Settings) -> None:
    """Save settings to disk."""
    global _settings

    import tomli_w

    settings_path = get_settings_path()
    data = settings.model_dump(exclude_none=True)

    with open(settings_path, "wb") as f:
        tomli_w.dump(data, f)

    _settings = settings


def reset_settings() -> None:
    """Reset cached settings (useful for testing)."""
    global _settings, _settings_path
    _settings = None
    _settings_path = None
