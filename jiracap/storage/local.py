"""Local storage utilities."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from jiracap.api.models import Snapshot
from jiracap.config.settings import (
    Settings,
    get_config_dir,
    get_settings,
    save_settings,
)

logger = logging.getLogger(__name__)

WORKSPACE_FILE = "workspace_v1.json"


class LocalStorage:
    """Manage local storage for jiracap."""

    @property
    def config_dir(self) -> Path:
        """Get the configuration directory."""
        return get_config_dir()

    @property
    def settings(self) -> Settings:
        """Get current settings."""
        return get_settings()

    def save(self, settings: Settings) -> None:
        """Save settings to disk."""
        save_settings(settings)

    # Workspace snapshot

    def _get_workspace_file(self) -> Path:
        """Get path to the workspace snapshot file."""
        return self.config_dir / WORKSPACE_FILE

    def load_workspace(self) -> Snapshot | None:
        """Load the saved workspace, or None if there is no usable one."""
        workspace_file = self._get_workspace_file()
        if not workspace_file.exists():
            return None
        try:
            data = json.loads(workspace_file.read_text())
            return Snapshot.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable workspace %s: %s", workspace_file, e)
            return None

    def save_workspace(self, snapshot: Snapshot) -> None:
        """Save the workspace snapshot."""
        workspace_file = self._get_workspace_file()
        workspace_file.write_text(json.dumps(snapshot.to_json_dict(), indent=2))

    def clear_workspace(self) -> None:
        """Delete the saved workspace."""
        self._get_workspace_file().unlink(missing_ok=True)

    # Client profitability inputs

    def get_revenue_map(self) -> dict[str, float]:
        """Get user-entered revenue per group key."""
        return dict(self.settings.revenue)

    def set_revenue(self, group: str, amount: float) -> None:
        """Set the revenue of a group (0 clears it)."""
        settings = self.settings
        settings.set_revenue(group, amount)
        self.save(settings)

    def set_hourly_rate(self, rate: float) -> None:
        """Set the internal cost per hour."""
        settings = self.settings
        settings.hourly_rate = rate
        self.save(settings)
