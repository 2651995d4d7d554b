"""
Server settings operations for the Grafana HTTP API.
"""

import logging
from typing import Dict, Any, Optional

from ..core.errors import SyncError


class SettingsAPI:
    """Mixin for reading Grafana server settings."""

    logger: logging.Logger

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Method provided by APIClient base class."""
        ...

    def get_auto_assign_org_id(self) -> int:
        """
        Get the organization new users are added to automatically.

        Returns:
            Organization ID from users.auto_assign_org_id

        Raises:
            SyncError: If the setting is not present
        """
        settings = self.get("/api/admin/settings")
        value = (settings.get("users") or {}).get("auto_assign_org_id")
        if value is None:
            raise SyncError("setting users.auto_assign_org_id not found")
        return int(value)
