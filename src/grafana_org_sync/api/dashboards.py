"""
Folder and dashboard operations for the Grafana HTTP API.

Like data sources, folders and dashboards are scoped to the organization
selected by the X-Grafana-Org-Id header.
"""

import logging
from typing import List, Dict, Any, Optional

from ..models import DashboardSearchHit, Folder


class DashboardsAPI:
    """Mixin for folder and dashboard operations."""

    logger: logging.Logger

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Method provided by APIClient base class."""
        ...

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Method provided by APIClient base class."""
        ...

    def get_folders(self) -> List[Folder]:
        """Get all folders of the current organization."""
        result = self.get("/api/folders", params={"limit": 1000})
        if isinstance(result, list):
            return [Folder.from_dict(folder) for folder in result]
        return []

    def create_folder(self, title: str) -> Folder:
        """
        Create a folder.

        Args:
            title: Folder title

        Returns:
            The created folder
        """
        return Folder.from_dict(self.post("/api/folders", {"title": title}))

    def search_dashboards(self) -> List[DashboardSearchHit]:
        """Get all dashboards of the current organization with their folders."""
        result = self.get("/api/search", params={"type": "dash-db", "limit": 5000})
        if isinstance(result, list):
            return [DashboardSearchHit.from_dict(hit) for hit in result]
        return []

    def create_dashboard(
        self,
        model: Dict[str, Any],
        folder_uid: Optional[str] = None,
        overwrite: bool = True
    ) -> Dict[str, Any]:
        """
        Save a dashboard.

        Args:
            model: Dashboard JSON model
            folder_uid: UID of the target folder (None for the General folder)
            overwrite: Replace a dashboard with the same title or UID

        Returns:
            Save response (id, uid, url, status, version)
        """
        payload: Dict[str, Any] = {"dashboard": model, "overwrite": overwrite}
        if folder_uid:
            payload["folderUid"] = folder_uid
        return self.post("/api/dashboards/db", payload)
