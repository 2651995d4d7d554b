"""
Dashboard loading, normalization and sync.

Dashboard definitions are read once at startup from a directory holding one
subdirectory per version (v1, v2, ...); only the highest version is used and
its dashboards go into the folder "General v<N>".

Dashboards are only ever created. One that already exists (same title in the
same folder) is left alone, so manual edits in Grafana survive.
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, TYPE_CHECKING

from ..core.constants import DASHBOARD_EXPORT_FIELDS, GENERAL_FOLDER
from ..core.errors import DashboardValidationError
from ..models import Dashboard, DashboardDocument, DataSource, Folder

if TYPE_CHECKING:
    from ..api import GrafanaAPI

VERSION_DIR_PATTERN = re.compile(r"^v([0-9]+)$")


def load_dashboards(directory: str, logger: Optional[logging.Logger] = None) -> List[Dashboard]:
    """
    Load the latest version of the dashboard definitions.

    Args:
        directory: Directory holding the version subdirectories
        logger: Logger instance

    Returns:
        Dashboards of the highest version, sorted by file name

    Raises:
        FileNotFoundError: If the directory or a version subdirectory is missing
        DashboardValidationError: If a file is not a JSON object
    """
    logger = logger or logging.getLogger(__name__)
    base = Path(directory)
    if not base.is_dir():
        raise FileNotFoundError(f"Dashboards directory not found: {directory}")

    versions = []
    for entry in base.iterdir():
        match = VERSION_DIR_PATTERN.match(entry.name)
        if entry.is_dir() and match:
            versions.append(int(match.group(1)))

    if not versions:
        raise FileNotFoundError(f"No dashboard version directory (v<N>) in {directory}")

    latest = max(versions)
    version_dir = base / f"v{latest}"
    folder = f"{GENERAL_FOLDER} v{latest}"

    dashboards = []
    for path in sorted(version_dir.glob("*.json")):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DashboardValidationError(f"Invalid dashboard file {path}: {e}") from e
        dashboards.append(Dashboard(folder=folder, document=DashboardDocument(data)))

    logger.info(f"Loaded {len(dashboards)} dashboards from {version_dir} into folder '{folder}'")
    return dashboards


def normalize_dashboard(document: DashboardDocument, data_source: DataSource) -> DashboardDocument:
    """
    Prepare an exported dashboard for creation in an organization.

    Works on a copy. Removes the fields that tie the export to its origin and
    points every panel and template variable at the given data source.

    Args:
        document: Dashboard as exported
        data_source: Data source of the target organization

    Returns:
        Normalized copy of the document

    Raises:
        DashboardValidationError: If panels or templating have an unexpected shape
    """
    normalized = document.copy()
    for key in DASHBOARD_EXPORT_FIELDS:
        normalized.remove(key)

    reference = {"type": data_source.type, "uid": data_source.uid}

    for panel in normalized.get_object_list("panels") or []:
        panel["datasource"] = dict(reference)

    templating = normalized.get_object("templating")
    if templating is not None:
        variables = normalized.get_object_list("list", container=templating, path="templating.list")
        for variable in variables or []:
            variable["datasource"] = dict(reference)
            variable.pop("current", None)

    return normalized


class DashboardSync:
    """Create missing folders and dashboards in one organization."""

    def __init__(
        self,
        client: "GrafanaAPI",
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize dashboard sync.

        Args:
            client: Grafana client scoped to the organization
            logger: Logger instance
        """
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    def _ensure_folder(self, org_id: int, title: str, folders: Dict[str, Folder]) -> Optional[str]:
        """Return the UID of the folder with this title, creating it if needed."""
        if title == GENERAL_FOLDER:
            return None
        folder = folders.get(title)
        if folder is None:
            self.logger.info(f"Creating folder '{title}' for organization {org_id}")
            folder = self.client.create_folder(title)
            folders[title] = folder
        return folder.uid

    def sync(self, org_id: int, dashboards: List[Dashboard], data_source: DataSource) -> int:
        """
        Create the dashboards missing in the organization.

        Args:
            org_id: Grafana organization ID (for log lines)
            dashboards: Desired dashboards
            data_source: Data source the dashboards should query

        Returns:
            Number of dashboards created

        Raises:
            DashboardValidationError: If a dashboard document is malformed
        """
        folders = {folder.title: folder for folder in self.client.get_folders()}
        existing: Set[Tuple[str, str]] = {
            (hit.folder_title or GENERAL_FOLDER, hit.title)
            for hit in self.client.search_dashboards()
        }

        created = 0
        for dashboard in dashboards:
            title = dashboard.title
            folder_uid = self._ensure_folder(org_id, dashboard.folder, folders)

            if (dashboard.folder, title) in existing:
                continue

            normalized = normalize_dashboard(dashboard.document, data_source)
            self.logger.info(f"Creating dashboard '{title}' for organization {org_id}")
            self.client.create_dashboard(normalized.to_dict(), folder_uid=folder_uid, overwrite=True)
            existing.add((dashboard.folder, title))
            created += 1

        return created
