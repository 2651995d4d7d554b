"""
Organization operations for the Grafana HTTP API.

Handles listing, creating, renaming and deleting organizations.
"""

import logging
from typing import List, Dict, Any, Optional

from ..models import Org


class OrganizationsAPI:
    """Mixin for organization-related API operations."""

    logger: logging.Logger

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Method provided by APIClient base class."""
        ...

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Method provided by APIClient base class."""
        ...

    def put(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Method provided by APIClient base class."""
        ...

    def delete(self, endpoint: str) -> Any:
        """Method provided by APIClient base class."""
        ...

    def get_orgs(self) -> List[Org]:
        """
        Get list of all organizations.

        Returns:
            List of organizations
        """
        self.logger.debug("Fetching organizations")
        result = self.get("/api/orgs", params={"perpage": 100000})
        if isinstance(result, list):
            return [Org.from_dict(org) for org in result]
        return []

    def get_org(self, org_id: int) -> Org:
        """Get a single organization by ID."""
        return Org.from_dict(self.get(f"/api/orgs/{org_id}"))

    def create_org(self, name: str) -> Org:
        """
        Create an organization.

        Args:
            name: Organization name

        Returns:
            The created organization
        """
        result = self.post("/api/orgs", {"name": name})
        return Org(id=result["orgId"], name=name)

    def update_org_name(self, org_id: int, name: str) -> None:
        """Rename an organization."""
        self.put(f"/api/orgs/{org_id}", {"name": name})

    def delete_org(self, org_id: int) -> None:
        """Delete an organization with everything in it."""
        self.delete(f"/api/orgs/{org_id}")
