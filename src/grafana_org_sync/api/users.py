"""
User operations for the Grafana HTTP API.

Covers the global user list and per-organization memberships.
"""

import logging
from typing import List, Dict, Any, Optional

from ..core.constants import GRAFANA_USERS_PAGE_SIZE
from ..models import GrafanaUser, OrgUser


class UsersAPI:
    """Mixin for user-related API operations."""

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

    def patch(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Method provided by APIClient base class."""
        ...

    def delete(self, endpoint: str) -> Any:
        """Method provided by APIClient base class."""
        ...

    def get_users(self) -> List[GrafanaUser]:
        """
        Get all users of the Grafana instance.

        Pages through the listing until a short page is returned.

        Returns:
            List of users
        """
        self.logger.debug("Fetching Grafana users")
        users: List[GrafanaUser] = []
        page = 1
        while True:
            result = self.get(
                "/api/users",
                params={"perpage": GRAFANA_USERS_PAGE_SIZE, "page": page},
            )
            batch = result if isinstance(result, list) else []
            users.extend(GrafanaUser.from_dict(user) for user in batch)
            if len(batch) < GRAFANA_USERS_PAGE_SIZE:
                return users
            page += 1

    def update_user(self, user_id: int, login: str, email: str, name: str) -> None:
        """Update the profile of a user."""
        self.put(f"/api/users/{user_id}", {"login": login, "email": email, "name": name})

    def set_user_admin(self, user_id: int, is_admin: bool) -> None:
        """Grant or revoke Grafana server admin permission."""
        self.put(f"/api/admin/users/{user_id}/permissions", {"isGrafanaAdmin": is_admin})

    def delete_user(self, user_id: int) -> None:
        """Delete a user from the Grafana instance."""
        self.delete(f"/api/admin/users/{user_id}")

    def get_org_users(self, org_id: int) -> List[OrgUser]:
        """
        Get all members of an organization.

        Args:
            org_id: Organization ID

        Returns:
            List of memberships with their roles
        """
        result = self.get(f"/api/orgs/{org_id}/users")
        if isinstance(result, list):
            return [OrgUser.from_dict(user) for user in result]
        return []

    def add_org_user(self, org_id: int, login: str, role: str) -> None:
        """Add an existing user to an organization."""
        self.post(f"/api/orgs/{org_id}/users", {"loginOrEmail": login, "role": role})

    def update_org_user(self, org_id: int, user_id: int, role: str) -> None:
        """Change the role of a member."""
        self.patch(f"/api/orgs/{org_id}/users/{user_id}", {"role": role})

    def remove_org_user(self, org_id: int, user_id: int) -> None:
        """Remove a member from an organization."""
        self.delete(f"/api/orgs/{org_id}/users/{user_id}")
