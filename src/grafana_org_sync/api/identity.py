"""
User and group operations for the Keycloak admin API.

Large result sets are fetched through the bounded worker pool.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.constants import DEFAULT_PAGE_SIZE, DEFAULT_WORKER_COUNT
from ..core.parallel import parallel_map
from ..models import IdentityGroup, IdentityUser


class IdentityAPI:
    """Mixin for user, group and membership operations."""

    # Type hints for attributes provided by the client classes
    logger: logging.Logger
    realm: str
    worker_count: int = DEFAULT_WORKER_COUNT
    page_size: int = DEFAULT_PAGE_SIZE

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Method provided by APIClient base class."""
        ...

    @property
    def _admin_endpoint(self) -> str:
        return f"/admin/realms/{self.realm}"

    def count_users(self) -> int:
        """Get the number of users in the realm."""
        return int(self.get(f"{self._admin_endpoint}/users/count"))

    def get_users_page(self, first: int) -> List[IdentityUser]:
        """
        Get one page of users.

        Args:
            first: Offset of the first user of the page

        Returns:
            Users of the page
        """
        result = self.get(
            f"{self._admin_endpoint}/users",
            params={"first": first, "max": self.page_size, "briefRepresentation": "true"},
        )
        return [IdentityUser.from_dict(user) for user in result or []]

    def fetch_users(self) -> List[IdentityUser]:
        """
        Get all users of the realm.

        One request per page, spread over the worker pool. Pages are joined in
        offset order so the result is stable between passes.

        Returns:
            List of users

        Raises:
            ParallelFetchError: If any page could not be fetched
        """
        self.logger.info("Fetching users from Keycloak...")
        total = self.count_users()
        offsets = list(range(0, total, self.page_size))

        pages = parallel_map(
            offsets,
            self.get_users_page,
            worker_count=self.worker_count,
            operation="fetch users page",
            logger=self.logger,
        )

        users: List[IdentityUser] = []
        seen = set()
        for offset in offsets:
            for user in pages[offset]:
                # Users created while paging can shift entries into the next page
                if user.id not in seen:
                    seen.add(user.id)
                    users.append(user)
        return users

    def fetch_group_tree(self) -> IdentityGroup:
        """
        Get the whole group hierarchy of the realm.

        Returns:
            Synthetic root group (path '/') holding the top level groups
        """
        self.logger.info("Fetching groups from Keycloak...")
        result = self.get(
            f"{self._admin_endpoint}/groups",
            params={"max": 100000, "briefRepresentation": "false"},
        )
        top_level = [IdentityGroup.from_dict(group) for group in result or []]
        return IdentityGroup(id="", name="", path="/", sub_groups=top_level)

    def get_user_groups(self, user: IdentityUser) -> List[IdentityGroup]:
        """Get the groups a user is a direct member of."""
        result = self.get(f"{self._admin_endpoint}/users/{user.id}/groups")
        return [IdentityGroup.from_dict(group) for group in result or []]

    def fetch_memberships(self, users: List[IdentityUser]) -> Dict[IdentityUser, List[IdentityGroup]]:
        """
        Get group memberships for the given users.

        Args:
            users: Users to look up

        Returns:
            Dictionary mapping each user to its groups

        Raises:
            ParallelFetchError: If any lookup failed
        """
        self.logger.info("Fetching group memberships from Keycloak...")
        return parallel_map(
            users,
            self.get_user_groups,
            worker_count=self.worker_count,
            operation="fetch group memberships",
            logger=self.logger,
        )
