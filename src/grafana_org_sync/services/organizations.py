"""
Organization source adapter.

Turns the Keycloak group tree into a flat list of organizations, detects
admins and assigns members.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..core.constants import ORGANIZATIONS_GROUP_PATH
from ..models import IdentityGroup, IdentityUser, Organization, SourceSnapshot


class OrganizationSource:
    """Normalize Keycloak groups and memberships into organizations."""

    def __init__(
        self,
        admin_group_path: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize organization source.

        Args:
            admin_group_path: Full path of the group whose members administer every
                              organization (None disables admin detection)
            logger: Logger instance
        """
        self.admin_group_path = admin_group_path
        self.logger = logger or logging.getLogger(__name__)

    def extract_organizations(self, tree: IdentityGroup) -> List[Organization]:
        """
        Get all organizations from the group tree.

        Organizations are the groups with two-level path "/organizations/<ORG>".
        Their subgroups (teams) stay attached to the group but do not become
        organizations themselves.

        Args:
            tree: Root of the group tree

        Returns:
            List of organizations in Keycloak order
        """
        root = tree.find(ORGANIZATIONS_GROUP_PATH)
        if root is None:
            self.logger.warning(f"Group '{ORGANIZATIONS_GROUP_PATH}' not found, no organizations")
            return []

        return [
            Organization(
                id=group.name,
                name=group.display_name_attribute or group.name,
                group=group,
            )
            for group in root.sub_groups
        ]

    def find_admin_group(self, tree: IdentityGroup) -> Optional[IdentityGroup]:
        """Locate the admin group in the tree, if one is configured."""
        if not self.admin_group_path:
            self.logger.warning("No admin group configured, no admins")
            return None
        group = tree.find(self.admin_group_path)
        if group is None:
            self.logger.warning(f"Admin group '{self.admin_group_path}' not found")
        return group

    @staticmethod
    def is_admin(groups: List[IdentityGroup], admin_group: Optional[IdentityGroup]) -> bool:
        """Check whether one of the groups is the admin group."""
        if admin_group is None:
            return False
        return any(group.path == admin_group.path for group in groups)

    def split_admins(
        self,
        users: List[IdentityUser],
        memberships: Dict[IdentityUser, List[IdentityGroup]],
        admin_group: Optional[IdentityGroup] = None
    ) -> Tuple[List[IdentityUser], List[IdentityUser]]:
        """
        Separate admins from regular users, keeping the order of users.

        Args:
            users: Users in snapshot order
            memberships: Groups of each user
            admin_group: Group found by find_admin_group; None means no admins

        Returns:
            Tuple of (admins, non_admins)
        """
        admins: List[IdentityUser] = []
        others: List[IdentityUser] = []
        for user in users:
            if self.is_admin(memberships.get(user, []), admin_group):
                admins.append(user)
            else:
                others.append(user)
        return admins, others

    @staticmethod
    def assign_members(
        organizations: List[Organization],
        memberships: Dict[IdentityUser, List[IdentityGroup]]
    ) -> None:
        """Fill the member set of each organization from the memberships."""
        for organization in organizations:
            organization.members = {
                user.username
                for user, groups in memberships.items()
                if organization.group is not None
                and any(organization.group.is_same_organization(g) for g in groups)
            }

    def build_snapshot(
        self,
        users: List[IdentityUser],
        tree: IdentityGroup,
        memberships: Dict[IdentityUser, List[IdentityGroup]]
    ) -> SourceSnapshot:
        """
        Build the normalized view of the source for one pass.

        Args:
            users: Users whose memberships were fetched, in stable order
            tree: Root of the group tree
            memberships: Groups of each user

        Returns:
            Snapshot with organizations, memberships and admins
        """
        organizations = self.extract_organizations(tree)
        self.logger.info(f"Found {len(organizations)} organizations")

        admin_group = self.find_admin_group(tree)
        admins, _ = self.split_admins(users, memberships, admin_group)
        self.logger.info(f"Found {len(admins)} admin users")

        self.assign_members(organizations, memberships)

        return SourceSnapshot(
            users=list(users),
            memberships=memberships,
            organizations=organizations,
            admins=admins,
        )
