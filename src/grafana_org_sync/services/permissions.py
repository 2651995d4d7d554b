"""
Permission deriver.

Converts group memberships found in Keycloak into the roles users should
hold on organizations in Grafana.
"""

from typing import Dict, List

from ..core.constants import ADMIN_ROLES, MEMBER_ROLES
from ..models import PermissionSpec, SourceSnapshot


def derive_permissions(snapshot: SourceSnapshot) -> Dict[str, List[PermissionSpec]]:
    """
    Compute the desired permissions per organization.

    Regular users get Editor (or Viewer) on every organization whose member
    set holds them, so a user in several teams of one organization still
    gets a single entry. Admins get Admin (or Editor, or Viewer) on every
    organization regardless of their memberships.

    Users are visited in snapshot order, so the result is the same for the
    same snapshot.

    Args:
        snapshot: Normalized source state of this pass

    Returns:
        Dictionary mapping organization ID to its permission specs
    """
    admin_logins = {admin.username for admin in snapshot.admins}
    permissions: Dict[str, List[PermissionSpec]] = {}

    for organization in snapshot.organizations:
        specs: List[PermissionSpec] = []

        for user in snapshot.users:
            if user.username in organization.members and user.username not in admin_logins:
                specs.append(PermissionSpec(user.username, MEMBER_ROLES))

        for admin in snapshot.admins:
            specs.append(PermissionSpec(admin.username, ADMIN_ROLES))

        permissions[organization.id] = specs

    return permissions
