"""
Permission sync service.

Makes the members of each Grafana org and their roles match the derived
permissions. Users that vanished or changed while we work cause warnings,
not failures; the next pass fixes them.
"""

import logging
import threading
from typing import Dict, List, Optional, TYPE_CHECKING

import requests  # type: ignore

from ..core.constants import RESERVED_LOGIN
from ..core.errors import SyncError, check_interrupted
from ..models import Org, OrgUser, PermissionSpec

if TYPE_CHECKING:
    from ..api import GrafanaAPI


class PermissionSync:
    """Add, fix and remove org members."""

    def __init__(
        self,
        grafana: "GrafanaAPI",
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize permission sync.

        Args:
            grafana: Grafana client (unscoped)
            logger: Logger instance
        """
        self.grafana = grafana
        self.logger = logger or logging.getLogger(__name__)

    def sync(
        self,
        permissions: Dict[str, List[PermissionSpec]],
        orgs: Dict[str, Org],
        stop_event: Optional[threading.Event] = None
    ) -> None:
        """
        Sync the permissions of all organizations.

        Args:
            permissions: Desired permissions by organization ID
            orgs: Grafana orgs by organization ID
            stop_event: Cancellation signal

        Raises:
            SyncError: If an organization has no Grafana org
            ReconcileInterrupted: If cancellation was requested
        """
        for org_key, specs in permissions.items():
            org = orgs.get(org_key)
            if org is None:
                raise SyncError(f"Internal error: organization '{org_key}' not present in Grafana")
            self.sync_org(org, specs, stop_event)

    def sync_org(
        self,
        org: Org,
        specs: List[PermissionSpec],
        stop_event: Optional[threading.Event] = None
    ) -> None:
        """
        Sync the members of one organization.

        Args:
            org: Grafana org
            specs: Desired permissions of the org
            stop_event: Cancellation signal
        """
        current: Dict[str, OrgUser] = {user.login: user for user in self.grafana.get_org_users(org.id)}

        for spec in specs:
            org_user = current.pop(spec.login, None)

            if org_user is None:
                self.logger.info(
                    f"User '{spec.login}' should have access to org '{org.name}' ({org.id}), adding"
                )
                try:
                    self.grafana.add_org_user(org.id, spec.login, spec.preferred_role)
                except requests.exceptions.RequestException as e:
                    self.logger.warning(f"Could not add user '{spec.login}' to org {org.id}: {e}")
            elif not spec.permits(org_user.role):
                self.logger.info(
                    f"User '{spec.login}' has invalid role {org_user.role} on org "
                    f"'{org.name}' ({org.id}), fixing"
                )
                try:
                    self.grafana.update_org_user(org.id, org_user.user_id, spec.preferred_role)
                except requests.exceptions.RequestException as e:
                    self.logger.warning(f"Could not update role of '{spec.login}' on org {org.id}: {e}")

            check_interrupted(stop_event)

        reserved = {RESERVED_LOGIN, self.grafana.username}
        for org_user in current.values():
            if org_user.login in reserved:
                continue
            self.logger.info(
                f"User '{org_user.login}' ({org_user.user_id}) must not have access to org "
                f"'{org.name}' ({org.id}), removing"
            )
            try:
                self.grafana.remove_org_user(org.id, org_user.user_id)
            except requests.exceptions.RequestException as e:
                self.logger.warning(f"Could not remove '{org_user.login}' from org {org.id}: {e}")

            check_interrupted(stop_event)

    def purge_organization(self, org_id: int, stop_event: Optional[threading.Event] = None) -> None:
        """
        Remove every member except the reserved logins from an organization.

        Used for the auto-assign org, where Grafana puts new users with
        permissions we cannot control.

        Args:
            org_id: Grafana organization ID
            stop_event: Cancellation signal
        """
        org = self.grafana.get_org(org_id)
        self.sync_org(org, [], stop_event)
