"""
Reconcile driver.

Runs one full pass: fetch from Keycloak, normalize, sync users, derive
permissions, sync orgs with their settings, sync permissions.
"""

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

from .core import LoggerContext
from .models import Dashboard
from .services import (
    OrganizationSource,
    OrgSync,
    PermissionSync,
    UserSync,
    derive_permissions,
)

if TYPE_CHECKING:
    from .api import GrafanaAPI, KeycloakAPI
    from .core.config import Config


@dataclass
class ReconcileResult:
    """Counts reported by one pass."""

    users: int = 0
    synced_users: int = 0
    memberships: int = 0
    organizations: int = 0
    admins: int = 0
    permissions: int = 0


class Reconciler:
    """Drive one reconciliation pass."""

    def __init__(
        self,
        config: "Config",
        keycloak: "KeycloakAPI",
        grafana: "GrafanaAPI",
        dashboards: List[Dashboard],
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize reconciler.

        Args:
            config: Application configuration
            keycloak: Keycloak client
            grafana: Grafana client (unscoped)
            dashboards: Dashboards every organization should have
            logger: Logger instance
        """
        self.config = config
        self.keycloak = keycloak
        self.grafana = grafana
        self.logger = logger or logging.getLogger(__name__)

        self.source = OrganizationSource(config.admin_group_path, self.logger)
        self.user_sync = UserSync(grafana, self.logger)
        self.org_sync = OrgSync(grafana, config, dashboards, self.logger)
        self.permission_sync = PermissionSync(grafana, self.logger)

    def reconcile(self, stop_event: Optional[threading.Event] = None) -> ReconcileResult:
        """
        Run one pass.

        Nothing is applied partially on fetch errors: a failing fetch aborts
        the pass before any Grafana change depending on it.

        Args:
            stop_event: Cancellation signal, checked between units of work

        Returns:
            Counts of this pass

        Raises:
            ReconcileInterrupted: If cancellation was requested
            SyncError: On aggregate fetch errors and internal inconsistencies
            requests.exceptions.RequestException: On backend failures
        """
        result = ReconcileResult()
        try:
            self.keycloak.login()

            users = self.keycloak.fetch_users()
            result.users = len(users)
            self.logger.info(f"Found {len(users)} users")

            tree = self.keycloak.fetch_group_tree()

            with LoggerContext(self.logger, "user sync"):
                synced_users = self.user_sync.sync(users, stop_event)
            result.synced_users = len(synced_users)
            self.logger.info(f"Synced {len(synced_users)} users")

            memberships = self.keycloak.fetch_memberships(synced_users)
            snapshot = self.source.build_snapshot(synced_users, tree, memberships)
            result.memberships = snapshot.membership_count
            result.organizations = len(snapshot.organizations)
            result.admins = len(snapshot.admins)
            self.logger.info(f"Found {snapshot.membership_count} group memberships")

            permissions = derive_permissions(snapshot)
            result.permissions = sum(len(specs) for specs in permissions.values())

            with LoggerContext(self.logger, "organization sync"):
                orgs = self.org_sync.sync(snapshot.organizations, stop_event)

            with LoggerContext(self.logger, "permission sync"):
                self.permission_sync.sync(permissions, orgs, stop_event)

            if self.config.clear_auto_assign_org:
                auto_assign_org_id = self.grafana.get_auto_assign_org_id()
                self.logger.info(f"Removing members of auto_assign_org {auto_assign_org_id}")
                self.permission_sync.purge_organization(auto_assign_org_id, stop_event)

            return result

        finally:
            self.grafana.close_idle_connections()
            self.keycloak.close_idle_connections()
