"""
Organization sync service.

Creates, renames and deletes Grafana orgs to match the Keycloak
organizations, then brings each org's data sources and dashboards in line.
"""

import logging
import threading
from typing import Dict, List, Optional, TYPE_CHECKING

from .dashboards import DashboardSync
from .datasources import DataSourceSync, build_desired_data_sources
from ..api.helpers import parse_correlation_key
from ..core.errors import DashboardValidationError, check_interrupted
from ..models import Dashboard, Org, Organization

if TYPE_CHECKING:
    from ..api import GrafanaAPI
    from ..core.config import Config


class OrgSync:
    """Converge Grafana orgs and their settings."""

    def __init__(
        self,
        grafana: "GrafanaAPI",
        config: "Config",
        dashboards: List[Dashboard],
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize org sync.

        Args:
            grafana: Grafana client (unscoped)
            config: Application configuration (data source settings)
            dashboards: Dashboards every organization should have
            logger: Logger instance
        """
        self.grafana = grafana
        self.config = config
        self.dashboards = dashboards
        self.logger = logger or logging.getLogger(__name__)

    def build_lookup(self) -> Dict[str, Org]:
        """
        Index the Grafana orgs by correlation key.

        Orgs whose name does not carry a key (e.g. "Main Org.") are left out
        and therefore never touched.
        """
        lookup: Dict[str, Org] = {}
        for org in self.grafana.get_orgs():
            key = parse_correlation_key(org.name)
            if key is not None:
                lookup[key] = org
        return lookup

    def sync_basic(self, organization: Organization, lookup: Dict[str, Org]) -> Org:
        """
        Make sure the Grafana org exists and carries the right name.

        Args:
            organization: Source organization
            lookup: Grafana orgs by correlation key

        Returns:
            The Grafana org
        """
        desired_name = organization.grafana_name
        org = lookup.get(organization.id)

        if org is None:
            self.logger.info(f"Organization missing, creating: '{desired_name}'")
            return self.grafana.create_org(desired_name)

        if org.name != desired_name:
            self.logger.info(
                f"Organization {org.id} has wrong name '{org.name}', renaming to '{desired_name}'"
            )
            self.grafana.update_org_name(org.id, desired_name)
            org.name = desired_name

        return org

    def sync_settings(self, organization: Organization, org: Org) -> None:
        """
        Bring data sources, folders and dashboards of one org in line.

        A malformed dashboard only stops the dashboard step of this org.
        Remote failures propagate.
        """
        with self.grafana.for_organization(org.id) as client:
            desired = build_desired_data_sources(organization, self.config)
            data_sources = DataSourceSync(client, self.logger).sync(org.id, desired)

            try:
                DashboardSync(client, self.logger).sync(org.id, self.dashboards, data_sources[0])
            except DashboardValidationError as e:
                self.logger.error(f"Organization {org.id}: skipping dashboards, {e}")

        self.logger.debug(f"Organization {org.id} OK")

    def sync(
        self,
        organizations: List[Organization],
        stop_event: Optional[threading.Event] = None
    ) -> Dict[str, Org]:
        """
        Sync all organizations.

        Orgs that should not exist are deleted only after all desired orgs
        have been processed.

        Args:
            organizations: Organizations from Keycloak
            stop_event: Cancellation signal

        Returns:
            Dictionary mapping organization ID to its Grafana org

        Raises:
            ReconcileInterrupted: If cancellation was requested
        """
        lookup = self.build_lookup()
        synced: Dict[str, Org] = {}

        for organization in organizations:
            org = self.sync_basic(organization, lookup)
            lookup.pop(organization.id, None)

            self.sync_settings(organization, org)
            synced[organization.id] = org

            check_interrupted(stop_event)

        for org in lookup.values():
            self.logger.info(f"Organization {org.id} should not exist, deleting: '{org.name}'")
            self.grafana.delete_org(org.id)
            check_interrupted(stop_event)

        return synced
