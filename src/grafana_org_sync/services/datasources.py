"""
Data source sync for one organization.

Every organization gets a Mimir metrics data source (default) and, when an
alertmanager URL is configured, a Mimir alertmanager data source. Both pass
the organization ID as tenant header. The data sources of an organization are
owned by this sync: anything else is removed.

Grafana never returns secrets (basic auth password, tenant header value), so
changes to them are not detected.
"""

import logging
from dataclasses import replace
from typing import List, Optional, TYPE_CHECKING

from ..core.constants import (
    ALERTING_DATASOURCE_NAME,
    METRICS_DATASOURCE_NAME,
    TENANT_HEADER_NAME,
)
from ..models import DataSource, Organization

if TYPE_CHECKING:
    from ..api import GrafanaAPI
    from ..core.config import Config


def build_desired_data_sources(organization: Organization, config: "Config") -> List[DataSource]:
    """
    Compute the data sources an organization should have.

    Args:
        organization: Source organization
        config: Application configuration

    Returns:
        Desired data sources, metrics data source first
    """
    basic_auth = bool(config.datasource_username)

    def secure_data():
        data = {"httpHeaderValue1": organization.id}
        if basic_auth and config.datasource_password:
            data["basicAuthPassword"] = config.datasource_password
        return data

    desired = [
        DataSource(
            name=METRICS_DATASOURCE_NAME,
            type="prometheus",
            url=config.datasource_url,
            access="proxy",
            is_default=True,
            json_data={
                "httpHeaderName1": TENANT_HEADER_NAME,
                "httpMethod": "POST",
                "prometheusType": "Mimir",
            },
            secure_json_data=secure_data(),
            basic_auth=basic_auth,
            basic_auth_user=config.datasource_username or "",
        )
    ]

    if config.alertmanager_url:
        desired.append(
            DataSource(
                name=ALERTING_DATASOURCE_NAME,
                type="alertmanager",
                url=config.alertmanager_url,
                access="proxy",
                is_default=False,
                json_data={
                    "httpHeaderName1": TENANT_HEADER_NAME,
                    "implementation": "mimir",
                    "handleGrafanaManagedAlerts": False,
                },
                secure_json_data=secure_data(),
                basic_auth=basic_auth,
                basic_auth_user=config.datasource_username or "",
            )
        )

    return desired


class DataSourceSync:
    """Create, fix and remove data sources of one organization."""

    def __init__(
        self,
        client: "GrafanaAPI",
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize data source sync.

        Args:
            client: Grafana client scoped to the organization
            logger: Logger instance
        """
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    def sync(self, org_id: int, desired: List[DataSource]) -> List[DataSource]:
        """
        Bring the organization's data sources in line with the desired ones.

        Args:
            org_id: Grafana organization ID (for log lines)
            desired: Desired data sources

        Returns:
            The configured data sources, in the order of desired
        """
        existing = {}
        for data_source in self.client.get_data_sources():
            if any(data_source.name == d.name for d in desired) and data_source.name not in existing:
                existing[data_source.name] = data_source
            else:
                self.logger.info(
                    f"Organization {org_id} has invalid data source "
                    f"{data_source.id} {data_source.name}, removing"
                )
                self.client.delete_data_source(data_source.id)

        configured: List[DataSource] = []
        for wanted in desired:
            current = existing.get(wanted.name)
            if current is None:
                self.logger.info(
                    f"Organization {org_id} missing data source '{wanted.name}', creating"
                )
                data_source_id = self.client.create_data_source(wanted)
                configured.append(self.client.get_data_source(data_source_id))
            elif not current.matches(wanted):
                self.logger.info(
                    f"Organization {org_id} has misconfigured data source '{wanted.name}', fixing"
                )
                fixed = replace(wanted, id=current.id, uid=current.uid)
                self.client.update_data_source(fixed)
                configured.append(fixed)
            else:
                configured.append(current)

        return configured
