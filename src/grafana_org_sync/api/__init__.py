"""
API layer for Keycloak and Grafana.

Provides the identity client (users, groups, memberships) and the dashboard
service client (orgs, users, data sources, folders, dashboards, settings).
"""

import logging
from typing import Optional

from .client import APIClient
from .auth import KeycloakAuthAPI
from .identity import IdentityAPI
from .organizations import OrganizationsAPI
from .users import UsersAPI
from .datasources import DataSourcesAPI
from .dashboards import DashboardsAPI
from .settings import SettingsAPI
from . import helpers
from ..core.constants import DEFAULT_PAGE_SIZE, DEFAULT_WORKER_COUNT, ORG_ID_HEADER


class KeycloakAPI(KeycloakAuthAPI, IdentityAPI):
    """
    Unified API client for Keycloak.

    Combines authentication with user, group and membership operations.
    """

    def __init__(
        self,
        base_url: str,
        realm: str,
        username: str,
        password: str,
        client_id: str,
        timeout: int = 30,
        max_retries: int = 3,
        verify_ssl: bool = True,
        worker_count: int = DEFAULT_WORKER_COUNT,
        page_size: int = DEFAULT_PAGE_SIZE,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize unified Keycloak client.

        Args:
            base_url: Base URL of Keycloak
            realm: Realm holding users and groups
            username: Username for the password grant
            password: Password for the password grant
            client_id: OpenID Connect client ID
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            verify_ssl: Whether to verify SSL certificates
            worker_count: Number of concurrent requests for bulk fetches
            page_size: Number of users per page
            logger: Logger instance
        """
        super().__init__(
            base_url=base_url,
            realm=realm,
            username=username,
            password=password,
            client_id=client_id,
            timeout=timeout,
            max_retries=max_retries,
            verify_ssl=verify_ssl,
            logger=logger
        )
        self.worker_count = worker_count
        self.page_size = page_size


class GrafanaAPI(APIClient, OrganizationsAPI, UsersAPI, DataSourcesAPI, DashboardsAPI, SettingsAPI):
    """
    Unified API client for Grafana.

    Org-scoped operations (data sources, folders, dashboards) act on the
    organization selected by the X-Grafana-Org-Id header, which is fixed for
    the lifetime of a session. Use for_organization() to get a client for a
    specific organization.
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: int = 30,
        max_retries: int = 3,
        verify_ssl: bool = True,
        org_id: Optional[int] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize unified Grafana client.

        Args:
            base_url: Base URL of Grafana
            username: Login of the service account (basic auth)
            password: Password of the service account
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            verify_ssl: Whether to verify SSL certificates
            org_id: Organization the client is scoped to (None for the user's current org)
            logger: Logger instance
        """
        headers = {ORG_ID_HEADER: str(org_id)} if org_id is not None else None
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
            verify_ssl=verify_ssl,
            auth=(username, password),
            headers=headers,
            logger=logger
        )
        self.username = username
        self._password = password
        self.org_id = org_id

    def for_organization(self, org_id: int) -> "GrafanaAPI":
        """
        Create a client scoped to one organization.

        The returned client has its own session and should be closed by the
        caller (it is a context manager).

        Args:
            org_id: Grafana organization ID

        Returns:
            New client sending X-Grafana-Org-Id with every request
        """
        return GrafanaAPI(
            base_url=self.base_url,
            username=self.username,
            password=self._password,
            timeout=self.timeout,
            max_retries=self.max_retries,
            verify_ssl=self.verify_ssl,
            org_id=org_id,
            logger=self.logger
        )


__all__ = [
    "APIClient",
    "KeycloakAuthAPI",
    "IdentityAPI",
    "OrganizationsAPI",
    "UsersAPI",
    "DataSourcesAPI",
    "DashboardsAPI",
    "SettingsAPI",
    "KeycloakAPI",
    "GrafanaAPI",
    "helpers",
]
