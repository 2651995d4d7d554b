"""
Data models for Grafana organization sync.

Contains DTOs for Keycloak users and groups, normalized organizations,
permissions, Grafana resources and dashboards.
"""

from .identity import IdentityUser, IdentityGroup
from .organization import Organization, SourceSnapshot
from .permission import PermissionSpec
from .grafana import Org, GrafanaUser, OrgUser, DataSource, Folder, DashboardSearchHit
from .dashboard import Dashboard, DashboardDocument

__all__ = [
    "IdentityUser",
    "IdentityGroup",
    "Organization",
    "SourceSnapshot",
    "PermissionSpec",
    "Org",
    "GrafanaUser",
    "OrgUser",
    "DataSource",
    "Folder",
    "DashboardSearchHit",
    "Dashboard",
    "DashboardDocument",
]
