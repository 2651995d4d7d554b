"""
Business logic services for Grafana organization sync.

Services derive the desired state and converge Grafana towards it.
"""

from .organizations import OrganizationSource
from .permissions import derive_permissions
from .user_sync import UserSync
from .datasources import DataSourceSync, build_desired_data_sources
from .dashboards import DashboardSync, load_dashboards, normalize_dashboard
from .org_sync import OrgSync
from .permission_sync import PermissionSync

__all__ = [
    "OrganizationSource",
    "derive_permissions",
    "UserSync",
    "DataSourceSync",
    "build_desired_data_sources",
    "DashboardSync",
    "load_dashboards",
    "normalize_dashboard",
    "OrgSync",
    "PermissionSync",
]
