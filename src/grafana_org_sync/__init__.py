"""
Grafana Organization Sync

This package keeps Grafana organizations, users, roles, data sources and
dashboards in line with the organization groups defined in Keycloak.
"""

__version__ = "0.1.0"
__author__ = "APPUiO"
__description__ = "Reconcile Grafana organizations against Keycloak groups"


def __getattr__(name):
    """Lazy import to avoid importing dependencies when not needed."""
    if name == "GrafanaOrgSyncApp":
        from .main import GrafanaOrgSyncApp
        return GrafanaOrgSyncApp
    if name == "Reconciler":
        from .reconciler import Reconciler
        return Reconciler
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "GrafanaOrgSyncApp",
    "Reconciler",
]
