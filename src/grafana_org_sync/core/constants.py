"""
Application-wide constants for Grafana organization sync.

This module defines default values and fixed names used throughout the application.
"""

# Grafana logins that are never modified or removed
RESERVED_LOGIN = "admin"

# Organization roles, ordered by priority
ROLE_ADMIN = "Admin"
ROLE_EDITOR = "Editor"
ROLE_VIEWER = "Viewer"

ADMIN_ROLES = (ROLE_ADMIN, ROLE_EDITOR, ROLE_VIEWER)
MEMBER_ROLES = (ROLE_EDITOR, ROLE_VIEWER)

# Keycloak group holding one subgroup per organization
ORGANIZATIONS_GROUP_PATH = "/organizations"
DISPLAY_NAME_ATTRIBUTE = "displayName"

# Separator between correlation key and display name in Grafana org names
ORG_NAME_SEPARATOR = " - "

# Header used by Grafana to scope a request to one organization
ORG_ID_HEADER = "X-Grafana-Org-Id"

# Built-in Grafana folder, it cannot be listed or created
GENERAL_FOLDER = "General"

# Dashboard fields carried over from an export that must not be sent back
DASHBOARD_EXPORT_FIELDS = ("id", "uid", "version", "time")

# Data sources
METRICS_DATASOURCE_NAME = "Mimir"
ALERTING_DATASOURCE_NAME = "Mimir Alertmanager"
TENANT_HEADER_NAME = "X-Scope-OrgID"

# Worker pool and paging
DEFAULT_WORKER_COUNT = 10
DEFAULT_PAGE_SIZE = 100
GRAFANA_USERS_PAGE_SIZE = 1000

# Poll loop
DEFAULT_SYNC_INTERVAL = 2  # seconds
DEFAULT_DASHBOARDS_DIR = "dashboards"
