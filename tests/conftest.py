"""
Pytest configuration and shared fixtures for all tests.

Provides in-memory stand-ins for the Keycloak and Grafana clients. The
Grafana fake keeps one shared state for all org-scoped clients and records
every mutating call, so tests can assert on what a pass changed.
"""

import json
import sys
import threading
from dataclasses import replace
from itertools import count
from pathlib import Path

import pytest
import requests

# Add the project root to sys.path so we can import from src
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.grafana_org_sync.core.config import Config  # noqa: E402
from src.grafana_org_sync.models import (  # noqa: E402
    Dashboard,
    DashboardDocument,
    DashboardSearchHit,
    DataSource,
    Folder,
    GrafanaUser,
    IdentityGroup,
    IdentityUser,
    Org,
    OrgUser,
)


SERVICE_ACCOUNT = "sync-bot"


def not_found(what: str) -> requests.exceptions.HTTPError:
    return requests.exceptions.HTTPError(f"404 Client Error: {what} not found")


class GrafanaState:
    """Backend state shared by all fake Grafana clients."""

    def __init__(self):
        self.ids = count(1)
        self.orgs = {}
        self.users = {}
        self.org_users = {}
        self.data_sources = {}
        self.folders = {}
        self.dashboards = {}
        self.auto_assign_org_id = 1
        self.calls = []


class FakeGrafanaAPI:
    """In-memory Grafana client with the same surface as GrafanaAPI."""

    def __init__(self, state=None, username=SERVICE_ACCOUNT, org_id=None):
        self.state = state or GrafanaState()
        self.username = username
        self.org_id = org_id
        self.closed = False

    # Test helpers

    def seed_org(self, name):
        org = Org(id=next(self.state.ids), name=name)
        self.state.orgs[org.id] = org
        self.state.org_users[org.id] = {}
        return org

    def seed_user(self, login, email="", name="", is_admin=False):
        user = GrafanaUser(id=next(self.state.ids), login=login, email=email, name=name, is_admin=is_admin)
        self.state.users[user.id] = user
        return user

    def seed_org_user(self, org_id, login, role):
        user = next(u for u in self.state.users.values() if u.login == login)
        self.state.org_users.setdefault(org_id, {})[user.id] = OrgUser(user.id, login, role, user.email)

    def seed_dashboard(self, org_id, title, folder_title=None):
        self.state.dashboards.setdefault(org_id, []).append(
            DashboardSearchHit(uid=f"dash-{next(self.state.ids)}", title=title, folder_title=folder_title)
        )

    @property
    def mutations(self):
        return list(self.state.calls)

    def members(self, org_id):
        return {user.login: user.role for user in self.state.org_users.get(org_id, {}).values()}

    def org_by_name(self, name):
        return next((org for org in self.state.orgs.values() if org.name == name), None)

    def _record(self, *call):
        self.state.calls.append(call)

    # Client lifecycle

    def for_organization(self, org_id):
        return FakeGrafanaAPI(self.state, self.username, org_id)

    def close_idle_connections(self):
        pass

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # Organizations

    def get_orgs(self):
        return [Org(org.id, org.name) for org in self.state.orgs.values()]

    def get_org(self, org_id):
        org = self.state.orgs.get(org_id)
        if org is None:
            raise not_found(f"org {org_id}")
        return Org(org.id, org.name)

    def create_org(self, name):
        self._record("create_org", name)
        org = Org(id=next(self.state.ids), name=name)
        self.state.orgs[org.id] = org
        self.state.org_users[org.id] = {}
        return Org(org.id, org.name)

    def update_org_name(self, org_id, name):
        self._record("update_org_name", org_id, name)
        self.state.orgs[org_id].name = name

    def delete_org(self, org_id):
        self._record("delete_org", org_id)
        del self.state.orgs[org_id]
        self.state.org_users.pop(org_id, None)

    # Users

    def get_users(self):
        return [GrafanaUser(u.id, u.login, u.email, u.name, u.is_admin) for u in self.state.users.values()]

    def update_user(self, user_id, login, email, name):
        self._record("update_user", user_id, login)
        user = self.state.users[user_id]
        user.login, user.email, user.name = login, email, name

    def set_user_admin(self, user_id, is_admin):
        self._record("set_user_admin", user_id, is_admin)
        self.state.users[user_id].is_admin = is_admin

    def delete_user(self, user_id):
        self._record("delete_user", user_id)
        del self.state.users[user_id]
        for members in self.state.org_users.values():
            members.pop(user_id, None)

    def get_org_users(self, org_id):
        return [OrgUser(u.user_id, u.login, u.role, u.email) for u in self.state.org_users.get(org_id, {}).values()]

    def add_org_user(self, org_id, login, role):
        self._record("add_org_user", org_id, login, role)
        user = next((u for u in self.state.users.values() if u.login == login), None)
        if user is None:
            raise not_found(f"user {login}")
        self.state.org_users.setdefault(org_id, {})[user.id] = OrgUser(user.id, login, role, user.email)

    def update_org_user(self, org_id, user_id, role):
        self._record("update_org_user", org_id, user_id, role)
        self.state.org_users[org_id][user_id].role = role

    def remove_org_user(self, org_id, user_id):
        self._record("remove_org_user", org_id, user_id)
        del self.state.org_users[org_id][user_id]

    # Org-scoped resources

    def _scoped(self, table):
        assert self.org_id is not None, "org-scoped call on an unscoped client"
        return table.setdefault(self.org_id, {} if table is self.state.data_sources else [])

    def get_data_sources(self):
        # Like the real listing, entries carry no basic auth user and no secrets
        return [
            replace(ds, basic_auth_user="", secure_json_data={})
            for ds in self._scoped(self.state.data_sources).values()
        ]

    def get_data_source(self, data_source_id):
        return DataSource(**vars(self._scoped(self.state.data_sources)[data_source_id]))

    def create_data_source(self, data_source):
        self._record("create_data_source", self.org_id, data_source.name)
        data_source_id = next(self.state.ids)
        stored = DataSource(**vars(data_source))
        stored.id, stored.uid = data_source_id, f"ds-{data_source_id}"
        self._scoped(self.state.data_sources)[data_source_id] = stored
        return data_source_id

    def update_data_source(self, data_source):
        self._record("update_data_source", self.org_id, data_source.name)
        self._scoped(self.state.data_sources)[data_source.id] = DataSource(**vars(data_source))

    def delete_data_source(self, data_source_id):
        self._record("delete_data_source", self.org_id, data_source_id)
        del self._scoped(self.state.data_sources)[data_source_id]

    def get_folders(self):
        return list(self._scoped(self.state.folders))

    def create_folder(self, title):
        self._record("create_folder", self.org_id, title)
        folder_id = next(self.state.ids)
        folder = Folder(id=folder_id, uid=f"folder-{folder_id}", title=title)
        self._scoped(self.state.folders).append(folder)
        return folder

    def search_dashboards(self):
        return list(self._scoped(self.state.dashboards))

    def create_dashboard(self, dashboard, folder_uid=None, overwrite=True):
        self._record("create_dashboard", self.org_id, dashboard["title"], folder_uid)
        folder_title = next(
            (f.title for f in self._scoped(self.state.folders) if f.uid == folder_uid), None
        )
        self._scoped(self.state.dashboards).append(
            DashboardSearchHit(uid=f"dash-{next(self.state.ids)}", title=dashboard["title"],
                               folder_uid=folder_uid, folder_title=folder_title)
        )
        self.last_dashboard = dashboard
        return {"status": "success"}

    # Settings

    def get_auto_assign_org_id(self):
        return self.state.auto_assign_org_id


class FakeKeycloakAPI:
    """In-memory Keycloak client with the same surface as KeycloakAPI."""

    def __init__(self):
        self.users = []
        self.root = IdentityGroup(id="", name="", path="/")
        self.user_groups = {}
        self.logins = 0
        self.membership_lookups = []

    def add_group(self, path, display_name=None):
        """Add a group (and any missing parents) by full path."""
        parent = self.root
        elements = path.strip("/").split("/")
        for depth, name in enumerate(elements, start=1):
            current_path = "/" + "/".join(elements[:depth])
            group = parent.find(current_path)
            if group is None:
                group = IdentityGroup(id=f"g-{current_path}", name=name, path=current_path)
                parent.sub_groups.append(group)
            parent = group
        if display_name:
            parent.attributes = {"displayName": [display_name]}
        return parent

    def add_user(self, username, groups=(), email=None, first_name="", last_name=""):
        user = IdentityUser(
            id=f"u-{username}",
            username=username,
            email=email if email is not None else f"{username}@example.com",
            first_name=first_name,
            last_name=last_name,
        )
        self.users.append(user)
        self.user_groups[user.id] = [self.add_group(path) for path in groups]
        return user

    def login(self):
        self.logins += 1
        return "token"

    def fetch_users(self):
        return list(self.users)

    def fetch_group_tree(self):
        return self.root

    def fetch_memberships(self, users):
        self.membership_lookups.append([user.username for user in users])
        return {user: list(self.user_groups.get(user.id, [])) for user in users}

    def close_idle_connections(self):
        pass


CONFIG_ENV_VARS = [name for name, _ in Config.ENV_OVERRIDES] + [
    "CONFIG_FILE",
    "GRAFANA_CLEAR_AUTO_ASSIGN_ORG",
    "SYNC_INTERVAL_SECONDS",
    "LOG_FILE",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration environment variables."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def config_data():
    """Minimal complete configuration."""
    return {
        "grafana": {
            "url": "http://grafana:3000",
            "username": SERVICE_ACCOUNT,
            "password": "grafana-secret",
        },
        "datasource": {
            "url": "http://mimir/prometheus",
            "alertmanager_url": "http://mimir/alertmanager",
        },
        "keycloak": {
            "url": "http://keycloak:8080",
            "realm": "main",
            "username": "reader",
            "password": "keycloak-secret",
            "client_id": "admin-cli",
            "admin_group_path": "/admins",
        },
    }


@pytest.fixture
def write_config(tmp_path, clean_env):
    """Write a configuration file and load it."""
    def _write(data):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data))
        return Config(str(path))
    return _write


@pytest.fixture
def config(write_config, config_data):
    """Loaded configuration."""
    return write_config(config_data)


@pytest.fixture
def grafana():
    """Fake Grafana with the reserved users present."""
    api = FakeGrafanaAPI()
    api.seed_user("admin")
    api.seed_user(SERVICE_ACCOUNT)
    main_org = api.seed_org("Main Org.")
    api.state.auto_assign_org_id = main_org.id
    return api


@pytest.fixture
def keycloak():
    """Fake Keycloak with the organizations root and admin group."""
    api = FakeKeycloakAPI()
    api.add_group("/organizations")
    api.add_group("/admins")
    return api


@pytest.fixture
def overview_dashboard():
    """Dashboard with panels and template variables bound to some export."""
    return {
        "id": 42,
        "uid": "abc",
        "version": 7,
        "time": {"from": "now-6h", "to": "now"},
        "title": "Overview",
        "panels": [
            {"title": "CPU", "datasource": {"type": "prometheus", "uid": "old"}},
            {"title": "Memory"},
        ],
        "templating": {
            "list": [
                {"name": "namespace", "datasource": "old", "current": {"value": "x"}},
            ]
        },
    }


@pytest.fixture
def dashboards(overview_dashboard):
    """Dashboards every organization should get."""
    return [Dashboard(folder="General v1", document=DashboardDocument(overview_dashboard))]


@pytest.fixture
def stop_event():
    return threading.Event()


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test requiring backend access"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test (no external dependencies)"
    )
