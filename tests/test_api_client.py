"""
HTTP client tests.

Tests the Keycloak and Grafana clients with a mocked session, checking the
requests they send and how they decode responses.
"""

import json
import threading
import unittest
from unittest.mock import Mock, patch

import requests

from src.grafana_org_sync.api import GrafanaAPI, KeycloakAPI
from src.grafana_org_sync.core.errors import AuthenticationError, ParallelFetchError, SyncError
from src.grafana_org_sync.models import DataSource, IdentityUser


def make_response(payload=None, status=200):
    """Build a fake requests.Response."""
    response = Mock()
    response.status_code = status
    response.content = b"" if payload is None else json.dumps(payload).encode()
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} Error")
    else:
        response.raise_for_status.return_value = None
    return response


class TestKeycloakAPI(unittest.TestCase):
    """Test Keycloak client."""

    def setUp(self):
        """Set up test fixtures."""
        self.api = KeycloakAPI(
            base_url="http://keycloak/",
            realm="main",
            username="reader",
            password="secret",
            client_id="admin-cli",
            worker_count=4,
            page_size=2,
        )
        self.request = patch.object(self.api.session, "request").start()
        self.addCleanup(patch.stopall)

    def test_login_sets_bearer_token(self):
        """Test password grant and token header."""
        self.request.return_value = make_response({"access_token": "tok"})

        self.assertEqual(self.api.login(), "tok")

        kwargs = self.request.call_args.kwargs
        self.assertEqual(kwargs["url"], "http://keycloak/realms/main/protocol/openid-connect/token")
        self.assertEqual(kwargs["data"]["grant_type"], "password")
        self.assertEqual(kwargs["data"]["client_id"], "admin-cli")
        self.assertEqual(kwargs["headers"]["Content-Type"], "application/x-www-form-urlencoded")
        self.assertEqual(self.api.session.headers["Authorization"], "Bearer tok")
        self.assertTrue(self.api.is_authenticated)

    def test_login_without_token(self):
        """Test missing access token."""
        self.request.return_value = make_response({"error": "nope"})

        with self.assertRaises(AuthenticationError):
            self.api.login()
        self.assertFalse(self.api.is_authenticated)

    def test_login_http_error(self):
        """Test rejected credentials."""
        self.request.return_value = make_response({"error": "invalid_grant"}, status=401)

        with self.assertRaises(requests.exceptions.HTTPError):
            self.api.login()

    def test_fetch_users_pages(self):
        """Test paging offsets and ordering of the joined result."""
        all_users = [{"id": str(i), "username": f"user{i}"} for i in range(5)]
        offsets = []
        lock = threading.Lock()

        def respond(method, url, timeout, **kwargs):
            if url.endswith("/users/count"):
                return make_response(5)
            first = kwargs["params"]["first"]
            with lock:
                offsets.append(first)
            return make_response(all_users[first:first + kwargs["params"]["max"]])

        self.request.side_effect = respond

        users = self.api.fetch_users()

        self.assertEqual(sorted(offsets), [0, 2, 4])
        self.assertEqual([u.username for u in users], [f"user{i}" for i in range(5)])

    def test_fetch_users_page_failure(self):
        """Test that a failing page fails the whole fetch."""
        def respond(method, url, timeout, **kwargs):
            if url.endswith("/users/count"):
                return make_response(6)
            if kwargs["params"]["first"] == 2:
                return make_response({"error": "boom"}, status=500)
            return make_response([])

        self.request.side_effect = respond

        with self.assertRaises(ParallelFetchError):
            self.api.fetch_users()

    def test_fetch_group_tree(self):
        """Test group tree parsing under a synthetic root."""
        self.request.return_value = make_response([
            {
                "id": "1",
                "name": "organizations",
                "path": "/organizations",
                "subGroups": [{"id": "2", "name": "acme", "path": "/organizations/acme"}],
            }
        ])

        tree = self.api.fetch_group_tree()

        self.assertEqual(tree.path, "/")
        self.assertEqual(tree.find("/organizations/acme").name, "acme")
        self.assertEqual(self.request.call_args.kwargs["params"]["briefRepresentation"], "false")

    def test_fetch_memberships(self):
        """Test per-user group lookups."""
        alice = IdentityUser(id="a", username="alice")
        bob = IdentityUser(id="b", username="bob")

        def respond(method, url, timeout, **kwargs):
            if "/users/a/" in url:
                return make_response([{"id": "g", "name": "acme", "path": "/organizations/acme"}])
            return make_response([])

        self.request.side_effect = respond

        memberships = self.api.fetch_memberships([alice, bob])

        self.assertEqual([g.path for g in memberships[alice]], ["/organizations/acme"])
        self.assertEqual(memberships[bob], [])


class TestGrafanaAPI(unittest.TestCase):
    """Test Grafana client."""

    def setUp(self):
        """Set up test fixtures."""
        self.api = GrafanaAPI(base_url="http://grafana:3000", username="sync-bot", password="secret")
        self.request = patch.object(self.api.session, "request").start()
        self.addCleanup(patch.stopall)

    def test_basic_auth_and_no_org_header(self):
        self.assertEqual(self.api.session.auth, ("sync-bot", "secret"))
        self.assertNotIn("X-Grafana-Org-Id", self.api.session.headers)

    def test_for_organization_sets_header(self):
        """Test org scoping."""
        with self.api.for_organization(7) as scoped:
            self.assertEqual(scoped.session.headers["X-Grafana-Org-Id"], "7")
            self.assertEqual(scoped.session.auth, ("sync-bot", "secret"))
            self.assertEqual(scoped.username, "sync-bot")
            self.assertIsNot(scoped.session, self.api.session)

    def test_get_users_pages_until_short_page(self):
        """Test user listing pagination."""
        full_page = [{"id": i, "login": f"user{i}"} for i in range(1000)]
        self.request.side_effect = [make_response(full_page), make_response([{"id": 1000, "login": "last"}])]

        users = self.api.get_users()

        self.assertEqual(len(users), 1001)
        pages = [c.kwargs["params"]["page"] for c in self.request.call_args_list]
        self.assertEqual(pages, [1, 2])

    def test_create_org(self):
        self.request.return_value = make_response({"orgId": 12, "message": "Organization created"})

        org = self.api.create_org("acme - Acme Corp")

        self.assertEqual(org.id, 12)
        self.assertEqual(self.request.call_args.kwargs["json"], {"name": "acme - Acme Corp"})

    def test_update_org_user_uses_patch(self):
        self.request.return_value = make_response({"message": "Organization user updated"})

        self.api.update_org_user(3, 5, "Viewer")

        kwargs = self.request.call_args.kwargs
        self.assertEqual(kwargs["method"], "PATCH")
        self.assertTrue(kwargs["url"].endswith("/api/orgs/3/users/5"))
        self.assertEqual(kwargs["json"], {"role": "Viewer"})

    def test_add_org_user(self):
        self.request.return_value = make_response({"message": "User added to organization"})

        self.api.add_org_user(3, "alice", "Editor")

        self.assertEqual(self.request.call_args.kwargs["json"], {"loginOrEmail": "alice", "role": "Editor"})

    def test_create_data_source(self):
        self.request.return_value = make_response({"id": 4, "name": "Mimir"})
        data_source = DataSource(name="Mimir", type="prometheus", url="http://mimir", is_default=True)

        self.assertEqual(self.api.create_data_source(data_source), 4)
        self.assertTrue(self.request.call_args.kwargs["json"]["isDefault"])

    def test_create_dashboard_in_folder(self):
        self.request.return_value = make_response({"status": "success"})

        self.api.create_dashboard({"title": "Overview"}, folder_uid="f1")

        payload = self.request.call_args.kwargs["json"]
        self.assertEqual(payload, {"dashboard": {"title": "Overview"}, "overwrite": True, "folderUid": "f1"})

    def test_delete_with_empty_body(self):
        self.request.return_value = make_response(None)

        self.assertIsNone(self.api.delete_user(5))
        self.assertEqual(self.request.call_args.kwargs["method"], "DELETE")

    def test_auto_assign_org_id(self):
        self.request.return_value = make_response({"users": {"auto_assign_org_id": "1"}})

        self.assertEqual(self.api.get_auto_assign_org_id(), 1)

    def test_auto_assign_org_id_missing(self):
        self.request.return_value = make_response({"users": {}})

        with self.assertRaises(SyncError):
            self.api.get_auto_assign_org_id()

    def test_request_failure_propagates(self):
        self.request.side_effect = requests.exceptions.ConnectionError("refused")

        with self.assertRaises(requests.exceptions.ConnectionError):
            self.api.get_orgs()


if __name__ == "__main__":
    unittest.main()
