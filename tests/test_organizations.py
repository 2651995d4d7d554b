"""
Tests for the organization source and the permission deriver.
"""

import logging

import pytest  # type: ignore

from src.grafana_org_sync.core.constants import ADMIN_ROLES, MEMBER_ROLES
from src.grafana_org_sync.models import Organization, SourceSnapshot
from src.grafana_org_sync.services import OrganizationSource, derive_permissions


@pytest.fixture
def source():
    return OrganizationSource(admin_group_path="/admins")


class TestOrganizationSource:
    """Test cases for OrganizationSource."""

    def test_extract_organizations(self, source, keycloak):
        keycloak.add_group("/organizations/acme", display_name="Acme Corp")
        keycloak.add_group("/organizations/acme/team-a")
        keycloak.add_group("/organizations/globex")

        organizations = source.extract_organizations(keycloak.fetch_group_tree())

        assert [(o.id, o.name) for o in organizations] == [("acme", "Acme Corp"), ("globex", "globex")]

    def test_missing_organizations_group(self, source):
        from src.grafana_org_sync.models import IdentityGroup

        assert source.extract_organizations(IdentityGroup(id="", name="", path="/")) == []

    def test_snapshot_admins_and_members(self, source, keycloak):
        keycloak.add_group("/organizations/acme", display_name="Acme Corp")
        alice = keycloak.add_user("alice", ["/organizations/acme/team-a"])
        root = keycloak.add_user("root", ["/admins"])
        carol = keycloak.add_user("carol")

        users = keycloak.fetch_users()
        snapshot = source.build_snapshot(users, keycloak.fetch_group_tree(),
                                         keycloak.fetch_memberships(users))

        assert snapshot.admins == [root]
        assert snapshot.organizations[0].members == {"alice"}
        assert snapshot.membership_count == 2
        assert carol in snapshot.users
        assert alice in snapshot.memberships

    def test_no_admin_group_configured(self, keycloak):
        keycloak.add_user("root", ["/admins"])
        source = OrganizationSource(admin_group_path=None)

        tree = keycloak.fetch_group_tree()
        users = keycloak.fetch_users()
        admin_group = source.find_admin_group(tree)
        admins, others = source.split_admins(users, keycloak.fetch_memberships(users), admin_group)

        assert admin_group is None
        assert admins == []
        assert [u.username for u in others] == ["root"]

    def test_admin_group_missing_from_tree(self, keycloak, caplog):
        keycloak.add_user("root", ["/admins"])
        source = OrganizationSource(admin_group_path="/ops")

        users = keycloak.fetch_users()
        with caplog.at_level(logging.WARNING):
            snapshot = source.build_snapshot(users, keycloak.fetch_group_tree(),
                                             keycloak.fetch_memberships(users))

        assert snapshot.admins == []
        assert "Admin group '/ops' not found" in caplog.text

    def test_admins_match_the_found_group(self, source, keycloak):
        root = keycloak.add_user("root", ["/admins"])
        keycloak.add_user("eve", ["/admins-old"])

        users = keycloak.fetch_users()
        admin_group = source.find_admin_group(keycloak.fetch_group_tree())
        admins, _ = source.split_admins(users, keycloak.fetch_memberships(users), admin_group)

        assert admin_group.path == "/admins"
        assert admins == [root]


class TestDerivePermissions:
    """Test cases for derive_permissions."""

    def snapshot(self, keycloak):
        users = keycloak.fetch_users()
        return OrganizationSource("/admins").build_snapshot(
            users, keycloak.fetch_group_tree(), keycloak.fetch_memberships(users)
        )

    def test_two_teams_give_one_entry(self, keycloak):
        keycloak.add_group("/organizations/acme")
        keycloak.add_user("alice", ["/organizations/acme/team-a", "/organizations/acme/team-b"])

        permissions = derive_permissions(self.snapshot(keycloak))

        assert [(s.login, s.permitted_roles) for s in permissions["acme"]] == [("alice", MEMBER_ROLES)]

    def test_admin_gets_admin_on_every_org(self, keycloak):
        keycloak.add_group("/organizations/acme")
        keycloak.add_group("/organizations/globex")
        keycloak.add_user("root", ["/admins", "/organizations/acme"])

        permissions = derive_permissions(self.snapshot(keycloak))

        for org_key in ("acme", "globex"):
            specs = [s for s in permissions[org_key] if s.login == "root"]
            assert len(specs) == 1
            assert specs[0].permitted_roles == ADMIN_ROLES
            assert specs[0].preferred_role == "Admin"

    def test_organization_without_members(self, keycloak):
        keycloak.add_group("/organizations/empty")
        keycloak.add_user("alice", ["/organizations/acme"])

        permissions = derive_permissions(self.snapshot(keycloak))

        assert permissions["empty"] == []

    def test_members_come_from_the_organization(self, keycloak):
        acme = keycloak.add_group("/organizations/acme")
        alice = keycloak.add_user("alice", ["/organizations/acme"])
        bob = keycloak.add_user("bob")
        snapshot = SourceSnapshot(
            users=[alice, bob],
            memberships={alice: [acme], bob: []},
            organizations=[Organization(id="acme", name="Acme", group=acme, members={"bob"})],
            admins=[],
        )

        permissions = derive_permissions(snapshot)

        assert [s.login for s in permissions["acme"]] == ["bob"]

    def test_deterministic(self, keycloak):
        keycloak.add_group("/organizations/acme")
        for name in ("dave", "alice", "carol"):
            keycloak.add_user(name, ["/organizations/acme"])
        keycloak.add_user("root", ["/admins"])

        snapshot = self.snapshot(keycloak)
        first = derive_permissions(snapshot)
        second = derive_permissions(snapshot)

        assert first == second
        assert [s.login for s in first["acme"]] == ["dave", "alice", "carol", "root"]
