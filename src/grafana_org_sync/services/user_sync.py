"""
User sync service.

Aligns the global Grafana user list with the Keycloak users.
"""

import logging
import threading
from typing import Dict, List, Optional, TYPE_CHECKING

import requests  # type: ignore

from ..core.constants import RESERVED_LOGIN
from ..core.errors import check_interrupted
from ..models import GrafanaUser, IdentityUser

if TYPE_CHECKING:
    from ..api import GrafanaAPI


class UserSync:
    """Update and delete Grafana users to match Keycloak."""

    def __init__(
        self,
        grafana: "GrafanaAPI",
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize user sync.

        Args:
            grafana: Grafana client (unscoped)
            logger: Logger instance
        """
        self.grafana = grafana
        self.logger = logger or logging.getLogger(__name__)

    def _managed_users(self) -> Dict[str, GrafanaUser]:
        """Grafana users by login, without the reserved logins."""
        reserved = {RESERVED_LOGIN, self.grafana.username}
        return {
            user.login: user
            for user in self.grafana.get_users()
            if user.login not in reserved
        }

    @staticmethod
    def needs_update(grafana_user: GrafanaUser, identity_user: IdentityUser) -> bool:
        """Check whether the Grafana user differs from the Keycloak user."""
        return (
            grafana_user.email != identity_user.email
            or grafana_user.is_admin
            or grafana_user.login != identity_user.username
            or grafana_user.name != identity_user.display_name
        )

    def _update(self, grafana_user: GrafanaUser, identity_user: IdentityUser) -> None:
        """Fix profile and admin flag; the user may vanish or change meanwhile."""
        try:
            self.grafana.update_user(
                grafana_user.id,
                login=identity_user.username,
                email=identity_user.email,
                name=identity_user.display_name,
            )
            if grafana_user.is_admin:
                self.grafana.set_user_admin(grafana_user.id, False)
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Could not update user '{identity_user.username}': {e}")

    def sync(
        self,
        identity_users: List[IdentityUser],
        stop_event: Optional[threading.Event] = None
    ) -> List[IdentityUser]:
        """
        Sync Keycloak users to Grafana.

        Users are not created here: Grafana creates them on first login (and
        resets their permissions while doing so), the permission sync fixes
        their roles afterwards. Grafana users unknown to Keycloak are deleted.
        Failing updates and deletes are logged as warnings; the next pass
        retries them.

        Args:
            identity_users: Users from Keycloak
            stop_event: Cancellation signal

        Returns:
            Keycloak users that exist in Grafana

        Raises:
            ReconcileInterrupted: If cancellation was requested
        """
        grafana_users = self._managed_users()
        synced: List[IdentityUser] = []

        for identity_user in identity_users:
            grafana_user = grafana_users.pop(identity_user.username, None)
            if grafana_user is not None:
                if self.needs_update(grafana_user, identity_user):
                    self.logger.info(f"User '{identity_user.username}' differs, fixing")
                    self._update(grafana_user, identity_user)
                synced.append(identity_user)

            check_interrupted(stop_event)

        for grafana_user in grafana_users.values():
            self.logger.info(
                f"User '{grafana_user.login}' ({grafana_user.id}) not found in Keycloak, removing"
            )
            try:
                self.grafana.delete_user(grafana_user.id)
            except requests.exceptions.RequestException as e:
                self.logger.warning(f"Could not delete user '{grafana_user.login}': {e}")
            check_interrupted(stop_event)

        return synced
