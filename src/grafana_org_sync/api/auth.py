"""
Authentication operations for the Keycloak admin API.

Obtains a bearer token through the OpenID Connect password grant.
"""

import logging
from typing import Optional

import requests  # type: ignore

from .client import APIClient
from ..core.errors import AuthenticationError


class KeycloakAuthAPI(APIClient):
    """API client with Keycloak authentication capabilities."""

    logger: logging.Logger

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
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize API client with authentication.

        Args:
            base_url: Base URL of Keycloak (including a legacy '/auth' prefix if any)
            realm: Realm holding users and groups
            username: Username for the password grant
            password: Password for the password grant
            client_id: OpenID Connect client used for the password grant
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            verify_ssl: Whether to verify SSL certificates
            logger: Logger instance
        """
        super().__init__(base_url, timeout, max_retries, verify_ssl, logger=logger)

        self.realm = realm
        self.username = username
        self.password = password
        self.client_id = client_id

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def login(self) -> str:
        """
        Fetch a fresh access token.

        Tokens are short-lived, so this is called at the start of every pass.

        Returns:
            The access token

        Raises:
            AuthenticationError: If the response carries no access token
            requests.exceptions.RequestException: On request failure
        """
        self.logger.info("Fetching Keycloak access token...")

        form = {
            "grant_type": "password",
            "username": self.username,
            "password": self.password,
            "client_id": self.client_id,
        }

        try:
            response = self._make_request(
                "POST",
                f"/realms/{self.realm}/protocol/openid-connect/token",
                data=form,
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Cache-Control": "no-cache",
                },
            )
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Login failed: {e}")
            self.access_token = None
            raise

        token = self._json(response).get("access_token")
        if not token:
            self.access_token = None
            raise AuthenticationError("access_token not found in JSON response")

        self.access_token = token
        self._update_headers()
        return token
