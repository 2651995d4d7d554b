"""
Base API client shared by the Keycloak and Grafana clients.

Handles HTTP requests, session management, and error handling.
"""

import logging
from typing import Dict, Any, Optional, Tuple

import requests  # type: ignore
from requests.adapters import HTTPAdapter  # type: ignore
from urllib3.util.retry import Retry  # type: ignore


class APIClient:
    """Base client for JSON REST APIs."""

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        max_retries: int = 3,
        verify_ssl: bool = True,
        auth: Optional[Tuple[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize API client.

        Args:
            base_url: Base URL for the API
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            verify_ssl: Whether to verify SSL certificates
            auth: Basic auth credentials (username, password)
            headers: Extra headers sent with every request
            logger: Logger instance
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.verify_ssl = verify_ssl
        self.auth = auth
        self.extra_headers: Dict[str, str] = dict(headers or {})
        self.logger = logger or logging.getLogger(__name__)

        # Bearer token, set by clients that log in
        self.access_token: Optional[str] = None

        # Disable SSL warnings when verify_ssl is False
        if not verify_ssl:
            import urllib3
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        # Setup session with retry strategy
        self.session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "PUT", "DELETE"]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        if auth is not None:
            self.session.auth = auth

        # Set default headers
        self._update_headers()

    def _update_headers(self) -> None:
        """Update session headers with authentication token."""
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json"
        })
        self.session.headers.update(self.extra_headers)

        if self.access_token:
            self.session.headers.update({
                "Authorization": f"Bearer {self.access_token}"
            })

    def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> requests.Response:
        """
        Make HTTP request to API.

        Args:
            method: HTTP method (GET, POST, PUT, etc.)
            endpoint: API endpoint (without base URL)
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            requests.exceptions.RequestException: On request failure
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        kwargs.setdefault('verify', self.verify_ssl)

        self.logger.debug(f"{method} {url}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                timeout=self.timeout,
                **kwargs
            )
            response.raise_for_status()
            return response

        except requests.exceptions.RequestException as e:
            self.logger.error(f"API request failed: {method} {url} - {e}")
            raise

    @staticmethod
    def _json(response: requests.Response) -> Any:
        """Decode a JSON body, tolerating empty responses."""
        if not response.content:
            return {}
        return response.json()

    def get(self, endpoint: str, params: Optional[Dict] = None) -> Any:
        """
        Make GET request.

        Args:
            endpoint: API endpoint
            params: Query parameters

        Returns:
            Decoded JSON response
        """
        response = self._make_request("GET", endpoint, params=params)
        return self._json(response)

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """
        Make POST request.

        Args:
            endpoint: API endpoint
            data: Request body data

        Returns:
            Decoded JSON response
        """
        response = self._make_request("POST", endpoint, json=data)
        return self._json(response)

    def put(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """
        Make PUT request.

        Args:
            endpoint: API endpoint
            data: Request body data

        Returns:
            Decoded JSON response
        """
        response = self._make_request("PUT", endpoint, json=data)
        return self._json(response)

    def patch(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Make PATCH request."""
        response = self._make_request("PATCH", endpoint, json=data)
        return self._json(response)

    def delete(self, endpoint: str) -> Any:
        """Make DELETE request."""
        response = self._make_request("DELETE", endpoint)
        return self._json(response)

    def close_idle_connections(self) -> None:
        """Release pooled connections; the session stays usable."""
        for adapter in self.session.adapters.values():
            adapter.close()

    def close(self) -> None:
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
