"""
Configuration module for Grafana organization sync.

Loads configuration from JSON file and environment variables.
"""

import json
import os
from typing import Dict, Any, List, Optional
from pathlib import Path

from . import constants

DEFAULT_CONFIG_FILE = "config.json"
HIDDEN = "***hidden***"


class Config:
    """
    Configuration for the application.

    Built once at startup and handed to every component. All values are exposed
    as read-only properties.
    """

    # Environment variable -> dotted configuration key. Several variables may
    # feed the same key, the first one that is set wins.
    ENV_OVERRIDES = [
        ("GRAFANA_URL", "grafana.url"),
        ("GRAFANA_USERNAME", "grafana.username"),
        ("admin-user", "grafana.username"),  # name used by the Grafana Helm chart
        ("GRAFANA_PASSWORD", "grafana.password"),
        ("admin-password", "grafana.password"),
        ("GRAFANA_DATASOURCE_URL", "datasource.url"),
        ("GRAFANA_DATASOURCE_ALERTMANAGER_URL", "datasource.alertmanager_url"),
        ("GRAFANA_DATASOURCE_USERNAME", "datasource.username"),
        ("GRAFANA_DATASOURCE_PASSWORD", "datasource.password"),
        ("KEYCLOAK_URL", "keycloak.url"),
        ("KEYCLOAK_REALM", "keycloak.realm"),
        ("KEYCLOAK_USERNAME", "keycloak.username"),
        ("KEYCLOAK_PASSWORD", "keycloak.password"),
        ("KEYCLOAK_CLIENT_ID", "keycloak.client_id"),
        ("KEYCLOAK_ADMIN_GROUP_PATH", "keycloak.admin_group_path"),
        ("DASHBOARDS_DIR", "sync.dashboards_dir"),
    ]

    REQUIRED_KEYS = [
        "grafana.url",
        "grafana.username",
        "grafana.password",
        "datasource.url",
        "keycloak.url",
        "keycloak.realm",
        "keycloak.username",
        "keycloak.password",
        "keycloak.client_id",
    ]

    SECRET_KEYS = [
        "grafana.password",
        "datasource.password",
        "keycloak.password",
    ]

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration JSON file. If None, uses CONFIG_FILE env var
                        or defaults to 'config.json'. The default file may be absent,
                        in which case only environment variables are used.
        """
        explicit = config_file or os.getenv("CONFIG_FILE")
        self.config_file = explicit or DEFAULT_CONFIG_FILE
        self._config: Dict[str, Any] = {}
        self._load_config(required=bool(explicit))
        self._override_from_env()
        self._validate_config()

    def _load_config(self, required: bool) -> None:
        """Load configuration from JSON file."""
        config_path = Path(self.config_file)
        if not config_path.exists():
            if required:
                raise FileNotFoundError(f"Configuration file not found: {self.config_file}")
            return

        with open(config_path, "r", encoding="utf-8") as f:
            self._config = json.load(f)

    def _set(self, key: str, value: Any) -> None:
        """Set a value by dotted key, creating sections as needed."""
        section, name = key.split(".", 1)
        self._config.setdefault(section, {})[name] = value

    def _override_from_env(self) -> None:
        """Override configuration with environment variables."""
        applied = set()
        for env_name, key in self.ENV_OVERRIDES:
            value = os.getenv(env_name)
            if value and key not in applied:
                self._set(key, value)
                applied.add(key)

        clear_auto_assign = os.getenv("GRAFANA_CLEAR_AUTO_ASSIGN_ORG")
        if clear_auto_assign is not None:
            self._set("grafana.clear_auto_assign_org", clear_auto_assign.lower() == "true")

        interval = os.getenv("SYNC_INTERVAL_SECONDS")
        if interval:
            self._set("sync.interval_seconds", float(interval))

    def _validate_config(self) -> None:
        """Validate that required configuration keys are present."""
        missing_keys = [key for key in self.REQUIRED_KEYS if not self.get(key)]

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}"
            )

        if self.worker_count < 1:
            raise ValueError("sync.worker_count must be at least 1")

        if self.page_size < 1:
            raise ValueError("sync.page_size must be at least 1")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key (supports dot notation).

        Args:
            key: Configuration key (e.g., 'grafana.url')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    # Grafana

    @property
    def grafana_url(self) -> str:
        """Get Grafana base URL."""
        return self.get("grafana.url", "")

    @property
    def grafana_username(self) -> str:
        """Get Grafana service account login."""
        return self.get("grafana.username", "")

    @property
    def grafana_password(self) -> str:
        """Get Grafana service account password."""
        return self.get("grafana.password", "")

    @property
    def grafana_timeout(self) -> int:
        """Get Grafana request timeout in seconds."""
        return self.get("grafana.timeout", 30)

    @property
    def grafana_max_retries(self) -> int:
        """Get maximum Grafana retry attempts."""
        return self.get("grafana.max_retries", 3)

    @property
    def grafana_verify_ssl(self) -> bool:
        """Get Grafana SSL verification setting."""
        return self.get("grafana.verify_ssl", True)

    @property
    def clear_auto_assign_org(self) -> bool:
        """Check if members of the auto-assign organization should be removed."""
        return bool(self.get("grafana.clear_auto_assign_org", False))

    # Data sources

    @property
    def datasource_url(self) -> str:
        """Get metrics data source URL."""
        return self.get("datasource.url", "")

    @property
    def alertmanager_url(self) -> Optional[str]:
        """Get alerting data source URL (None disables the alerting data source)."""
        return self.get("datasource.alertmanager_url")

    @property
    def datasource_username(self) -> Optional[str]:
        """Get data source basic auth user."""
        return self.get("datasource.username")

    @property
    def datasource_password(self) -> Optional[str]:
        """Get data source basic auth password."""
        return self.get("datasource.password")

    # Keycloak

    @property
    def keycloak_url(self) -> str:
        """Get Keycloak base URL."""
        return self.get("keycloak.url", "")

    @property
    def keycloak_realm(self) -> str:
        """Get Keycloak realm."""
        return self.get("keycloak.realm", "")

    @property
    def keycloak_username(self) -> str:
        """Get Keycloak username."""
        return self.get("keycloak.username", "")

    @property
    def keycloak_password(self) -> str:
        """Get Keycloak password."""
        return self.get("keycloak.password", "")

    @property
    def keycloak_client_id(self) -> str:
        """Get Keycloak client ID used for the password grant."""
        return self.get("keycloak.client_id", "")

    @property
    def admin_group_path(self) -> Optional[str]:
        """Get path of the Keycloak group whose members administer every organization."""
        return self.get("keycloak.admin_group_path")

    @property
    def keycloak_timeout(self) -> int:
        """Get Keycloak request timeout in seconds."""
        return self.get("keycloak.timeout", 30)

    @property
    def keycloak_max_retries(self) -> int:
        """Get maximum Keycloak retry attempts."""
        return self.get("keycloak.max_retries", 3)

    @property
    def keycloak_verify_ssl(self) -> bool:
        """Get Keycloak SSL verification setting."""
        return self.get("keycloak.verify_ssl", True)

    # Sync

    @property
    def sync_interval(self) -> float:
        """Get delay between two reconciliation passes in seconds."""
        return self.get("sync.interval_seconds", constants.DEFAULT_SYNC_INTERVAL)

    @property
    def worker_count(self) -> int:
        """Get number of concurrent workers for identity fetches."""
        return self.get("sync.worker_count", constants.DEFAULT_WORKER_COUNT)

    @property
    def page_size(self) -> int:
        """Get page size for paged user listing."""
        return self.get("sync.page_size", constants.DEFAULT_PAGE_SIZE)

    @property
    def dashboards_dir(self) -> str:
        """Get directory holding the versioned dashboard definitions."""
        return self.get("sync.dashboards_dir", constants.DEFAULT_DASHBOARDS_DIR)

    def describe(self) -> List[str]:
        """
        Describe the effective configuration with secrets hidden.

        Returns:
            One "key: value" line per configured value
        """
        lines = []
        for section in sorted(self._config):
            values = self._config[section]
            if not isinstance(values, dict):
                continue
            for name in sorted(values):
                key = f"{section}.{name}"
                value = HIDDEN if key in self.SECRET_KEYS and values[name] else values[name]
                lines.append(f"{key}: {value}")
        return lines

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(file={self.config_file}, grafana={self.grafana_url}, keycloak={self.keycloak_url})"
