"""
Main entry point for Grafana organization sync.

Loads configuration, builds the clients and runs reconcile passes until
interrupted.
"""

import signal
import sys
import threading
from typing import List, Optional

from .core import Config, setup_logger, LoggerContext, ReconcileInterrupted
from .api import GrafanaAPI, KeycloakAPI
from .models import Dashboard
from .reconciler import Reconciler, ReconcileResult
from .services import load_dashboards


class GrafanaOrgSyncApp:
    """Main application for Grafana organization sync."""

    def __init__(self, config_file: Optional[str] = None, log_level: str = "INFO"):
        """
        Initialize application.

        Args:
            config_file: Path to configuration file
            log_level: Logging level
        """
        # Load configuration
        self.config = Config(config_file)

        # Setup logger
        self.logger = setup_logger(log_level=log_level)
        self.logger.info("=" * 60)
        self.logger.info("Grafana Organization Sync")
        self.logger.info("=" * 60)
        for line in self.config.describe():
            self.logger.info(f"  {line}")

        self.stop_event = threading.Event()

        # Initialize components (will be set in initialize_components)
        self.dashboards: List[Dashboard] = []
        self.keycloak: Optional[KeycloakAPI] = None
        self.grafana: Optional[GrafanaAPI] = None
        self.reconciler: Optional[Reconciler] = None

    def initialize_components(self) -> None:
        """Load dashboards and build the clients."""
        self.logger.info("Initializing components...")

        self.dashboards = load_dashboards(self.config.dashboards_dir, self.logger)

        self.keycloak = KeycloakAPI(
            base_url=self.config.keycloak_url,
            realm=self.config.keycloak_realm,
            username=self.config.keycloak_username,
            password=self.config.keycloak_password,
            client_id=self.config.keycloak_client_id,
            timeout=self.config.keycloak_timeout,
            max_retries=self.config.keycloak_max_retries,
            verify_ssl=self.config.keycloak_verify_ssl,
            worker_count=self.config.worker_count,
            page_size=self.config.page_size,
            logger=self.logger
        )

        self.grafana = GrafanaAPI(
            base_url=self.config.grafana_url,
            username=self.config.grafana_username,
            password=self.config.grafana_password,
            timeout=self.config.grafana_timeout,
            max_retries=self.config.grafana_max_retries,
            verify_ssl=self.config.grafana_verify_ssl,
            logger=self.logger
        )

        self.reconciler = Reconciler(
            config=self.config,
            keycloak=self.keycloak,
            grafana=self.grafana,
            dashboards=self.dashboards,
            logger=self.logger
        )

        self.logger.info("All components initialized successfully")

    def install_signal_handlers(self) -> None:
        """Stop the loop on SIGINT and SIGTERM."""
        def handle(signum, frame):
            self.logger.info(f"Received signal {signum}, stopping")
            self.stop_event.set()

        signal.signal(signal.SIGINT, handle)
        signal.signal(signal.SIGTERM, handle)

    def run_once(self) -> ReconcileResult:
        """
        Run a single reconcile pass.

        Returns:
            Counts of the pass
        """
        if self.reconciler is None:
            raise RuntimeError("Components not properly initialized")

        with LoggerContext(self.logger, "reconcile"):
            result = self.reconciler.reconcile(self.stop_event)

        self.logger.info(
            f"Pass done: {result.users} users, {result.memberships} memberships, "
            f"{result.organizations} organizations, {result.admins} admins"
        )
        return result

    def run(self) -> None:
        """Run reconcile passes until a stop is requested."""
        if self.reconciler is None:
            raise RuntimeError("Components not properly initialized")

        while not self.stop_event.is_set():
            try:
                self.run_once()
            except ReconcileInterrupted:
                break
            except Exception as e:
                self.logger.error(f"Could not reconcile (will retry): {e}")

            self.stop_event.wait(self.config.sync_interval)

        self.logger.info("Stopped")

    def close(self) -> None:
        """Release the clients."""
        for client in (self.keycloak, self.grafana):
            if client is not None:
                client.close()


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Sync Grafana organizations from the Keycloak group hierarchy"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single reconcile pass and exit"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level. Default: INFO"
    )

    args = parser.parse_args()

    try:
        app = GrafanaOrgSyncApp(config_file=args.config, log_level=args.log_level)
        app.initialize_components()
    except Exception as e:
        print(f"Application failed to start: {e}")
        sys.exit(1)

    app.install_signal_handlers()
    try:
        if args.once:
            try:
                app.run_once()
            except ReconcileInterrupted:
                app.logger.info("Interrupted")
            except Exception as e:
                app.logger.error(f"Reconcile failed: {e}")
                sys.exit(1)
        else:
            app.run()
    finally:
        app.close()


if __name__ == "__main__":
    main()
