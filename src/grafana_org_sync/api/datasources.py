"""
Data source operations for the Grafana HTTP API.

Data sources belong to the organization selected by the X-Grafana-Org-Id
header, so these calls are made through a client scoped with
GrafanaAPI.for_organization().
"""

import logging
from typing import List, Dict, Any, Optional

from ..models import DataSource


class DataSourcesAPI:
    """Mixin for data source operations."""

    logger: logging.Logger

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Method provided by APIClient base class."""
        ...

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Method provided by APIClient base class."""
        ...

    def put(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Method provided by APIClient base class."""
        ...

    def delete(self, endpoint: str) -> Any:
        """Method provided by APIClient base class."""
        ...

    def get_data_sources(self) -> List[DataSource]:
        """Get all data sources of the current organization."""
        result = self.get("/api/datasources")
        if isinstance(result, list):
            return [DataSource.from_dict(ds) for ds in result]
        return []

    def get_data_source(self, data_source_id: int) -> DataSource:
        """Get a data source by ID."""
        return DataSource.from_dict(self.get(f"/api/datasources/{data_source_id}"))

    def create_data_source(self, data_source: DataSource) -> int:
        """
        Create a data source.

        Args:
            data_source: Data source to create

        Returns:
            ID of the new data source
        """
        result = self.post("/api/datasources", data_source.to_payload())
        return result["id"]

    def update_data_source(self, data_source: DataSource) -> None:
        """Replace a data source, keeping its ID and UID."""
        self.put(f"/api/datasources/{data_source.id}", data_source.to_payload())

    def delete_data_source(self, data_source_id: int) -> None:
        """Delete a data source by ID."""
        self.delete(f"/api/datasources/{data_source_id}")
