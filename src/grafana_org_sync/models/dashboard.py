"""
Dashboard data models.

Dashboards are JSON documents exported from Grafana. DashboardDocument wraps
such a document and offers accessors that fail with DashboardValidationError
instead of KeyError/TypeError when the document has an unexpected shape.
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..core.errors import DashboardValidationError


class DashboardDocument:
    """Semi-structured dashboard document with checked accessors."""

    def __init__(self, data: Dict[str, Any]):
        if not isinstance(data, dict):
            raise DashboardValidationError("Invalid dashboard format: document is not an object")
        self._data = data

    @property
    def title(self) -> str:
        """Dashboard title, required to identify the dashboard."""
        title = self._data.get("title")
        if not isinstance(title, str) or not title:
            raise DashboardValidationError("Invalid dashboard format: 'title' key not found")
        return title

    def remove(self, key: str) -> None:
        """Remove a top level key if present."""
        self._data.pop(key, None)

    def get_object(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get a nested object.

        Returns:
            The object, or None if the key is absent

        Raises:
            DashboardValidationError: If the value is not an object
        """
        if key not in self._data:
            return None
        value = self._data[key]
        if not isinstance(value, dict):
            raise DashboardValidationError(
                f"Invalid dashboard format: '{key}' does not contain map"
            )
        return value

    def get_object_list(self, key: str, container: Optional[Dict[str, Any]] = None,
                        path: Optional[str] = None) -> Optional[List[Dict[str, Any]]]:
        """
        Get a list of objects.

        Args:
            key: Key of the list
            container: Object holding the key (defaults to the document root)
            path: Path of the list used in error messages (defaults to key)

        Returns:
            The list, or None if the key is absent

        Raises:
            DashboardValidationError: If the value is not a list or holds non-objects
        """
        source = self._data if container is None else container
        path = path or key
        if key not in source:
            return None
        value = source[key]
        if not isinstance(value, list):
            raise DashboardValidationError(
                f"Invalid dashboard format: '{path}' does not contain array"
            )
        for i, entry in enumerate(value):
            if not isinstance(entry, dict):
                raise DashboardValidationError(
                    f"Invalid dashboard format: '{path}[{i}]' is not a map"
                )
        return value

    def copy(self) -> "DashboardDocument":
        """Deep copy, so that one organization's changes never leak into another's."""
        return DashboardDocument(copy.deepcopy(self._data))

    def to_dict(self) -> Dict[str, Any]:
        return self._data


@dataclass
class Dashboard:
    """Dashboard that should exist in every organization."""

    folder: str
    document: DashboardDocument

    @property
    def title(self) -> str:
        return self.document.title
