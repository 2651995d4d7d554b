"""
Identity data models.

Contains DTOs for users and groups read from Keycloak.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.constants import DISPLAY_NAME_ATTRIBUTE


@dataclass(frozen=True)
class IdentityUser:
    """User as stored in Keycloak. Hashable, used as a key for memberships."""

    id: str
    username: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IdentityUser":
        """Build a user from a Keycloak user representation."""
        return cls(
            id=data.get("id", ""),
            username=data.get("username", ""),
            email=data.get("email") or "",
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
        )

    @property
    def display_name(self) -> str:
        """Full name, falling back to whichever part is set, then to email."""
        if not self.first_name and not self.last_name:
            return self.email
        if not self.last_name:
            return self.first_name
        if not self.first_name:
            return self.last_name
        return f"{self.first_name} {self.last_name}"


@dataclass(eq=False)
class IdentityGroup:
    """Group as stored in Keycloak, including its subgroups."""

    id: str
    name: str
    path: str
    sub_groups: List["IdentityGroup"] = field(default_factory=list)
    attributes: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IdentityGroup":
        """Build a group tree from a Keycloak group representation."""
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            path=data.get("path", ""),
            sub_groups=[cls.from_dict(sub) for sub in data.get("subGroups") or []],
            attributes=data.get("attributes") or {},
        )

    @property
    def display_name_attribute(self) -> str:
        """First value of the displayName attribute, or empty string."""
        values = self.attributes.get(DISPLAY_NAME_ATTRIBUTE) or []
        return values[0] if values else ""

    @property
    def path_elements(self) -> List[str]:
        """Path split into its segments, without the leading slash."""
        path = self.path[1:] if self.path.startswith("/") else self.path
        return path.split("/")

    @property
    def organization_name(self) -> str:
        """Name of the organization this group belongs to (second path segment)."""
        elements = self.path_elements
        if len(elements) < 2:
            return ""
        return elements[1]

    def is_same_organization(self, other: Optional["IdentityGroup"]) -> bool:
        """
        Check whether two groups belong to the same organization.

        Only the root and organization segments are compared, so teams of an
        organization match the organization itself.
        """
        if other is None:
            return False
        mine, theirs = self.path_elements, other.path_elements
        if len(mine) < 2 or len(theirs) < 2:
            return False
        return mine[0] == theirs[0] and mine[1] == theirs[1]

    def find(self, path: str) -> Optional["IdentityGroup"]:
        """Depth-first search for the group with the given full path."""
        if self.path == path:
            return self
        for sub_group in self.sub_groups:
            found = sub_group.find(path)
            if found is not None:
                return found
        return None
