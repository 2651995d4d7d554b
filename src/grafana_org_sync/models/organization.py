"""
Organization data models.

Contains the normalized view of the source of truth for one pass.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .identity import IdentityGroup, IdentityUser
from ..core.constants import ORG_NAME_SEPARATOR


@dataclass
class Organization:
    """Organization derived from a Keycloak group below /organizations."""

    id: str
    name: str
    group: Optional[IdentityGroup] = None
    members: Set[str] = field(default_factory=set)

    @property
    def grafana_name(self) -> str:
        """Name of the matching Grafana org, prefixed with the correlation key."""
        return f"{self.id}{ORG_NAME_SEPARATOR}{self.name}"


@dataclass
class SourceSnapshot:
    """Everything read from the source of truth during one pass."""

    users: List[IdentityUser]
    memberships: Dict[IdentityUser, List[IdentityGroup]]
    organizations: List[Organization]
    admins: List[IdentityUser] = field(default_factory=list)

    @property
    def membership_count(self) -> int:
        """Total number of group memberships."""
        return sum(len(groups) for groups in self.memberships.values())
