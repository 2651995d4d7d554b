"""
Permission data models.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class PermissionSpec:
    """Desired access of one user to one organization."""

    login: str
    permitted_roles: Tuple[str, ...]

    @property
    def preferred_role(self) -> str:
        """Role assigned when the user is added or has an unacceptable role."""
        return self.permitted_roles[0]

    def permits(self, role: str) -> bool:
        """Check whether the given role is acceptable."""
        return role in self.permitted_roles
