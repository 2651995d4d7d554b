"""
Helper functions for Grafana org names.

A managed Grafana org is named "<key> - <display name>". The key is the
Keycloak group name and survives renames of the display name.
"""

from typing import Optional

from ..core.constants import ORG_NAME_SEPARATOR


def parse_correlation_key(org_name: str) -> Optional[str]:
    """
    Extract the correlation key from a Grafana org name.

    Examples:
        "acme - Acme Corp" -> "acme"
        "foo bar - X"      -> None (space in key)
        "Main Org."        -> None (no separator)

    Args:
        org_name: Grafana org name

    Returns:
        The key, or None if the org is not managed by this sync
    """
    components = org_name.split(ORG_NAME_SEPARATOR)
    if len(components) < 2 or " " in components[0]:
        return None
    return components[0]
