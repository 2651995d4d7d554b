"""
Grafana data models.

Contains DTOs for the Grafana resources managed by the sync.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Org:
    """Grafana organization."""

    id: int
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Org":
        return cls(id=data["id"], name=data.get("name", ""))


@dataclass
class GrafanaUser:
    """Grafana user as returned by the global user listing."""

    id: int
    login: str
    email: str = ""
    name: str = ""
    is_admin: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GrafanaUser":
        return cls(
            id=data["id"],
            login=data.get("login", ""),
            email=data.get("email", ""),
            name=data.get("name", ""),
            is_admin=bool(data.get("isAdmin", False)),
        )


@dataclass
class OrgUser:
    """Membership of a Grafana user in one organization."""

    user_id: int
    login: str
    role: str
    email: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrgUser":
        return cls(
            user_id=data["userId"],
            login=data.get("login", ""),
            role=data.get("role", ""),
            email=data.get("email", ""),
        )


@dataclass
class DataSource:
    """Grafana data source."""

    name: str
    type: str
    url: str
    access: str = "proxy"
    is_default: bool = False
    json_data: Dict[str, Any] = field(default_factory=dict)
    secure_json_data: Dict[str, Any] = field(default_factory=dict)
    basic_auth: bool = False
    basic_auth_user: str = ""
    id: Optional[int] = None
    uid: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataSource":
        return cls(
            name=data.get("name", ""),
            type=data.get("type", ""),
            url=data.get("url", ""),
            access=data.get("access", ""),
            is_default=bool(data.get("isDefault", False)),
            json_data=data.get("jsonData") or {},
            basic_auth=bool(data.get("basicAuth", False)),
            basic_auth_user=data.get("basicAuthUser", ""),
            id=data.get("id"),
            uid=data.get("uid"),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Request body for creating or updating the data source."""
        payload: Dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "url": self.url,
            "access": self.access,
            "isDefault": self.is_default,
            "jsonData": self.json_data,
            "secureJsonData": self.secure_json_data,
            "basicAuth": self.basic_auth,
            "basicAuthUser": self.basic_auth_user,
        }
        if self.id is not None:
            payload["id"] = self.id
        if self.uid is not None:
            payload["uid"] = self.uid
        return payload

    def matches(self, other: "DataSource") -> bool:
        """
        Compare the fields the data source listing returns.

        Secrets are write-only in Grafana and the listing omits the basic auth
        user, so neither can take part.
        """
        return (
            self.url == other.url
            and self.type == other.type
            and self.is_default == other.is_default
            and self.json_data == other.json_data
            and self.access == other.access
            and self.basic_auth == other.basic_auth
        )


@dataclass
class Folder:
    """Grafana dashboard folder."""

    id: int
    uid: str
    title: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Folder":
        return cls(id=data.get("id", 0), uid=data.get("uid", ""), title=data.get("title", ""))


@dataclass
class DashboardSearchHit:
    """Dashboard entry returned by the search endpoint."""

    uid: str
    title: str
    folder_uid: Optional[str] = None
    folder_title: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DashboardSearchHit":
        return cls(
            uid=data.get("uid", ""),
            title=data.get("title", ""),
            folder_uid=data.get("folderUid"),
            folder_title=data.get("folderTitle"),
            id=data.get("id"),
        )
