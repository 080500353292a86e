"""
vaultguard.models

Password records as a tagged union over the two categories:
- DevicePassword: a device name and its password, nothing else
- ApplicationPassword: application name + account name, optional url

Records are frozen. A store call that changes a record returns a new object,
so records nobody touched keep their identity inside a vault view.
The camelCase dict form matches the backend's JSON.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, List, Optional

from .errors import ValidationError


class Category(str, Enum):
    DEVICE = "device"
    APPLICATION = "application"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (trailing 'Z' allowed). Naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class PasswordRecord:
    id: str
    name: str
    password: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_viewed: Optional[datetime] = None

    category: ClassVar[Category]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "accountName": self.account_name,  # type: ignore[attr-defined]
            "password": self.password,
            "url": self.url,  # type: ignore[attr-defined]
            "category": self.category.value,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
            "lastViewed": format_timestamp(self.last_viewed),
        }


@dataclass(frozen=True)
class DevicePassword(PasswordRecord):
    category: ClassVar[Category] = Category.DEVICE

    @property
    def account_name(self) -> str:
        return ""

    @property
    def url(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class ApplicationPassword(PasswordRecord):
    account_name: str = ""
    url: Optional[str] = None

    category: ClassVar[Category] = Category.APPLICATION


@dataclass(frozen=True)
class HistoryEntry:
    """One prior plaintext value of a record."""

    id: str
    value: str
    created_at: Optional[datetime]
    password_id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            id=str(data["id"]),
            value=data.get("value", ""),
            created_at=parse_timestamp(data.get("createdAt")),
            password_id=str(data.get("passwordId", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "value": self.value,
            "createdAt": format_timestamp(self.created_at),
            "passwordId": self.password_id,
        }


def _text_field(data: Dict[str, Any], key: str) -> str:
    value = data.get(key, "")
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def parse_category(value: Any) -> Category:
    try:
        return Category(value)
    except ValueError:
        raise ValidationError(f"Unknown category: {value!r}") from None


def record_from_dict(data: Dict[str, Any]) -> PasswordRecord:
    """Build the right record variant from its camelCase dict form."""
    category = parse_category(data.get("category") or Category.APPLICATION.value)
    common = dict(
        id=str(data["id"]),
        name=_text_field(data, "name"),
        password=_text_field(data, "password"),
        created_at=parse_timestamp(data.get("createdAt")),
        updated_at=parse_timestamp(data.get("updatedAt")),
        last_viewed=parse_timestamp(data.get("lastViewed")),
    )
    if category is Category.DEVICE:
        return DevicePassword(**common)
    return ApplicationPassword(
        account_name=data.get("accountName") or "",
        url=data.get("url") or None,
        **common,
    )


def new_record_fields(
    name: str,
    password: str,
    category: Any = Category.APPLICATION,
    account_name: str = "",
    url: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Validate user input for a new record and return the fields the store's
    create() expects. Device records never carry an account name or url.
    """
    category = parse_category(category)
    name = (name or "").strip()
    account_name = (account_name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    if not (password or "").strip():
        raise ValidationError("Password is required")
    if category is Category.APPLICATION and not account_name:
        raise ValidationError("Account name is required for applications")
    if category is Category.DEVICE:
        account_name, url = "", None
    return {
        "name": name,
        "accountName": account_name,
        "password": password,
        "url": url or None,
        "category": category.value,
    }


def ensure_unique(fields: Dict[str, Any], existing: Iterable[PasswordRecord]) -> None:
    """
    Devices are unique by name; applications by name + account name.
    Both comparisons ignore case and the two categories never collide.
    """
    name = fields["name"].lower()
    if fields["category"] == Category.DEVICE.value:
        for rec in existing:
            if rec.category is Category.DEVICE and rec.name.lower() == name:
                raise ValidationError("A device with this name already exists")
        return
    account = fields["accountName"].lower()
    for rec in existing:
        if (
            rec.category is Category.APPLICATION
            and rec.name.lower() == name
            and rec.account_name.lower() == account  # type: ignore[attr-defined]
        ):
            raise ValidationError(
                "An account with this application name and account name already exists"
            )


def search(records: Iterable[PasswordRecord], term: str) -> List[PasswordRecord]:
    records = list(records)
    if not term or not term.strip():
        return records
    term = term.lower()
    return [
        r for r in records
        if term in r.name.lower()
        or term in r.account_name.lower()  # type: ignore[attr-defined]
        or term in r.category.value
    ]
