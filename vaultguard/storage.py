"""
vaultguard.storage

Single-user vault kept in a local JSON file, for offline use of the CLI.
Implements the VaultStore and Authenticator contracts.

The master password is stored as an argon2 hash and only ever compared;
entries are plain JSON (no encryption), same as the remote backend.
"""

import json
import logging
import os
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from .errors import RemoteFailure, Unauthorized, ValidationError
from .models import (
    HistoryEntry, PasswordRecord, format_timestamp, new_record_fields, record_from_dict,
)

logger = logging.getLogger(__name__)

MASTER_SPECIALS = '!@#$%^&*(),.?":{}|<>'


def ensure_dir_exists(path: str) -> None:
    d = os.path.dirname(path)
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)


def atomic_write_bytes(path: str, data: bytes) -> None:
    """
    Atomically write bytes to 'path' by writing to a temp file and renaming.
    """
    ensure_dir_exists(path)
    tmp = path + ".tmp"
    with open(tmp, "wb") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp, path)


def read_json_bytes(b: bytes) -> dict:
    return json.loads(b.decode("utf-8"))


def dump_json_bytes(obj: dict) -> bytes:
    return json.dumps(obj, ensure_ascii=False, indent=2).encode("utf-8")


def validate_master_password(password: str) -> None:
    if len(password) < 12:
        raise ValidationError("Master password must be at least 12 characters long")
    if not re.search(r"[A-Z]", password):
        raise ValidationError("Master password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        raise ValidationError("Master password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        raise ValidationError("Master password must contain at least one number")
    if not any(c in MASTER_SPECIALS for c in password):
        raise ValidationError("Master password must contain at least one special character")


def _now() -> str:
    return format_timestamp(datetime.now(timezone.utc))


class LocalVaultFile:
    """Load/save wrapper around the vault JSON document."""

    def __init__(self, path: str):
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> Dict[str, Any]:
        if not self.exists():
            return {"master": None, "passwords": [], "history": []}
        try:
            with open(self.path, "rb") as f:
                data = read_json_bytes(f.read())
        except (OSError, ValueError) as e:
            raise RemoteFailure(f"Cannot read vault file {self.path}") from e
        data.setdefault("master", None)
        data.setdefault("passwords", [])
        data.setdefault("history", [])
        return data

    def save(self, data: Dict[str, Any]) -> None:
        atomic_write_bytes(self.path, dump_json_bytes(data))

    def load_session(self) -> Dict[str, Any]:
        """Load the document, refusing if no master password was ever set."""
        data = self.load()
        if not data.get("master"):
            raise Unauthorized("Master password not set up")
        return data


class LocalVaultStore:
    def __init__(self, path: str):
        self.file = LocalVaultFile(path)

    def _find(self, data: Dict[str, Any], password_id: str) -> Dict[str, Any]:
        for item in data["passwords"]:
            if item["id"] == password_id:
                return item
        raise RemoteFailure(f"Password {password_id} not found", status=404)

    async def list(self) -> List[PasswordRecord]:
        data = self.file.load_session()
        return [record_from_dict(item) for item in data["passwords"]]

    async def get(self, password_id: str) -> PasswordRecord:
        data = self.file.load_session()
        item = self._find(data, password_id)
        item["lastViewed"] = _now()
        self.file.save(data)
        return record_from_dict(item)

    async def create(self, fields: Dict[str, Any]) -> PasswordRecord:
        data = self.file.load_session()
        clean = new_record_fields(
            fields.get("name", ""),
            fields.get("password", ""),
            fields.get("category", "application"),
            fields.get("accountName", ""),
            fields.get("url"),
        )
        now = _now()
        item = dict(clean, id=uuid.uuid4().hex, createdAt=now, updatedAt=now, lastViewed=None)
        data["passwords"].append(item)
        self.file.save(data)
        return record_from_dict(item)

    async def update(self, password_id: str, password: str) -> PasswordRecord:
        data = self.file.load_session()
        item = self._find(data, password_id)
        now = _now()
        data["history"].append({
            "id": uuid.uuid4().hex,
            "value": item["password"],
            "createdAt": now,
            "passwordId": password_id,
        })
        item["password"] = password
        item["updatedAt"] = now
        self.file.save(data)
        return record_from_dict(item)

    async def remove(self, password_id: str) -> None:
        data = self.file.load_session()
        self._find(data, password_id)
        data["passwords"] = [p for p in data["passwords"] if p["id"] != password_id]
        data["history"] = [h for h in data["history"] if h["passwordId"] != password_id]
        self.file.save(data)

    async def history(self, password_id: str) -> List[HistoryEntry]:
        data = self.file.load_session()
        self._find(data, password_id)
        entries = [HistoryEntry.from_dict(h) for h in data["history"] if h["passwordId"] == password_id]
        # newest first
        entries.reverse()
        return entries


class LocalAuthenticator:
    def __init__(self, path: str, hasher: Optional[PasswordHasher] = None):
        self.file = LocalVaultFile(path)
        self.hasher = hasher or PasswordHasher()

    def is_set_up(self) -> bool:
        return bool(self.file.load().get("master"))

    def setup_master_password(self, password: str) -> None:
        validate_master_password(password)
        data = self.file.load()
        if data.get("master"):
            raise ValidationError("Master password is already set up")
        data["master"] = self.hasher.hash(password)
        self.file.save(data)
        logger.info("Master password set up for %s", self.file.path)

    async def verify(self, candidate: str) -> bool:
        data = self.file.load_session()
        try:
            return self.hasher.verify(data["master"], candidate)
        except VerificationError:
            return False
        except InvalidHashError as e:
            raise RemoteFailure("Stored master password hash is corrupted") from e
