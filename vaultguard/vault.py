"""
vaultguard.vault

In-memory view of one user's vault. Holds the record list loaded from the
store, wires the access gate to reveal / delete / fix, and recomputes the
audit on every read.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from . import auditor
from .gate import AccessGate, Intent
from .models import (
    Category, HistoryEntry, PasswordRecord, ensure_unique, new_record_fields, search,
)
from .remediation import RemediationFlow
from .store import Authenticator, VaultStore

logger = logging.getLogger(__name__)


class Vault:
    def __init__(
        self,
        store: VaultStore,
        authenticator: Authenticator,
        notify: Optional[Callable[[str, str], None]] = None,
    ):
        self.store = store
        self.notify = notify if notify is not None else (lambda level, message: None)
        self.records: List[PasswordRecord] = []
        self.revealed: Optional[PasswordRecord] = None
        self.remediation = RemediationFlow(store, self, notify=self.notify)
        self.gate = AccessGate(
            authenticator,
            {
                Intent.REVEAL: self._reveal,
                Intent.DELETE: self._delete,
                Intent.FIX: self.remediation.begin,
            },
            notify=self.notify,
        )

    async def load(self) -> List[PasswordRecord]:
        self.records = list(await self.store.list())
        return self.records

    def find(self, password_id: str) -> PasswordRecord:
        for rec in self.records:
            if rec.id == password_id:
                return rec
        raise KeyError(password_id)

    async def add(
        self,
        name: str,
        password: str,
        category=Category.APPLICATION,
        account_name: str = "",
        url: Optional[str] = None,
    ) -> PasswordRecord:
        fields = new_record_fields(name, password, category, account_name, url)
        ensure_unique(fields, self.records)
        created = await self.store.create(fields)
        self.records = self.records + [created]
        logger.info("Saved %s password %s", fields["category"], created.id)
        self.notify("success", "Password saved successfully")
        return created

    def replace(self, updated: PasswordRecord) -> None:
        """Swap the record with the same id; every other record keeps its identity."""
        self.find(updated.id)
        self.records = [updated if r.id == updated.id else r for r in self.records]

    def search(self, term: str) -> List[PasswordRecord]:
        return search(self.records, term)

    def audit(self, now: Optional[datetime] = None) -> auditor.AuditSnapshot:
        return auditor.audit(self.records, now=now)

    def age_report(self, now: Optional[datetime] = None):
        return auditor.age_report(self.records, now=now)

    async def history(self, record: PasswordRecord) -> List[HistoryEntry]:
        return list(await self.store.history(record.id))

    def close_reveal(self) -> None:
        self.revealed = None

    async def _reveal(self, record: PasswordRecord) -> None:
        fresh = await self.store.get(record.id)
        if any(r.id == fresh.id for r in self.records):
            self.replace(fresh)
        self.revealed = fresh

    async def _delete(self, record: PasswordRecord) -> None:
        await self.store.remove(record.id)
        self.records = [r for r in self.records if r.id != record.id]
        if self.revealed is not None and self.revealed.id == record.id:
            self.revealed = None
        logger.info("Deleted password %s", record.id)
        self.notify("success", "Password deleted successfully")
