"""
vaultguard.remediation

Replace the plaintext of a record flagged by the audit. The flow is opened
only by the access gate's FIX handler; saving goes through the store and
merges the returned record into the vault view by id.
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional

from .errors import ValidationError
from .models import PasswordRecord
from .store import VaultStore

if TYPE_CHECKING:
    from .vault import Vault

logger = logging.getLogger(__name__)


class RemediationFlow:
    def __init__(self, store: VaultStore, vault: "Vault", notify: Optional[Callable[[str, str], None]] = None):
        self.store = store
        self.vault = vault
        self.notify = notify if notify is not None else (lambda level, message: None)
        self.record: Optional[PasswordRecord] = None

    @property
    def is_open(self) -> bool:
        return self.record is not None

    async def begin(self, record: PasswordRecord) -> None:
        self.record = record

    def cancel(self) -> None:
        self.record = None

    async def save(self, new_password: str) -> PasswordRecord:
        if self.record is None:
            raise RuntimeError("No record is open for remediation")
        if not (new_password or "").strip():
            raise ValidationError("Password is required")

        try:
            updated = await self.store.update(self.record.id, new_password)
        except Exception:
            logger.warning("Failed to update password %s", self.record.id)
            self.notify("error", "Failed to update password")
            raise

        self.vault.replace(updated)
        logger.info("Updated password %s", updated.id)
        self.notify("success", "Password updated successfully")
        self.record = None
        return updated
