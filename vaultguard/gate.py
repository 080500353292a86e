"""
vaultguard.gate

Master-password re-authentication in front of reveal / delete / fix.

    IDLE --request_access--> AWAITING_MASTER_PASSWORD
    AWAITING --submit(match)--> GRANTED --handler done--> IDLE
    AWAITING --submit(mismatch)--> DENIED --> AWAITING (entry cleared)
    any --cancel--> IDLE

Only one request is pending at a time; a new request_access replaces it.
Failed attempts are not throttled.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from .models import PasswordRecord
from .store import Authenticator

logger = logging.getLogger(__name__)

Handler = Callable[[PasswordRecord], Awaitable[None]]
Notify = Callable[[str, str], None]


class GateState(Enum):
    IDLE = "idle"
    AWAITING_MASTER_PASSWORD = "awaiting_master_password"
    GRANTED = "granted"
    DENIED = "denied"


class Intent(str, Enum):
    REVEAL = "reveal"
    DELETE = "delete"
    FIX = "fix"


def _silent(level: str, message: str) -> None:
    pass


class AccessGate:
    def __init__(
        self,
        authenticator: Authenticator,
        handlers: Dict[Intent, Handler],
        notify: Optional[Notify] = None,
    ):
        self.authenticator = authenticator
        self.handlers = dict(handlers)
        self.notify = notify if notify is not None else _silent
        self.state = GateState.IDLE
        self.record: Optional[PasswordRecord] = None
        self.intent: Optional[Intent] = None
        self.entered = ""

    @property
    def pending(self) -> bool:
        return self.state is GateState.AWAITING_MASTER_PASSWORD

    def request_access(self, record: PasswordRecord, intent) -> None:
        intent = Intent(intent)
        if intent not in self.handlers:
            raise ValueError(f"No handler registered for {intent.value}")
        if self.pending:
            logger.debug("Replacing pending %s request for %s", self.intent.value, self.record.id)
        self.record = record
        self.intent = intent
        self.entered = ""
        self.state = GateState.AWAITING_MASTER_PASSWORD
        logger.debug("Awaiting master password to %s %s", intent.value, record.id)

    def enter(self, value: str) -> None:
        self.entered = value

    async def submit(self, master_password: Optional[str] = None) -> bool:
        """
        Verify the master password and, on a match, run the pending intent's
        handler once. Returns False on a mismatch; collaborator errors propagate.
        """
        if not self.pending:
            raise RuntimeError(f"Cannot submit while gate is {self.state.value}")
        candidate = self.entered if master_password is None else master_password

        try:
            is_match = await self.authenticator.verify(candidate)
        except Exception:
            self.entered = ""
            self.notify("error", "Failed to verify master password")
            raise

        self.entered = ""
        if not is_match:
            self.state = GateState.DENIED
            logger.warning("Invalid master password for %s on %s", self.intent.value, self.record.id)
            self.notify("error", "Invalid master password")
            self.state = GateState.AWAITING_MASTER_PASSWORD
            return False

        self.state = GateState.GRANTED
        record, intent = self.record, self.intent
        logger.debug("Access granted to %s %s", intent.value, record.id)
        try:
            await self.handlers[intent](record)
        finally:
            self._reset()
        return True

    def cancel(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self.entered = ""
        self.record = None
        self.intent = None
        self.state = GateState.IDLE
