"""
vaultguard.errors

Error taxonomy shared by the engine and its collaborators.
A failed master password check is not an error: Authenticator.verify returns False.
"""

from typing import Optional


class VaultGuardError(Exception):
    """Base class for every recoverable VaultGuard failure."""


class InvalidPolicy(VaultGuardError, ValueError):
    """The generator was asked for a password it cannot build."""


class ValidationError(VaultGuardError, ValueError):
    """User-supplied record fields broke a required-field or uniqueness rule."""


class Unauthorized(VaultGuardError):
    """No valid session for the store or authenticator."""


class RemoteFailure(VaultGuardError):
    """A collaborator call failed for any reason other than authorization."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
