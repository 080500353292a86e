"""VaultGuard: password generator, strength scorer, vault auditor and master-password gate."""

__version__ = "0.1.0"
