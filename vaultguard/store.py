"""
vaultguard.store

Collaborator contracts (VaultStore, Authenticator) and their HTTP
implementations against the vault backend.

All calls are scoped to a bearer token. No token, or a 401 from the
backend, raises Unauthorized; any other failure raises RemoteFailure.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from .errors import RemoteFailure, Unauthorized
from .models import HistoryEntry, PasswordRecord, record_from_dict

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class VaultStore(Protocol):
    async def list(self) -> List[PasswordRecord]: ...

    async def get(self, password_id: str) -> PasswordRecord: ...

    async def create(self, fields: Dict[str, Any]) -> PasswordRecord: ...

    async def update(self, password_id: str, password: str) -> PasswordRecord: ...

    async def remove(self, password_id: str) -> None: ...

    async def history(self, password_id: str) -> List[HistoryEntry]: ...


class Authenticator(Protocol):
    async def verify(self, candidate: str) -> bool: ...


class _HttpBackend:
    """Shared request plumbing for the HTTP collaborators."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str],
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        if not self.token:
            raise Unauthorized("Unauthorized")
        url = f"{self.base_url}{path}"
        try:
            r = await self._client.request(
                method, url, json=json,
                headers={"Authorization": f"Bearer {self.token}"},
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise RemoteFailure(f"Request to {path} failed") from e

        if r.status_code == 401:
            raise Unauthorized("Unauthorized")
        if not r.is_success:
            logger.warning("%s %s returned HTTP %d", method, path, r.status_code)
            raise RemoteFailure(f"HTTP error! status: {r.status_code}", status=r.status_code)
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise RemoteFailure(f"Invalid JSON from {path}", status=r.status_code) from e


class HttpVaultStore(_HttpBackend):
    async def list(self) -> List[PasswordRecord]:
        data = await self._request("GET", "/passwords")
        return [record_from_dict(d) for d in data or []]

    async def get(self, password_id: str) -> PasswordRecord:
        # the backend stamps lastViewed on this read
        data = await self._request("GET", f"/passwords/{password_id}")
        return record_from_dict(data)

    async def create(self, fields: Dict[str, Any]) -> PasswordRecord:
        data = await self._request("POST", "/passwords", json=fields)
        return record_from_dict(data)

    async def update(self, password_id: str, password: str) -> PasswordRecord:
        data = await self._request("PUT", f"/passwords/{password_id}", json={"password": password})
        return record_from_dict(data)

    async def remove(self, password_id: str) -> None:
        await self._request("DELETE", f"/passwords/{password_id}")

    async def history(self, password_id: str) -> List[HistoryEntry]:
        data = await self._request("GET", f"/passwords/{password_id}/history")
        return [HistoryEntry.from_dict(d) for d in data or []]


class HttpAuthenticator(_HttpBackend):
    async def verify(self, candidate: str) -> bool:
        data = await self._request("POST", "/auth/verify-password", json={"password": candidate})
        return bool((data or {}).get("isMatch"))
