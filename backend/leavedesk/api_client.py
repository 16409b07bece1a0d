"""
HTTP API client for talking to the LeaveDesk backend.

Usage pattern:

    from leavedesk.api_client import get_api_client

    client = get_api_client()

    # login (the session cookie stays in the client's cookie jar)
    await client.login(email="mario.rossi@example.com", password="secret1")

    # list own requests
    requests = await client.list_requests()
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from .errors import (
    AuthenticationError,
    AuthorizationError,
    LeaveDeskError,
    TransportError,
    error_for_status,
)

logger = logging.getLogger(__name__)


# -----------------------------
# Configuration helpers
# -----------------------------


def _load_base_url() -> str:
    """
    Determine the backend base URL.

    Priority:
    1. Environment variable LEAVEDESK_API_BASE_URL
    2. Default: http://127.0.0.1:8000
    """
    env_url = os.getenv("LEAVEDESK_API_BASE_URL")
    if env_url:
        return env_url.rstrip("/")
    return "http://127.0.0.1:8000"


def _drop_empty(params: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in params.items() if value not in (None, "")}


# -----------------------------
# Main API client
# -----------------------------


class LeaveDeskClient:
    """
    Reusable HTTP client for the LeaveDesk backend.

    Use LeaveDeskClient.get() to obtain a singleton instance. Mutations are
    never retried here; callers decide what to do with a failure.
    """

    _instance: Optional["LeaveDeskClient"] = None

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url: str = (base_url or _load_base_url()).rstrip("/")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ---------- Singleton helper ----------

    @classmethod
    def get(cls) -> "LeaveDeskClient":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    # ---------- Internal helpers ----------

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                transport=self._transport,
                timeout=10.0,  # seconds
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body.

        Non-2xx answers are raised as the matching LeaveDeskError subclass,
        carrying the backend's ``error`` text.
        """
        client = await self._ensure_client()
        try:
            resp = await client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.is_error:
            message = (data or {}).get("error") if isinstance(data, dict) else None
            raise error_for_status(resp.status_code, message or f"{method} {path} failed")
        if data is None:
            raise TransportError(f"{method} {path} returned a non-JSON body")
        return data

    # ---------- Public methods ----------

    async def close(self) -> None:
        """
        Close underlying HTTP connection pool.

        Call this once on shutdown.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/health")

    # ---- Authentication ----

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        POST /login. The backend answers with the user and sets the HTTP-only
        session cookie, which httpx keeps for subsequent calls.
        """
        data = await self._request("POST", "/login", json={"email": email, "password": password})
        return data["user"]

    async def register_user(
        self,
        nome: str,
        cognome: str,
        email: str,
        password: str,
        ruolo: str = "Dipendente",
    ) -> Dict[str, Any]:
        payload = {
            "nome": nome,
            "cognome": cognome,
            "email": email,
            "password": password,
            "ruolo": ruolo,
        }
        data = await self._request("POST", "/register", json=payload)
        return data["user"]

    async def verify_auth(self) -> Dict[str, Any]:
        """
        GET /auth/me.

        Never raises: an auth failure or an unreachable backend both mean
        "not authenticated" so the caller can route to its login flow.
        """
        try:
            return await self._request("GET", "/auth/me")
        except (AuthenticationError, AuthorizationError, TransportError) as exc:
            logger.warning("Session check failed: %s", exc)
            return {"authenticated": False, "user": None}

    async def logout(self) -> Dict[str, Any]:
        """
        POST /auth/logout. A failure is logged and reported as a local logout;
        the cookie jar is cleared either way.
        """
        try:
            return await self._request("POST", "/auth/logout")
        except LeaveDeskError as exc:
            logger.warning("Logout call failed: %s", exc)
            return {"message": "Logged out locally"}
        finally:
            if self._client is not None:
                self._client.cookies.clear()

    # ---- Categories ----

    async def list_categories(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/categorie")
        return data.get("data", [])

    async def create_category(self, categoria_id: int, descrizione: str) -> Dict[str, Any]:
        return await self._request(
            "POST", "/categorie", json={"categoriaId": categoria_id, "descrizione": descrizione}
        )

    async def update_category(self, categoria_id: int, descrizione: str) -> Dict[str, Any]:
        return await self._request(
            "PUT", f"/categorie/{categoria_id}", json={"descrizione": descrizione}
        )

    async def delete_category(self, categoria_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/categorie/{categoria_id}")

    # ---- Requests ----

    async def list_requests(
        self,
        utente_id: Optional[int] = None,
        stato: Optional[str] = None,
        categoria_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params = _drop_empty({"utenteId": utente_id, "stato": stato, "categoriaId": categoria_id})
        data = await self._request("GET", "/permessi", params=params)
        return data.get("data", [])

    async def create_request(
        self,
        data_inizio: str,
        data_fine: str,
        categoria_id: int,
        utente_id: Optional[int] = None,
        motivazione: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = _drop_empty(
            {
                "dataInizio": data_inizio,
                "dataFine": data_fine,
                "categoriaId": categoria_id,
                "motivazione": motivazione,
                "utenteId": utente_id,
            }
        )
        return await self._request("POST", "/permessi", json=payload)

    async def update_request(self, richiesta_id: int, **changes: Any) -> Dict[str, Any]:
        """PUT /permessi/:id with any of dataInizio, dataFine, categoriaId, motivazione."""
        return await self._request("PUT", f"/permessi/{richiesta_id}", json=changes)

    async def evaluate_request(
        self, richiesta_id: int, stato: str, utente_valutazione_id: Optional[int] = None
    ) -> Dict[str, Any]:
        payload = _drop_empty({"stato": stato, "utenteValutazioneId": utente_valutazione_id})
        return await self._request("PUT", f"/permessi/{richiesta_id}/valuta", json=payload)

    async def delete_request(self, richiesta_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/permessi/{richiesta_id}")

    async def statistics(
        self,
        utente_id: Optional[int] = None,
        mese: Optional[int] = None,
        anno: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params = _drop_empty({"utenteId": utente_id, "mese": mese, "anno": anno})
        data = await self._request("GET", "/permessi/statistiche", params=params)
        return data.get("data", [])


def get_api_client() -> LeaveDeskClient:
    """Return the process-wide singleton LeaveDeskClient."""
    return LeaveDeskClient.get()


# -----------------------------
# Simple CLI test hook
# -----------------------------


async def _demo() -> None:
    """
    Quick manual check against a running backend:

        python -m leavedesk.api_client
    """
    client = LeaveDeskClient.get()

    print(f"Base URL: {client.base_url}")
    print("Checking /health ...")
    print(await client.health())
    print("Session:", await client.verify_auth())

    await client.close()


if __name__ == "__main__":
    asyncio.run(_demo())
