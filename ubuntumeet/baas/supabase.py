import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
from pydantic import BaseModel

from ubuntumeet.database.models.profile_models import AuthUser

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"
USER_UPDATED = "USER_UPDATED"


class BaaSError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user: AuthUser


AuthListener = Callable[[str, Optional[AuthSession]], None]


class AuthSubscription:
    """Handle for one auth state listener; call ``unsubscribe`` to detach it."""

    def __init__(self, client: "SupabaseClient", listener: AuthListener):
        self._client = client
        self.listener = listener

    @property
    def active(self) -> bool:
        return self.listener in self._client._listeners

    def unsubscribe(self):
        if self.active:
            self._client._listeners.remove(self.listener)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        for key in ("msg", "message", "error_description", "error"):
            if data.get(key):
                return str(data[key])
    return f"HTTP {response.status_code}"


class SupabaseClient:
    """Async client for Supabase auth (GoTrue) and table (PostgREST) calls.

    One instance per application; the owner must call ``aclose``.
    """

    def __init__(self, url: str, anon_key: str, http_client: Optional[httpx.AsyncClient] = None):
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self._http = http_client or httpx.AsyncClient(timeout=15.0)
        self._listeners: List[AuthListener] = []

    async def aclose(self):
        self._listeners.clear()
        await self._http.aclose()

    # --- Auth state ---
    def on_auth_state_change(self, listener: AuthListener) -> AuthSubscription:
        self._listeners.append(listener)
        return AuthSubscription(self, listener)

    def _emit(self, event: str, session: Optional[AuthSession]):
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:
                logger.exception(f"Auth listener failed on {event}")

    async def _request(self, method: str, path: str, access_token: Optional[str] = None, **kwargs) -> httpx.Response:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token or self.anon_key}",
        }
        headers.update(kwargs.pop("headers", {}))
        try:
            response = await self._http.request(method, f"{self.url}{path}", headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise BaaSError(f"Supabase request failed: {e}") from e
        if response.is_error:
            raise BaaSError(_error_message(response), response.status_code)
        return response

    # --- Auth ---
    async def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> Tuple[AuthUser, Optional[AuthSession]]:
        payload: Dict[str, Any] = {"email": email, "password": password}
        if full_name:
            payload["data"] = {"full_name": full_name}
        response = await self._request("POST", "/auth/v1/signup", json=payload)
        data = response.json()

        # Without e-mail auto-confirm GoTrue returns the bare user
        if data.get("access_token"):
            session = AuthSession(**data)
            self._emit(SIGNED_IN, session)
            return session.user, session
        return AuthUser(**data.get("user", data)), None

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = AuthSession(**response.json())
        self._emit(SIGNED_IN, session)
        return session

    async def refresh_session(self, refresh_token: str) -> AuthSession:
        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        session = AuthSession(**response.json())
        self._emit(TOKEN_REFRESHED, session)
        return session

    async def get_user(self, access_token: str) -> AuthUser:
        response = await self._request("GET", "/auth/v1/user", access_token)
        return AuthUser(**response.json())

    async def update_user(self, access_token: str, attributes: dict) -> AuthUser:
        response = await self._request("PUT", "/auth/v1/user", access_token, json=attributes)
        user = AuthUser(**response.json())
        self._emit(USER_UPDATED, None)
        return user

    async def sign_out(self, access_token: str):
        try:
            await self._request("POST", "/auth/v1/logout", access_token)
        finally:
            self._emit(SIGNED_OUT, None)

    # --- Tables ---
    async def select(
        self,
        table: str,
        access_token: str,
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[dict]:
        params = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)
        response = await self._request("GET", f"/rest/v1/{table}", access_token, params=params)
        return response.json()

    async def insert(self, table: str, access_token: str, row: dict) -> List[dict]:
        response = await self._request(
            "POST",
            f"/rest/v1/{table}",
            access_token,
            json=row,
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def update(self, table: str, access_token: str, values: dict, filters: Dict[str, Any]) -> List[dict]:
        params = {column: f"eq.{value}" for column, value in filters.items()}
        response = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            access_token,
            params=params,
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return response.json()
