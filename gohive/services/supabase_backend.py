"""
Adapter over the Supabase client used as the managed auth/database backend.

The Supabase SDK is synchronous, so every call runs in a worker thread.
Failures reported by the backend are converted into BackendError carrying
the backend's message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, List, Optional, TypeVar

import anyio
from supabase import Client, create_client

from gohive.errors import BackendError
from gohive.logging_config import logger
from gohive.settings import settings

T = TypeVar("T")


@dataclass
class AuthUser:
    """Identity record of the backend's auth service."""

    id: str
    email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_sdk(cls, user: Any) -> "AuthUser":
        return cls(
            id=str(user.id),
            email=getattr(user, "email", None),
            metadata=dict(getattr(user, "user_metadata", None) or {}),
        )


def _backend_message(exc: Exception) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__


class SupabaseBackend:
    """
    Thin async facade: auth primitives plus generic select/insert on a
    schema-qualified table.
    """

    users_page_size = 1000

    def __init__(self, client_factory: Callable[[], Client]):
        self._client_factory = client_factory
        self.client = client_factory()

    async def _call(self, action: str, func: Callable[[], T]) -> T:
        try:
            return await anyio.to_thread.run_sync(func)
        except Exception as exc:
            logger.warning("Supabase %s failed: %s", action, exc)
            raise BackendError(_backend_message(exc)) from exc

    # Auth ---------------------------------------------------------------

    async def email_exists(self, email: str) -> bool:
        """Scan the auth users page by page for a case-insensitive match."""
        wanted = email.strip().lower()
        page = 1
        while True:
            users = await self._call(
                "list_users",
                partial(
                    self.client.auth.admin.list_users,
                    page=page,
                    per_page=self.users_page_size,
                ),
            )
            if any((getattr(u, "email", None) or "").lower() == wanted for u in users):
                return True
            if len(users) < self.users_page_size:
                return False
            page += 1

    async def create_auth_user(
        self, email: str, password: str, *, phone: Optional[str] = None
    ) -> AuthUser:
        attributes: Dict[str, Any] = {
            "email": email,
            "password": password,
            "email_confirm": True,
        }
        if phone:
            attributes["phone"] = phone
        response = await self._call(
            "create_user", lambda: self.client.auth.admin.create_user(attributes)
        )
        return AuthUser.from_sdk(response.user)

    async def delete_auth_user(self, user_id: str) -> None:
        await self._call("delete_user", lambda: self.client.auth.admin.delete_user(user_id))

    async def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        # A throwaway client keeps the user session off the service-role client.
        def _sign_in():
            return self._client_factory().auth.sign_in_with_password(
                {"email": email, "password": password}
            )

        response = await self._call("sign_in_with_password", _sign_in)
        if response.user is None:
            raise BackendError("Invalid login credentials")
        return AuthUser.from_sdk(response.user)

    async def get_user_for_token(self, access_token: str) -> AuthUser:
        response = await self._call(
            "get_user", lambda: self._client_factory().auth.get_user(access_token)
        )
        if response is None or response.user is None:
            raise BackendError("No user returned from Supabase")
        return AuthUser.from_sdk(response.user)

    # Tables -------------------------------------------------------------

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        schema: str = "public",
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        def _query():
            query = self.client.schema(schema).table(table).select(columns)
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            if limit is not None:
                query = query.limit(limit)
            return query.execute().data or []

        return await self._call(f"select {schema}.{table}", _query)

    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        schema: str = "public",
        filters: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        rows = await self.select(table, columns=columns, schema=schema, filters=filters, limit=1)
        return rows[0] if rows else None

    async def insert(
        self, table: str, row: Dict[str, Any], *, schema: str = "public"
    ) -> Dict[str, Any]:
        def _insert():
            return self.client.schema(schema).table(table).insert(row).execute().data or []

        rows = await self._call(f"insert {schema}.{table}", _insert)
        if not rows:
            raise BackendError(f"Insert into {schema}.{table} returned no rows")
        return rows[0]


_backend: Optional[SupabaseBackend] = None


def get_supabase_backend() -> SupabaseBackend:
    """Lazily build the process-wide backend from SUPABASE_URL / SUPABASE_SERVICE_KEY."""
    global _backend
    if _backend is None:
        if not settings.supabase_url or not settings.supabase_service_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be configured")
        _backend = SupabaseBackend(
            lambda: create_client(settings.supabase_url, settings.supabase_service_key)
        )
        logger.info("Supabase backend initialised for %s", settings.supabase_url)
    return _backend


__all__ = ["AuthUser", "SupabaseBackend", "get_supabase_backend"]
