"""
In-memory stand-ins for Redis and the Supabase backend, plus helpers for
issuing tokens and building mock HTTP clients.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any, Callable, Dict, List, Optional

import httpx

from gohive.errors import BackendError
from gohive.services.supabase_backend import AuthUser
from gohive.services.token_redis_service import TokenRedisService


class InMemoryRedis:
    """Implements the handful of string commands the token store uses."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, Optional[int]] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: Any, ex: Optional[int] = None) -> bool:
        self.data[key] = str(value)
        self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if key in self.data:
                del self.data[key]
                self.ttls.pop(key, None)
                removed += 1
        return removed


class InMemoryBackend:
    """
    Fake of SupabaseBackend backed by dicts.

    Tables are keyed by (schema, table). Inserts into any table listed in
    `failing_tables` raise BackendError, which lets tests exercise the
    rollback paths.
    """

    def __init__(self) -> None:
        self.auth_users: dict[str, AuthUser] = {}
        self.passwords: dict[str, str] = {}
        self.oauth_sessions: dict[str, AuthUser] = {}
        self.tables: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.failing_tables: set[tuple[str, str]] = set()
        self.failing_selects: set[tuple[str, str]] = set()
        self._ids = itertools.count(1)

    def seed(self, table: str, *rows: dict[str, Any], schema: str = "public") -> None:
        self.tables.setdefault((schema, table), []).extend(dict(row) for row in rows)

    def rows(self, table: str, schema: str = "public") -> list[dict[str, Any]]:
        return self.tables.get((schema, table), [])

    async def email_exists(self, email: str) -> bool:
        wanted = email.strip().lower()
        return any((u.email or "").lower() == wanted for u in self.auth_users.values())

    async def create_auth_user(
        self, email: str, password: str, *, phone: Optional[str] = None
    ) -> AuthUser:
        user = AuthUser(id=f"user-{next(self._ids)}", email=email)
        self.auth_users[user.id] = user
        self.passwords[email] = password
        return user

    async def delete_auth_user(self, user_id: str) -> None:
        user = self.auth_users.pop(user_id, None)
        if user is not None and user.email:
            self.passwords.pop(user.email, None)

    async def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        if self.passwords.get(email) != password:
            raise BackendError("Invalid login credentials")
        for user in self.auth_users.values():
            if user.email == email:
                return user
        raise BackendError("Invalid login credentials")

    async def get_user_for_token(self, access_token: str) -> AuthUser:
        user = self.oauth_sessions.get(access_token)
        if user is None:
            raise BackendError("invalid JWT: unable to parse or verify signature")
        return user

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        schema: str = "public",
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        if (schema, table) in self.failing_selects:
            raise BackendError(f"relation {schema}.{table} is unavailable")
        rows = [
            dict(row)
            for row in self.rows(table, schema)
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        return rows[:limit] if limit is not None else rows

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
        if (schema, table) in self.failing_tables:
            raise BackendError(f"insert into {schema}.{table} violates a constraint")
        stored = dict(row)
        stored.setdefault("id", next(self._ids))
        self.tables.setdefault((schema, table), []).append(stored)
        return stored


def issue_token(redis: InMemoryRedis, user_id: str) -> str:
    """Issue a live session token from synchronous test code."""
    return asyncio.run(TokenRedisService(redis).issue(user_id))


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def mock_http_client_override(
    handler: Callable[[httpx.Request], httpx.Response], **client_kwargs: Any
):
    """
    Build a FastAPI dependency override yielding an AsyncClient whose
    requests are answered by `handler`.
    """

    async def _override():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport, timeout=30.0, **client_kwargs) as client:
            yield client

    return _override


def chat_completion(content: str) -> dict[str, Any]:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }
