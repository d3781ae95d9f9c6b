"""
Path-prefix route table for the gateway.

Each entry maps a path prefix onto an upstream service, optionally
rewriting the path, and says whether the session token must be checked
before forwarding.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from gohive.settings import Settings

PUBLIC_PATHS: Tuple[str, ...] = (
    "/api/register/email",
    "/api/register/oauth",
    "/api/login",
)


def matches_prefix(path: str, prefix: str) -> bool:
    """
    True when `path` is `prefix` itself or continues it with a new segment,
    so `/api/login` matches `/api/login/x` but not `/api/loginx`.
    """
    prefix = prefix.rstrip("/") or "/"
    if prefix == "/":
        return True
    return path == prefix or path.startswith(prefix + "/")


@dataclass(frozen=True)
class ProxyRoute:
    """
    Single route table entry.

    `rewrite` is a (regex, replacement) pair applied once to the incoming
    path; without it the path is forwarded unchanged.
    """

    prefix: str
    target: str
    rewrite: Optional[Tuple[str, str]] = None
    requires_auth: bool = True
    _pattern: Optional[re.Pattern[str]] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.rewrite is not None:
            object.__setattr__(self, "_pattern", re.compile(self.rewrite[0]))

    def rewrite_path(self, path: str) -> str:
        if self._pattern is None or self.rewrite is None:
            return path
        return self._pattern.sub(self.rewrite[1], path, count=1)

    def upstream_url(self, path: str, query: str = "") -> str:
        url = self.target.rstrip("/") + self.rewrite_path(path)
        if query:
            url = f"{url}?{query}"
        return url


def prefix_rewrite(prefix: str, replacement: str) -> Tuple[str, str]:
    """Rewrite rule replacing a leading prefix, e.g. `/api/login` -> `/login`."""
    return (f"^{re.escape(prefix)}", replacement)


class RouteTable:
    """Ordered route list; the first entry whose prefix matches wins."""

    def __init__(
        self,
        routes: Iterable[ProxyRoute],
        *,
        public_paths: Sequence[str] = PUBLIC_PATHS,
    ) -> None:
        self.routes: List[ProxyRoute] = list(routes)
        self.public_paths: Tuple[str, ...] = tuple(public_paths)

    def match(self, path: str) -> Optional[ProxyRoute]:
        for route in self.routes:
            if matches_prefix(path, route.prefix):
                return route
        return None

    def is_public(self, path: str) -> bool:
        return any(matches_prefix(path, public) for public in self.public_paths)

    def needs_token(self, route: ProxyRoute, path: str) -> bool:
        return route.requires_auth and not self.is_public(path)


def build_default_routes(settings: Settings) -> RouteTable:
    users = settings.user_service_url
    posts = settings.post_service_url
    mentor = settings.mentor_service_url
    return RouteTable(
        [
            ProxyRoute(
                "/api/register/email",
                users,
                prefix_rewrite("/api/register/email", "/register/email"),
                requires_auth=False,
            ),
            ProxyRoute(
                "/api/register/oauth",
                users,
                prefix_rewrite("/api/register/oauth", "/register/oauth"),
                requires_auth=False,
            ),
            ProxyRoute(
                "/api/login",
                users,
                prefix_rewrite("/api/login", "/login"),
                requires_auth=False,
            ),
            ProxyRoute("/api/logout", users, prefix_rewrite("/api/logout", "/logout")),
            ProxyRoute("/api/users", users, prefix_rewrite("/api/users", "/users")),
            ProxyRoute("/api/goals", posts, prefix_rewrite("/api/goals", "/goals")),
            ProxyRoute("/api/events", posts, prefix_rewrite("/api/events", "/events")),
            ProxyRoute("/api/generate-goal", mentor),
            ProxyRoute("/api/generate-event", mentor),
        ]
    )


__all__ = [
    "PUBLIC_PATHS",
    "ProxyRoute",
    "RouteTable",
    "build_default_routes",
    "matches_prefix",
    "prefix_rewrite",
]
