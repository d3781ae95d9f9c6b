from typing import AsyncIterator

import httpx
from fastapi import Depends, Request
from redis.asyncio import Redis

from .redis_client import get_redis_client
from .services.completion_service import CompletionClient
from .services.conversation_store import ConversationStore
from .services.mentor_service import MentorService
from .services.post_service import PostService
from .services.supabase_backend import SupabaseBackend, get_supabase_backend
from .services.token_redis_service import TokenRedisService
from .services.user_service import UserService
from .settings import settings


async def get_redis() -> Redis:
    """
    FastAPI dependency that provides the shared Redis client.

    Tests override this dependency with an in-memory fake.
    """
    return get_redis_client()


async def get_token_service(redis: Redis = Depends(get_redis)) -> TokenRedisService:
    return TokenRedisService(redis)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """
    Short-lived AsyncClient for one proxied call; no pooling across requests.
    """
    async with httpx.AsyncClient(timeout=settings.proxy_timeout_seconds) as client:
        yield client


async def get_backend() -> SupabaseBackend:
    return get_supabase_backend()


async def get_completion_client() -> AsyncIterator[CompletionClient]:
    async with httpx.AsyncClient(
        base_url=settings.openai_base_url,
        timeout=settings.openai_timeout_seconds,
    ) as client:
        yield CompletionClient(
            client,
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
        )


def get_conversation_store(request: Request) -> ConversationStore:
    """
    The conversation store lives on app.state so each app instance (and
    each test) gets its own.
    """
    return request.app.state.conversation_store


async def get_user_service(
    backend: SupabaseBackend = Depends(get_backend),
    tokens: TokenRedisService = Depends(get_token_service),
) -> UserService:
    return UserService(backend, tokens)


async def get_post_service(backend: SupabaseBackend = Depends(get_backend)) -> PostService:
    return PostService(backend)


async def get_mentor_service(
    store: ConversationStore = Depends(get_conversation_store),
    completions: CompletionClient = Depends(get_completion_client),
) -> MentorService:
    return MentorService(store, completions)
