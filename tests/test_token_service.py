import datetime

import pytest

from gohive.errors import ExpiredOrRevokedToken, InvalidToken
from gohive.services.jwt_auth_service import create_access_token
from gohive.services.token_redis_service import TOKEN_KEY, TokenRedisService


@pytest.mark.asyncio
async def test_issue_then_validate_returns_subject(fake_redis):
    service = TokenRedisService(fake_redis)

    token = await service.issue("user-7")

    assert await service.validate(token) == "user-7"
    key = TOKEN_KEY.format(token=token)
    assert fake_redis.data[key] == "user-7"
    assert fake_redis.ttls[key] == 3600


@pytest.mark.asyncio
async def test_revoked_token_is_rejected(fake_redis):
    service = TokenRedisService(fake_redis)
    token = await service.issue("user-7")

    assert await service.revoke(token) is True
    with pytest.raises(ExpiredOrRevokedToken) as exc_info:
        await service.validate(token)

    assert exc_info.value.message == "Invalid or expired token"
    assert await service.revoke(token) is False


@pytest.mark.asyncio
async def test_token_missing_from_store_is_rejected(fake_redis):
    service = TokenRedisService(fake_redis)
    token = create_access_token("user-7")

    with pytest.raises(ExpiredOrRevokedToken):
        await service.validate(token)


@pytest.mark.asyncio
async def test_expired_signature_is_rejected_even_when_stored(fake_redis):
    service = TokenRedisService(fake_redis)
    past = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(hours=2)
    token = await service.issue("user-7", now=past)

    with pytest.raises(InvalidToken) as exc_info:
        await service.validate(token)

    assert exc_info.value.message == "Invalid token"


@pytest.mark.asyncio
async def test_subject_mismatch_with_store_is_rejected(fake_redis):
    service = TokenRedisService(fake_redis)
    token = create_access_token("user-7")
    await fake_redis.set(TOKEN_KEY.format(token=token), "someone-else")

    with pytest.raises(InvalidToken):
        await service.validate(token)


@pytest.mark.asyncio
async def test_garbage_token_in_store_is_invalid(fake_redis):
    service = TokenRedisService(fake_redis)
    await fake_redis.set(TOKEN_KEY.format(token="not-a-jwt"), "user-7")

    with pytest.raises(InvalidToken):
        await service.validate("not-a-jwt")
