"""
Catch-all gateway route: match the path against the route table, check the
session token where the route requires it, then relay to the upstream.
"""

import httpx
from fastapi import APIRouter, Depends, Request, Response

from gohive.deps import get_http_client, get_token_service
from gohive.errors import NotFoundError
from gohive.jwt_auth import authenticate_request
from gohive.logging_config import logger
from gohive.routing.mapper import RouteTable
from gohive.services.token_redis_service import TokenRedisService
from gohive.upstream import forward_request

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]

router = APIRouter(tags=["gateway"])


def get_route_table(request: Request) -> RouteTable:
    return request.app.state.route_table


@router.api_route("/{full_path:path}", methods=PROXY_METHODS, include_in_schema=False)
async def proxy(
    full_path: str,
    request: Request,
    table: RouteTable = Depends(get_route_table),
    client: httpx.AsyncClient = Depends(get_http_client),
    token_service: TokenRedisService = Depends(get_token_service),
) -> Response:
    path = request.url.path
    route = table.match(path)
    if route is None:
        logger.info("No gateway route for %s %s", request.method, path)
        raise NotFoundError()

    if table.needs_token(route, path):
        await authenticate_request(
            request, request.headers.get("authorization"), token_service
        )

    body = await request.body()
    return await forward_request(
        client=client,
        route=route,
        method=request.method,
        path=path,
        query=request.url.query,
        headers=request.headers,
        body=body,
    )


__all__ = ["get_route_table", "router"]
