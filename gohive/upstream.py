from typing import List, Mapping, Optional, Tuple

import anyio
import httpx
from starlette.responses import Response

from .errors import UpstreamError
from .log_sanitizer import describe_body_for_log, sanitize_headers_for_log, truncate_for_log
from .logging_config import logger
from .routing.mapper import ProxyRoute
from .settings import settings


HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)

# Recomputed by the HTTP stack on each hop.
_REQUEST_SKIP_HEADERS = HOP_BY_HOP_HEADERS | {"host", "content-length"}
# The body is re-emitted decoded and fully buffered.
_RESPONSE_SKIP_HEADERS = HOP_BY_HOP_HEADERS | {"content-length", "content-encoding"}

HeaderList = List[Tuple[str, str]]


def _header_pairs(headers) -> HeaderList:
    if isinstance(headers, httpx.Headers):
        return list(headers.multi_items())
    # starlette Headers.items() already yields one pair per raw header line.
    return list(headers.items())


def _connection_tokens(pairs: HeaderList) -> set[str]:
    value = ",".join(v for k, v in pairs if k.lower() == "connection")
    return {token.strip().lower() for token in value.split(",") if token.strip()}


def _filter(pairs: HeaderList, skip: frozenset) -> HeaderList:
    skip = skip | _connection_tokens(pairs)
    return [(name, value) for name, value in pairs if name.lower() not in skip]


def filter_request_headers(headers: Mapping[str, str]) -> HeaderList:
    """
    Drop hop-by-hop headers (including any listed in `Connection`) and
    `Host`, so the upstream sees its own host name. Repeated headers are
    kept as separate pairs.
    """
    return _filter(_header_pairs(headers), _REQUEST_SKIP_HEADERS)


def filter_response_headers(headers: httpx.Headers) -> HeaderList:
    return _filter(_header_pairs(headers), _RESPONSE_SKIP_HEADERS)


async def forward_request(
    *,
    client: httpx.AsyncClient,
    route: ProxyRoute,
    method: str,
    path: str,
    query: str,
    headers: Mapping[str, str],
    body: bytes,
    timeout: Optional[float] = None,
) -> Response:
    """
    Relay one request to the route's upstream and relay the answer back.

    Behaviour:
    - the path is rewritten once according to the route;
    - the upstream body is read chunk by chunk into a buffer so it can be
      logged before the status code and headers are copied over;
    - the whole exchange must finish within `timeout` seconds
      (PROXY_TIMEOUT_SECONDS by default), however slowly the body trickles;
    - connection failures and timeouts raise UpstreamError with a generic
      message. There is a single attempt and no retry.
    """
    url = route.upstream_url(path, query)
    outgoing_headers = filter_request_headers(headers)
    deadline = settings.proxy_timeout_seconds if timeout is None else timeout
    logger.info("Proxying %s %s -> %s", method, path, url)
    logger.debug(
        "Proxy request headers: %s",
        sanitize_headers_for_log(httpx.Headers(outgoing_headers)),
    )
    if body:
        logger.debug("Proxy request body: %s", describe_body_for_log(body))

    buffer = bytearray()
    try:
        with anyio.fail_after(deadline):
            async with client.stream(
                method,
                url,
                headers=outgoing_headers,
                content=body or None,
            ) as resp:
                async for chunk in resp.aiter_bytes():
                    if chunk:
                        buffer.extend(chunk)
                status_code = resp.status_code
                response_headers = filter_response_headers(resp.headers)
    except (httpx.TimeoutException, TimeoutError) as exc:
        logger.error("Proxy timeout for %s %s -> %s: %r", method, path, url, exc)
        raise UpstreamError("Proxy error: upstream timed out") from exc
    except httpx.HTTPError as exc:
        logger.error("Proxy error for %s %s -> %s: %r", method, path, url, exc)
        raise UpstreamError("Proxy error: upstream unavailable") from exc

    logger.info("Received response from %s for %s: %s", route.target, path, status_code)
    logger.debug(
        "Upstream response body: %s",
        truncate_for_log(buffer.decode("utf-8", errors="replace")),
    )

    response = Response(content=bytes(buffer), status_code=status_code)
    # Response() sets its own content-length; copy the rest verbatim,
    # keeping repeated headers such as set-cookie.
    for name, value in response_headers:
        response.headers.append(name, value)
    return response


__all__ = [
    "HOP_BY_HOP_HEADERS",
    "filter_request_headers",
    "filter_response_headers",
    "forward_request",
]
