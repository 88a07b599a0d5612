"""Raw HTTP fetch returning a decoded body."""

import codecs
from collections.abc import Mapping

import httpx

from litefetch.errors import create_error, get_error_factory
from litefetch.types import HttpMethod

from .pool import ClientPool


def decode_body(content: bytes, encoding: str | None = None) -> str:
    """Decode response bytes as UTF-8 or the declared encoding.

    Undecodable bytes are replaced rather than failing the step.

    Raises:
        FetchError(PARSE_FAILED): The declared encoding is unknown
    """
    name = (encoding or "utf-8").strip() or "utf-8"
    try:
        codecs.lookup(name)
    except LookupError as e:
        raise create_error(
            "PARSE_FAILED",
            response_format=name,
            detail=f"Unknown response encoding '{name}'",
        ) from e
    return content.decode(name, errors="replace")


async def fetch_raw(
    pool: ClientPool,
    method: HttpMethod | str,
    url: str,
    body: str = "",
    headers: Mapping[str, str] | None = None,
    encoding: str | None = None,
    proxy: str | None = None,
) -> str:
    """Issue one request and return its decoded body.

    The client is taken from the pool when the request starts, so a pool
    reset between scheduling and sending is honored.

    Args:
        pool: Client pool
        method: GET, POST or HEAD (anything else is sent as GET)
        url: Resolved URL
        body: Resolved body; sent as UTF-8 JSON on POST when non-empty
        headers: Resolved request headers
        encoding: Response encoding, UTF-8 when None
        proxy: Resolved proxy address, empty for the default client

    Returns:
        Decoded body ("" for HEAD)

    Raises:
        FetchError: HTTP_STATUS for non-2xx, FETCH_TIMEOUT / FETCH_FAILED for
            transport failures
    """
    verb = HttpMethod.parse(method)
    request_headers = dict(headers or {})
    content: bytes | None = None
    if verb == HttpMethod.POST and body:
        content = body.encode("utf-8")
        request_headers.setdefault("Content-Type", "application/json; charset=utf-8")

    client = pool.get(proxy)
    try:
        response = await client.request(
            verb.value, url, content=content, headers=request_headers
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise get_error_factory().from_exception(e, url=url) from e

    if verb == HttpMethod.HEAD:
        return ""
    return decode_body(response.content, encoding)
