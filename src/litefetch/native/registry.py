"""Built-in resolvers addressed as ``native://host?key=value``."""

from collections.abc import Awaitable, Callable
from urllib.parse import parse_qsl, urlsplit

from litefetch.errors import FetchError, create_error, get_error_factory

NATIVE_SCHEME = "native://"

NativeResolver = Callable[[dict[str, str]], Awaitable[str]]


def is_native(url: str) -> bool:
    """Whether ``url`` uses the reserved native scheme."""
    return url[: len(NATIVE_SCHEME)].lower() == NATIVE_SCHEME


def parse_native_url(url: str) -> tuple[str, dict[str, str]]:
    """Split a native URL into a lower-cased host and its query args.

    Arg names are lower-cased, values URL-decoded; the last repeated
    name wins.
    """
    parts = urlsplit(url.strip())
    host = (parts.netloc or parts.path.strip("/")).lower()
    args = {k.lower(): v for k, v in parse_qsl(parts.query, keep_blank_values=True)}
    return host, args


class NativeResolverRegistry:
    """Host name -> async resolver returning a raw response body."""

    def __init__(self) -> None:
        self._resolvers: dict[str, NativeResolver] = {}

    def register(self, host: str, resolver: NativeResolver) -> None:
        """Register (or replace) the resolver for ``host``."""
        self._resolvers[host.strip().lower()] = resolver

    def unregister(self, host: str) -> bool:
        return self._resolvers.pop(host.strip().lower(), None) is not None

    def hosts(self) -> list[str]:
        return sorted(self._resolvers)

    def is_native(self, url: str) -> bool:
        return is_native(url)

    async def resolve(self, url: str) -> str:
        """Dispatch a native URL to its resolver.

        Args:
            url: Resolved ``native://`` URL

        Returns:
            Raw body, handled like an HTTP response body

        Raises:
            FetchError(NATIVE_UNKNOWN): No resolver for the host
            FetchError(NATIVE_FAILED): The resolver raised a plain exception
        """
        host, args = parse_native_url(url)
        resolver = self._resolvers.get(host)
        if resolver is None:
            raise create_error("NATIVE_UNKNOWN", host=host, url=url)

        try:
            result = await resolver(args)
        except FetchError:
            raise
        except Exception as e:
            # Resolvers doing their own HTTP keep network classification
            mapped = get_error_factory().from_exception(e, url=url)
            if mapped.is_network:
                raise mapped from e
            raise create_error(
                "NATIVE_FAILED", host=host, url=url, detail=f"{type(e).__name__}: {e}"
            ) from e
        return "" if result is None else str(result)
