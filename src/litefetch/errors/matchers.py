"""Error matchers for converting exceptions to FetchErrors."""

import json
from typing import Any, cast

import httpx

from .errors import ErrorMatcher, MatchResult


def _request_url(error: httpx.RequestError) -> str | None:
    # httpx raises RuntimeError when the exception was built without a request
    try:
        return str(error.request.url)
    except RuntimeError:
        return None


class TimeoutErrorMatcher(ErrorMatcher):
    """Matches connect, read, write and pool timeouts."""

    def matches(self, error: BaseException) -> bool:
        """Check if error is a timeout error.

        Args:
            error: Exception to check

        Returns:
            True if error is a timeout error
        """
        return isinstance(error, (httpx.TimeoutException, TimeoutError))

    def extract(self, error: BaseException) -> MatchResult:
        """Extract timeout error info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with FETCH_TIMEOUT code
        """
        context: dict[str, Any] = {}
        if isinstance(error, httpx.TimeoutException):
            url = _request_url(error)
            if url:
                context["url"] = url
        return MatchResult(code="FETCH_TIMEOUT", context=context)


class HttpStatusErrorMatcher(ErrorMatcher):
    """Matches non-success responses raised by raise_for_status()."""

    def matches(self, error: BaseException) -> bool:
        return isinstance(error, httpx.HTTPStatusError)

    def extract(self, error: BaseException) -> MatchResult:
        status_error = cast(httpx.HTTPStatusError, error)
        status = status_error.response.status_code
        return MatchResult(
            code="HTTP_STATUS",
            context={"url": str(status_error.request.url), "status_code": status},
            # Client errors will not fix themselves on retry
            retryable=status >= 500 or status == 429,
        )


class RequestErrorMatcher(ErrorMatcher):
    """Matches transport failures (DNS, connect, TLS, proxy, protocol)."""

    def matches(self, error: BaseException) -> bool:
        return isinstance(error, httpx.RequestError)

    def extract(self, error: BaseException) -> MatchResult:
        context: dict[str, Any] = {"detail": f"{type(error).__name__}: {error}"}
        url = _request_url(cast(httpx.RequestError, error))
        if url:
            context["url"] = url
        return MatchResult(code="FETCH_FAILED", context=context)


class JsonDecodeErrorMatcher(ErrorMatcher):
    """Matches malformed JSON bodies."""

    def matches(self, error: BaseException) -> bool:
        return isinstance(error, json.JSONDecodeError)

    def extract(self, error: BaseException) -> MatchResult:
        return MatchResult(
            code="PARSE_FAILED",
            context={"response_format": "json", "detail": str(error)},
        )


class GenericErrorMatcher(ErrorMatcher):
    """Fallback matcher for any exception."""

    def matches(self, error: BaseException) -> bool:
        return True

    def extract(self, error: BaseException) -> MatchResult:
        return MatchResult(
            code="INTERNAL_ERROR",
            context={"detail": f"{type(error).__name__}: {error}"},
            retryable=False,
        )


class ErrorMatcherChain:
    """Ordered chain of matchers. First match wins."""

    def __init__(self) -> None:
        """Initialize matcher chain with built-in matchers."""
        self.matchers: list[ErrorMatcher] = []
        self._load_builtin_matchers()

    def match(self, error: BaseException) -> MatchResult:
        """Find first matching matcher and extract result.

        Args:
            error: Exception to match

        Returns:
            MatchResult from first matching matcher
        """
        for matcher in self.matchers:
            if matcher.matches(error):
                return matcher.extract(error)

        # Unreachable while GenericErrorMatcher is last
        return MatchResult(
            code="INTERNAL_ERROR",
            context={"detail": str(error)},
            retryable=False,
        )

    def _load_builtin_matchers(self) -> None:
        """Load built-in matchers in priority order."""
        # TimeoutException is a RequestError subclass, so it goes first
        self.matchers = [
            TimeoutErrorMatcher(),
            HttpStatusErrorMatcher(),
            RequestErrorMatcher(),
            JsonDecodeErrorMatcher(),
            GenericErrorMatcher(),  # Fallback - must be last
        ]
