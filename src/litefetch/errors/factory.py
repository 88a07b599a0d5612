"""Turns codes and raw exceptions into FetchErrors."""

from typing import Any

from .errors import FetchError
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry


class ErrorFactory:
    """Builds FetchErrors from registry codes or from arbitrary exceptions."""

    def __init__(
        self,
        registry: ErrorRegistry | None = None,
        matcher_chain: ErrorMatcherChain | None = None,
    ):
        self.registry = registry or ErrorRegistry()
        self.matcher_chain = matcher_chain or ErrorMatcherChain()

    def from_exception(
        self,
        error: BaseException,
        step_id: str | None = None,
        instance_id: str | None = None,
        url: str | None = None,
    ) -> FetchError:
        """Classify ``error`` and attach step/instance/url context.

        A FetchError keeps its code and only gains missing context. Anything
        else goes through the matcher chain; the first matching matcher
        picks the code and may override retryability.

        Args:
            error: Raised exception
            step_id: Step that was running
            instance_id: Instance key (id plus target suffix)
            url: Resolved request URL, used when the error carries none

        Returns:
            FetchError chained to ``error``
        """
        if isinstance(error, FetchError):
            return error.with_context(step_id=step_id, instance_id=instance_id, url=url)

        match = self.matcher_chain.match(error)
        extra = {"step_id": step_id, "instance_id": instance_id}
        context = {**match.context, **{k: v for k, v in extra.items() if v}}
        if url:
            context.setdefault("url", url)

        result = self.registry.create(code=match.code, context=context)
        if match.retryable is not None:
            result.retryable = match.retryable
        result.__cause__ = error
        return result

    def create(self, code: str, context: dict[str, Any] | None = None, **kwargs: Any) -> FetchError:
        """Build the registered error ``code`` with interpolation context."""
        return self.registry.create(code=code, context={**(context or {}), **kwargs})


_default_factory: ErrorFactory | None = None


def get_error_factory() -> ErrorFactory:
    """Process-wide factory over the built-in registry."""
    global _default_factory  # noqa: PLW0603
    if _default_factory is None:
        _default_factory = ErrorFactory()
    return _default_factory


def create_error(code: str, **context: Any) -> FetchError:
    """Shorthand for ``get_error_factory().create(code, context)``.

    Example:
        raise create_error("HTTP_STATUS", url=url, status_code=503)
    """
    return get_error_factory().create(code, context)
