"""Error registry for creating errors from templates."""

from typing import Any

from .errors import ErrorCategory, ErrorTemplate, FetchError


class ErrorRegistry:
    """Registry of error templates. Creates errors from templates + context."""

    def __init__(self) -> None:
        """Initialize error registry with built-in templates."""
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        """Get template by error code.

        Args:
            code: Error code to look up

        Returns:
            ErrorTemplate if found, None otherwise
        """
        return self._templates.get(code)

    def list_codes(self) -> list[str]:
        """List all registered error codes."""
        return list(self._templates.keys())

    def register(self, template: ErrorTemplate) -> None:
        """Add or replace an error template."""
        self._templates[template.code] = template

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        cause: FetchError | None = None,
    ) -> FetchError:
        """Create error instance from template + context.

        Args:
            code: Error code
            context: Context variables for template interpolation
            cause: Optional cause error

        Returns:
            FetchError instance

        Raises:
            ValueError: If error code not found
        """
        template = self.get_template(code)
        if not template:
            msg = f"Unknown error code: {code}"
            raise ValueError(msg)

        context = context or {}

        message = self._interpolate(template.message_template, context)
        # An explicit detail in the context overrides the template's canned text
        detail = context.get("detail") or self._interpolate(template.detail_template, context)
        suggestion = self._interpolate(template.suggestion_template, context)

        if message is None:
            message = f"Error {code}"

        status_code = context.get("status_code")

        return FetchError(
            code=template.code,
            category=template.category,
            message=message,
            detail=detail,
            suggestion=suggestion,
            retryable=template.default_retryable,
            step_id=context.get("step_id"),
            instance_id=context.get("instance_id"),
            url=context.get("url"),
            status_code=int(status_code) if status_code is not None else None,
            cause=cause,
        )

    def _interpolate(
        self,
        template: str | None,
        context: dict[str, Any],
    ) -> str | None:
        """Safe string interpolation.

        Args:
            template: Template string with {var} placeholders
            context: Context variables

        Returns:
            Interpolated string or None if template is None
        """
        if template is None:
            return None

        try:
            return template.format(**context)
        except (KeyError, IndexError):
            # Missing context variable - return template as-is
            return template

    def _load_builtin_templates(self) -> None:
        """Load hardcoded built-in templates."""
        # NETWORK errors
        self._templates["FETCH_FAILED"] = ErrorTemplate(
            code="FETCH_FAILED",
            category=ErrorCategory.NETWORK,
            message_template="Request to '{url}' failed",
            detail_template="The endpoint could not be reached",
            suggestion_template="Check the network connection, proxy settings and URL",
            default_retryable=True,
        )

        self._templates["FETCH_TIMEOUT"] = ErrorTemplate(
            code="FETCH_TIMEOUT",
            category=ErrorCategory.NETWORK,
            message_template="Request to '{url}' timed out",
            detail_template="The endpoint did not respond within the configured timeout",
            suggestion_template="Increase http.timeout_seconds or check the endpoint",
            default_retryable=True,
        )

        self._templates["FETCH_CANCELLED"] = ErrorTemplate(
            code="FETCH_CANCELLED",
            category=ErrorCategory.NETWORK,
            message_template="Shared request to '{url}' was cancelled",
            detail_template="The in-flight request this step was waiting on was cancelled",
            suggestion_template="Retry on the next refresh",
            default_retryable=True,
        )

        self._templates["HTTP_STATUS"] = ErrorTemplate(
            code="HTTP_STATUS",
            category=ErrorCategory.NETWORK,
            message_template="Request to '{url}' returned HTTP {status_code}",
            detail_template="Non-success responses are never extracted or cached",
            suggestion_template="Check the URL, credentials and upstream service status",
            default_retryable=True,
        )

        # PARSE errors
        self._templates["PARSE_FAILED"] = ErrorTemplate(
            code="PARSE_FAILED",
            category=ErrorCategory.PARSE,
            message_template="Failed to parse {response_format} response",
            detail_template="The response body is not valid {response_format}",
            suggestion_template="Check the step's response_format and the endpoint output",
        )

        self._templates["TRANSFORM_FAILED"] = ErrorTemplate(
            code="TRANSFORM_FAILED",
            category=ErrorCategory.PARSE,
            message_template="Transform '{function}' failed for '{var}'",
            detail_template="The transform could not be applied to the extracted value",
            suggestion_template="Check the transform arguments and the extracted data",
        )

        # NATIVE errors
        self._templates["NATIVE_UNKNOWN"] = ErrorTemplate(
            code="NATIVE_UNKNOWN",
            category=ErrorCategory.NATIVE,
            message_template="Unknown native resolver '{host}'",
            detail_template="No resolver is registered for native://{host}",
            suggestion_template="Register a resolver for this host or fix the step URL",
        )

        self._templates["NATIVE_FAILED"] = ErrorTemplate(
            code="NATIVE_FAILED",
            category=ErrorCategory.NATIVE,
            message_template="Native resolver '{host}' failed",
            detail_template="The built-in resolver raised an error",
            suggestion_template="Check the resolver arguments",
        )

        # TEMPLATE errors
        self._templates["TEMPLATE_INVALID"] = ErrorTemplate(
            code="TEMPLATE_INVALID",
            category=ErrorCategory.TEMPLATE,
            message_template="Invalid plugin template",
            detail_template="The plugin template document is malformed",
            suggestion_template="Fix the template definition and reload it",
        )

        self._templates["INSTANCE_INVALID"] = ErrorTemplate(
            code="INSTANCE_INVALID",
            category=ErrorCategory.TEMPLATE,
            message_template="Invalid plugin instance",
            detail_template="The plugin instance document is malformed",
            suggestion_template="Fix the instance definition and reload it",
        )

        # CONFIG errors
        self._templates["CONFIG_INVALID"] = ErrorTemplate(
            code="CONFIG_INVALID",
            category=ErrorCategory.CONFIG,
            message_template="Invalid configuration",
            detail_template="The engine configuration is invalid",
            suggestion_template="Check the configuration file and fix errors",
        )

        # SYSTEM errors
        self._templates["INTERNAL_ERROR"] = ErrorTemplate(
            code="INTERNAL_ERROR",
            category=ErrorCategory.SYSTEM,
            message_template="Internal engine error",
            detail_template="An unexpected error occurred in the fetch engine",
            suggestion_template="Check the logs and report this issue",
        )
