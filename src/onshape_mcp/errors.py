"""Exception types for the Onshape MCP Server.

Every failure raised by the transport, locator, or mutation layers derives
from OnshapeMCPError. The dispatch registry is the only place these are
converted into in-band tool responses.
"""

from typing import Any


class OnshapeMCPError(Exception):
    """Base class for all Onshape MCP Server errors."""


class ConfigurationError(OnshapeMCPError):
    """Required configuration is missing or invalid."""


class AddressError(OnshapeMCPError, ValueError):
    """A resource URI or Address is malformed or structurally incomplete."""


class InvalidStateError(OnshapeMCPError):
    """A mutation was attempted against an immutable version or microversion."""


class PreconditionError(OnshapeMCPError):
    """A read did not return the version stamps a write requires."""


class ApiError(OnshapeMCPError):
    """Non-success response from the Onshape REST API."""

    def __init__(self, status: int, status_text: str, raw_body: str = "") -> None:
        """Initialize API error.

        Args:
            status: HTTP status code (0 when no response was received).
            status_text: HTTP reason phrase.
            raw_body: Unparsed response body.
        """
        message = f"Onshape API Error: {status} {status_text}"
        if raw_body:
            message = f"{message} - {raw_body}"
        super().__init__(message)
        self.status = status
        self.status_text = status_text
        self.raw_body = raw_body


class UnauthorizedError(ApiError):
    """The backend rejected the configured credential."""


class ConnectionFailedError(ApiError):
    """The request never produced an HTTP response."""

    def __init__(self, reason: str) -> None:
        super().__init__(0, "Connection failed", reason)


class ResponseDecodeError(OnshapeMCPError):
    """A successful response carried a body that is not valid JSON."""

    def __init__(self, raw_body: str, reason: str) -> None:
        super().__init__(f"Invalid JSON response: {reason}")
        self.raw_body = raw_body


class ValidationError(OnshapeMCPError):
    """Tool arguments do not satisfy the declared input schema."""

    def __init__(self, operation: str, errors: list[dict[str, Any]]) -> None:
        """Initialize validation error.

        Args:
            operation: Name of the tool whose arguments failed.
            errors: Pydantic error dicts describing each failure.
        """
        details = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ())) or '<root>'}: "
            f"{err.get('msg', 'invalid value')}"
            for err in errors
        )
        super().__init__(f"Invalid arguments for {operation}: {details}")
        self.operation = operation
        self.errors = errors


class DuplicateOperationError(OnshapeMCPError):
    """An operation name was registered more than once."""


class UnknownOperationError(OnshapeMCPError):
    """No operation is registered under the requested name."""
