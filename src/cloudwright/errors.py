"""Exception hierarchy shared by the client, lifecycle and tool layers."""

from __future__ import annotations


class CloudwrightError(Exception):
    """Base class for every error surfaced to a caller."""


class ConfigurationError(CloudwrightError):
    """Raised when workspace or credentials cannot be resolved."""


class SpecValidationError(CloudwrightError):
    """Raised for invalid requests, always before any network call."""


class PlatformAPIError(CloudwrightError):
    """The platform answered with a non-success HTTP status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResourceNotFoundError(PlatformAPIError):
    """HTTP 404."""


class ResourceConflictError(PlatformAPIError):
    """HTTP 409."""


class UnauthorizedError(PlatformAPIError):
    """HTTP 401/403."""


class RetryableHTTPError(PlatformAPIError):
    """HTTP errors that should be retried."""


class OrchestrationError(CloudwrightError):
    """A create or delete call was rejected by the platform."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LifecycleError(CloudwrightError):
    """Status polling did not confirm the expected lifecycle transition."""


class PollTimeoutError(LifecycleError):
    """Poll budget or external deadline exhausted."""

    def __init__(self, message: str, *, last_status: str | None = None, unknown: bool = False) -> None:
        super().__init__(message)
        self.last_status = last_status
        self.unknown = unknown


class TerminalStatusError(LifecycleError):
    """Creation stopped in a final status other than DEPLOYED."""

    def __init__(self, message: str, status: str) -> None:
        super().__init__(message)
        self.status = status


class DeletionStateError(LifecycleError):
    """A status other than DELETING/DELETED was observed while deleting."""

    def __init__(self, message: str, status: str) -> None:
        super().__init__(message)
        self.status = status
