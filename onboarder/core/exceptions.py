"""
Onboarder exception hierarchy.

Services raise these types; blueprints register handlers against them
once and get consistent HTTP status codes everywhere.

Usage:
    from onboarder.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Role", resource_id="IT")
    raise ValidationError("Start date must be in the future", code="past-date")
"""


class NotFoundError(Exception):
    """Raised when a requested record does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Role", "User").
        resource_id: The key that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" {resource_id!r}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input violates a business rule.

    Args:
        message: Human-readable explanation of what failed.
        code: Stable machine-readable code (e.g. "empty-name").
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, code: str | None = None, details: dict | None = None) -> None:
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ConflictError(Exception):
    """Raised when an operation would duplicate a unique key or orphan a reference.

    Maps to HTTP 409.
    """

    def __init__(
        self,
        resource: str,
        field: str,
        value: str | None = None,
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(message or f"{resource} with {field}={value!r} already exists")


class ExternalServiceError(Exception):
    """Raised by the issue tracker gateway when a call fails.

    The message is the tracker's own error text where one was returned.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class OrchestrationError(Exception):
    """Raised when an onboarding run is aborted part-way.

    ``result`` holds whatever tickets were already created (possibly none),
    so an operator can reconcile by hand.
    """

    def __init__(self, message: str, result=None) -> None:
        self.result = result
        super().__init__(message)
