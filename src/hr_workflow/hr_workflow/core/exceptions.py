class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` and ``http_status`` give every failure kind a stable outcome a
    client can branch on.
    """

    code = "domain_error"
    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "invalid_input"
    http_status = 400


class AuthenticationError(DomainError):
    """Raised when the caller's bearer token is missing or invalid."""

    code = "unauthenticated"
    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""

    code = "unauthorized"
    http_status = 403


class NotFoundError(DomainError):
    """Raised when a referenced entity id does not resolve."""

    code = "not_found"
    http_status = 404


class InvalidStateError(DomainError):
    """Raised when an entity is not in the status an operation requires."""

    code = "invalid_state"
    http_status = 422


class ConflictError(InvalidStateError):
    """Raised when a concurrent transition on the same entity won the race."""

    code = "conflict"
    http_status = 409
