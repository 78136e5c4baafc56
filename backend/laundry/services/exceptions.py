"""Base service exceptions.

These exceptions are raised by the service layer and should be caught
by the API layer and converted to appropriate HTTP responses.
"""


class ServiceError(Exception):
    """Base service exception."""

    pass


class NotFoundError(ServiceError):
    """Resource not found."""

    pass


class ValidationError(ServiceError):
    """Malformed or out-of-range input. Never retried."""

    pass


class ConflictError(ServiceError):
    """A unique identifier is already taken (phone number, customer ID, ticket number)."""

    pass


class StoreUnavailable(ServiceError):
    """Storage did not answer (outage or timeout).

    Reported to the immediate caller; retry policy belongs to the caller.
    Never answered with a locally generated substitute value.
    """

    pass


class DispatchFailure(ServiceError):
    """Notification delivery failed.

    Only ever raised inside detached notification tasks, where it is logged.
    It never reaches the caller that triggered the notification.
    """

    def __init__(self, message: str, *, channel: str | None = None, ticket_number: str | None = None):
        self.channel = channel
        self.ticket_number = ticket_number
        super().__init__(message)
