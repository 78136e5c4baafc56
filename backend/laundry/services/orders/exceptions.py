"""Order domain exceptions."""

from laundry.services.exceptions import ConflictError, NotFoundError, ValidationError


class OrderNotFound(NotFoundError):
    """Order not found."""

    pass


class InvalidStatus(ValidationError):
    """Status is not one of the enumerated order statuses."""

    pass


class InvalidRack(ValidationError):
    """Rack is not one of the store's racks."""

    pass


class RackNotAllowed(ValidationError):
    """Order is not in the store, so it cannot sit on a rack."""

    pass


class PaymentAlreadyReceived(ValidationError):
    """Payment reminder requested for an order that is already paid."""

    pass


class DuplicateTicketNumber(ConflictError):
    """Ticket number already exists."""

    pass


class WriteConflict(Exception):
    """Order changed between load and conditional write.

    Internal to the repository: the write is retried against the fresh row
    and callers never see this.
    """

    pass


class AssignmentNotAllowed(ValidationError):
    """Order is closed and can no longer be assigned for delivery."""

    pass
