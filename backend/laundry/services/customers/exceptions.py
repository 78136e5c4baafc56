"""Customer domain exceptions."""

from laundry.services.exceptions import ConflictError, NotFoundError, ValidationError


class CustomerNotFound(NotFoundError):
    """Customer not found."""

    pass


class InvalidPhoneNumber(ValidationError):
    """Phone number is not a 10-digit mobile number."""

    pass


class DuplicatePhoneNumber(ConflictError):
    """Customer with this phone number already exists."""

    pass


class DuplicateCustomerId(ConflictError):
    """Customer ID already exists."""

    pass


class ReservedCustomerId(ValidationError):
    """Customer ID is in the CUST##### range issued by the customer counter."""

    pass
