"""Counter domain exceptions."""

from laundry.services.exceptions import ValidationError


class InvalidCounterKey(ValidationError):
    """Counter key is empty or too long."""

    pass


class InvalidSequence(ValidationError):
    """Sequence value is negative or not an integer."""

    pass
