"""Display identifiers built from counter values.

Pure functions only: no storage access, no clock reads.

    ticket number   260201-001-00001   (per-day ticket counter, store code)
    order number    001                (per-day order counter)
    customer ID     CUST00001          (single global counter)

Padding is a minimum width; larger sequences lengthen the string rather than
being truncated, so two different sequences never format to the same value.
"""

import re
from datetime import date

from laundry.services.counters.exceptions import InvalidSequence

TICKET_SEQUENCE_WIDTH = 5
ORDER_SEQUENCE_WIDTH = 3
CUSTOMER_SEQUENCE_WIDTH = 5

CUSTOMER_ID_PREFIX = "CUST"
CUSTOMER_ID_COUNTER_KEY = "customerId"

_ISSUED_CUSTOMER_ID = re.compile(rf"{CUSTOMER_ID_PREFIX}\d+")


def _date_stamp(scope_date: date) -> str:
    return scope_date.strftime("%y%m%d")


def _check_sequence(sequence: int) -> None:
    if isinstance(sequence, bool) or not isinstance(sequence, int) or sequence < 0:
        raise InvalidSequence(f"Sequence must be a non-negative integer, got {sequence!r}")


def ticket_counter_key(scope_date: date) -> str:
    """Counter key for the ticket sequence of one calendar day ("ticket_260201")."""
    return f"ticket_{_date_stamp(scope_date)}"


def order_counter_key(scope_date: date) -> str:
    """Counter key for the order-number sequence of one calendar day ("order_260201")."""
    return f"order_{_date_stamp(scope_date)}"


def format_ticket_number(scope_date: date, sequence: int, store_code: str = "001") -> str:
    """Format a ticket number: YYMMDD-<storeCode>-<sequence, at least 5 digits>."""
    _check_sequence(sequence)
    return f"{_date_stamp(scope_date)}-{store_code}-{sequence:0{TICKET_SEQUENCE_WIDTH}d}"


def format_order_number(sequence: int) -> str:
    _check_sequence(sequence)
    return f"{sequence:0{ORDER_SEQUENCE_WIDTH}d}"


def format_customer_id(sequence: int) -> str:
    _check_sequence(sequence)
    return f"{CUSTOMER_ID_PREFIX}{sequence:0{CUSTOMER_SEQUENCE_WIDTH}d}"


def is_issued_customer_id(value: str) -> bool:
    """True for IDs in the counter's CUST##### namespace."""
    return _ISSUED_CUSTOMER_ID.fullmatch(value) is not None
