"""Sequence allocation and identifier formatting."""

from laundry.services.counters.allocator import SequenceAllocator
from laundry.services.counters.identifiers import (
    CUSTOMER_ID_COUNTER_KEY,
    format_customer_id,
    format_order_number,
    format_ticket_number,
    is_issued_customer_id,
    order_counter_key,
    ticket_counter_key,
)
from laundry.services.counters.stores import CounterStore, RedisCounterStore, SqlCounterStore

__all__ = [
    "CUSTOMER_ID_COUNTER_KEY",
    "CounterStore",
    "RedisCounterStore",
    "SequenceAllocator",
    "SqlCounterStore",
    "format_customer_id",
    "format_order_number",
    "format_ticket_number",
    "is_issued_customer_id",
    "order_counter_key",
    "ticket_counter_key",
]
