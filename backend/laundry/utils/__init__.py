"""Utility functions and helpers."""

from laundry.utils.datetime_utils import store_today, to_store_timezone
from laundry.utils.phone import format_gateway_phone, is_valid_phone_number, normalize_phone_number

__all__ = [
    "format_gateway_phone",
    "is_valid_phone_number",
    "normalize_phone_number",
    "store_today",
    "to_store_timezone",
]
