"""Phone number helpers (Indian mobile numbers)."""

import re

# 10 digits starting with 6-9, optionally prefixed with +91 or 91
_MOBILE_RE = re.compile(r"^[6-9]\d{9}$")
_SEPARATORS_RE = re.compile(r"[\s\-().]")


def normalize_phone_number(phone: str) -> str:
    """Normalize a phone number to its 10-digit form where possible.

    Separators (spaces, dashes, dots, parentheses) are removed and a +91 / 91
    country prefix is dropped. Anything else is returned as-is, so invalid
    input stays recognisable in error messages.
    """
    cleaned = _SEPARATORS_RE.sub("", phone or "")
    if cleaned.startswith("+91"):
        return cleaned[3:]
    if cleaned.startswith("91") and len(cleaned) == 12:
        return cleaned[2:]
    return cleaned


def is_valid_phone_number(phone: str) -> bool:
    return bool(_MOBILE_RE.match(normalize_phone_number(phone)))


def format_gateway_phone(phone: str) -> str:
    """Format a phone number for the SMS/WhatsApp gateway: digits only, with 91 country code."""
    digits = re.sub(r"\D", "", phone)
    if digits.startswith("0"):
        digits = digits[1:]
    if len(digits) == 10:
        digits = f"91{digits}"
    return digits
