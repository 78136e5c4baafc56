"""Custom SQLAlchemy column helpers for the application."""

from datetime import UTC, datetime
from enum import StrEnum

from sqlalchemy import Column, DateTime, Enum, Numeric

# Amounts are stored with paise precision
MONEY = Numeric(12, 2, asdecimal=True)


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def enum_column(enum_cls: type[StrEnum], *, name: str, nullable: bool = False, index: bool = False) -> Column:  # type: ignore[type-arg]
    """Column storing a StrEnum by value as VARCHAR.

    Stored as plain strings (not a database-native enum) so new members do not
    need a type migration; values are still validated on the Python side.
    """
    return Column(
        Enum(
            enum_cls,
            values_callable=lambda e: [member.value for member in e],
            name=name,
            native_enum=False,
            create_constraint=False,
            length=32,
            validate_strings=True,
        ),
        nullable=nullable,
        index=index,
    )


def timestamp_column(*, nullable: bool = False) -> Column:  # type: ignore[type-arg]
    return Column(DateTime(timezone=True), nullable=nullable)
