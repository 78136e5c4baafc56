"""Counter model backing the sequence allocator."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from laundry.models.types import timestamp_column, utc_now


class Counter(SQLModel, table=True):
    """Named monotonically increasing sequence.

    Rows are created lazily by the first allocation for a key and are never
    deleted. Allocation is a single INSERT ... ON CONFLICT DO UPDATE ... RETURNING
    statement, so concurrent callers never observe the same value.
    """

    __tablename__ = "counters"

    key: str = Field(primary_key=True, max_length=64)  # e.g. "ticket_260201", "customerId"
    sequence: int = Field(default=0)
    prefix: str = Field(default="", max_length=16)
    last_updated: datetime = Field(default_factory=utc_now, sa_column=timestamp_column())
