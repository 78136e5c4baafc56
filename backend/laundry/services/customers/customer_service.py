"""Customer registry service.

Customers are keyed by phone number; the CUST##### customer ID is a
secondary unique key issued from the global customer counter.
"""

from decimal import Decimal

import structlog
from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.dml import Update
from sqlmodel import select

from laundry.db.guard import guarded
from laundry.models.customer import Customer
from laundry.models.types import utc_now
from laundry.services.counters import (
    CUSTOMER_ID_COUNTER_KEY,
    SequenceAllocator,
    format_customer_id,
    is_issued_customer_id,
)
from laundry.services.customers.exceptions import (
    CustomerNotFound,
    DuplicateCustomerId,
    DuplicatePhoneNumber,
    InvalidPhoneNumber,
    ReservedCustomerId,
)
from laundry.services.customers.schemas import CustomerDraft, CustomerUpdate
from laundry.services.exceptions import ConflictError
from laundry.utils.phone import is_valid_phone_number, normalize_phone_number

logger = structlog.get_logger(__name__)


def order_stats_update(phone_number: str, amount: Decimal) -> Update:
    """Statement adding one order of `amount` to a customer's running totals.

    Increments happen in SQL so concurrent orders for the same customer
    never overwrite each other's contribution.
    """
    return (
        update(Customer)
        .where(Customer.phone_number == phone_number)  # type: ignore[arg-type]
        .values(
            total_orders=Customer.total_orders + 1,  # type: ignore[operator]
            total_spent=Customer.total_spent + amount,  # type: ignore[operator]
            last_order_date=utc_now(),
            updated_at=utc_now(),
        )
        .execution_options(synchronize_session=False)
    )


def _conflict_from(error: IntegrityError) -> ConflictError:
    """Translate a unique violation on customers into the matching conflict."""
    text = str(error.orig if error.orig is not None else error).lower()
    if "customer_id" in text:
        return DuplicateCustomerId("Customer ID already exists")
    return DuplicatePhoneNumber("Customer with this phone number already exists")


class CustomerService:
    """Service for customer registration, lookup and edits.

    Each public method runs in its own session so calls are safe to make
    concurrently.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        allocator: SequenceAllocator,
        *,
        timeout: float | None = 10.0,
    ):
        self.session_maker = session_maker
        self.allocator = allocator
        self.timeout = timeout

    @staticmethod
    def _valid_phone(phone_number: str) -> str:
        if not is_valid_phone_number(phone_number):
            raise InvalidPhoneNumber(f"Invalid phone number: {phone_number!r}")
        return normalize_phone_number(phone_number)

    @staticmethod
    def _check_not_reserved(customer_id: str) -> None:
        if is_issued_customer_id(customer_id):
            raise ReservedCustomerId(f"Customer ID {customer_id!r} is reserved for automatically issued IDs")

    async def _find_by_phone(self, session: AsyncSession, phone_number: str) -> Customer | None:
        result = await session.execute(select(Customer).where(Customer.phone_number == phone_number))
        return result.scalars().first()

    async def _find_by_customer_id(self, session: AsyncSession, customer_id: str) -> Customer | None:
        result = await session.execute(select(Customer).where(Customer.customer_id == customer_id))
        return result.scalars().first()

    async def preview_next_customer_id(self) -> str:
        """Customer ID the next registration would receive. Advisory only."""
        last = await self.allocator.peek(CUSTOMER_ID_COUNTER_KEY)
        return format_customer_id(last + 1)

    async def register(self, draft: CustomerDraft) -> Customer:
        """Register a new customer.

        Raises:
            InvalidPhoneNumber: phone is not a valid mobile number
            ReservedCustomerId: explicit customer ID in the counter-issued CUST##### range
            DuplicatePhoneNumber / DuplicateCustomerId: key already taken
            StoreUnavailable: storage or counter unreachable
        """
        phone = self._valid_phone(draft.phone_number)
        if draft.customer_id:
            self._check_not_reserved(draft.customer_id.strip())
        return await guarded(self._register(phone, draft), name="customers.register", timeout=self.timeout)

    async def _register(self, phone: str, draft: CustomerDraft) -> Customer:
        async with self.session_maker() as session:
            if await self._find_by_phone(session, phone):
                raise DuplicatePhoneNumber("Customer with this phone number already exists")

            customer_id = draft.customer_id.strip() if draft.customer_id else None
            if customer_id and await self._find_by_customer_id(session, customer_id):
                raise DuplicateCustomerId("Customer ID already exists")
            if not customer_id:
                sequence = await self.allocator.allocate(CUSTOMER_ID_COUNTER_KEY, prefix="CUST")
                customer_id = format_customer_id(sequence)

            customer = Customer(
                phone_number=phone,
                customer_id=customer_id,
                name=draft.name.strip(),
                email=draft.email.strip().lower() if draft.email else None,
                address=draft.address.strip(),
                city=draft.city.strip(),
                state=draft.state.strip(),
                pincode=draft.pincode.strip(),
                notes=draft.notes,
                tags=[tag.strip() for tag in draft.tags if tag.strip()],
            )
            session.add(customer)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise _conflict_from(e) from e

        logger.info("Registered customer", customer_id=customer.customer_id, phone_number=phone)
        return customer

    async def get(self, identifier: str) -> Customer:
        """Get a customer by phone number or customer ID."""
        phone = normalize_phone_number(identifier)

        async def _get() -> Customer | None:
            async with self.session_maker() as session:
                result = await session.execute(
                    select(Customer).where(
                        or_(Customer.phone_number == phone, Customer.customer_id == identifier)  # type: ignore[arg-type]
                    )
                )
                return result.scalars().first()

        customer = await guarded(_get(), name="customers.get", timeout=self.timeout)
        if not customer:
            raise CustomerNotFound(f"Customer {identifier!r} not found")
        return customer

    async def find_or_register_for_order(self, phone_number: str, name: str) -> Customer:
        """Return the customer for an order, registering them on their first order."""
        phone = self._valid_phone(phone_number)

        async def _find() -> Customer | None:
            async with self.session_maker() as session:
                return await self._find_by_phone(session, phone)

        existing = await guarded(_find(), name="customers.find", timeout=self.timeout)
        if existing:
            return existing

        try:
            return await self.register(CustomerDraft(phone_number=phone, name=name))
        except DuplicatePhoneNumber:
            # Registered by a concurrent order for the same phone
            logger.debug("Customer registered concurrently, reusing", phone_number=phone)
            return await self.get(phone)

    async def update(self, identifier: str, changes: CustomerUpdate) -> Customer:
        """Edit a customer, re-checking uniqueness of phone number and customer ID."""
        fields = changes.model_dump(exclude_unset=True)
        if "phone_number" in fields and fields["phone_number"] is not None:
            fields["phone_number"] = self._valid_phone(fields["phone_number"])
        return await guarded(self._update(identifier, fields), name="customers.update", timeout=self.timeout)

    async def _update(self, identifier: str, fields: dict[str, object]) -> Customer:
        current = await self.get(identifier)

        async with self.session_maker() as session:
            customer = await session.get(Customer, current.id)
            if customer is None:
                raise CustomerNotFound(f"Customer {identifier!r} not found")

            new_phone = fields.get("phone_number")
            if new_phone and new_phone != customer.phone_number and await self._find_by_phone(session, str(new_phone)):
                raise DuplicatePhoneNumber("Customer with this phone number already exists")

            new_id = fields.get("customer_id")
            if new_id and new_id != customer.customer_id:
                self._check_not_reserved(str(new_id))
            if new_id and new_id != customer.customer_id and await self._find_by_customer_id(session, str(new_id)):
                raise DuplicateCustomerId("Customer ID already exists")

            for key, value in fields.items():
                if value is not None:
                    setattr(customer, key, value)
            customer.updated_at = utc_now()

            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise _conflict_from(e) from e

        logger.info("Updated customer", customer_id=customer.customer_id, fields=sorted(fields))
        return customer
