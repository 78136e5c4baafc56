"""Enum definitions for database models."""

from enum import StrEnum

from laundry.models.status import Flags, Status, WorkflowStatusEnum


class OrderStatus(WorkflowStatusEnum):
    """Status of an order in the laundry workflow.

    Status flow (convention, not enforced):
        RECEIVED -> SORTING .. PACKING -> READY_FOR_PICKUP <-> PICKUP_IN_PROGRESS
        -> READY_FOR_DELIVERY <-> OUT_FOR_DELIVERY -> DELIVERED

    RETURN, REFUND and CANCELLED can be reached from any non-terminal state.
    """

    RECEIVED = Status("Received", Flags.IN_STORE)
    SORTING = Status("Sorting", Flags.IN_STORE | Flags.PROCESSING, phrase="Your order is being sorted")
    SPOTTING = Status("Spotting", Flags.IN_STORE | Flags.PROCESSING)
    WASHING = Status("Washing", Flags.IN_STORE | Flags.PROCESSING, phrase="Your order is being washed")
    DRY_CLEANING = Status("Dry Cleaning", Flags.IN_STORE | Flags.PROCESSING)
    DRYING = Status("Drying", Flags.IN_STORE | Flags.PROCESSING)
    IRONING = Status("Ironing", Flags.IN_STORE | Flags.PROCESSING, phrase="Your order is being ironed")
    QUALITY_CHECK = Status(
        "Quality Check", Flags.IN_STORE | Flags.PROCESSING, phrase="Your order is under quality check"
    )
    PACKING = Status("Packing", Flags.IN_STORE | Flags.PROCESSING, phrase="Your order is being packed")
    READY_FOR_PICKUP = Status("Ready for Pickup", Flags.IN_STORE)
    PICKUP_IN_PROGRESS = Status("Pickup In Progress", Flags.IN_TRANSIT)
    READY_FOR_DELIVERY = Status("Ready for Delivery", Flags.IN_STORE)
    OUT_FOR_DELIVERY = Status("Out for Delivery", Flags.IN_TRANSIT, phrase="Your order is out for delivery")
    DELIVERED = Status("Delivered", Flags.TERMINAL)
    RETURN = Status("Return", Flags.TERMINAL)
    REFUND = Status("Refund", Flags.TERMINAL)
    CANCELLED = Status("Cancelled", Flags.TERMINAL)


class PaymentMethod(StrEnum):
    CASH = "Cash"
    CARD = "Card"
    UPI = "UPI"
    ONLINE = "Online"


class PaymentStatus(StrEnum):
    PENDING = "Pending"
    PAID = "Paid"
    PARTIAL = "Partial"


class CustomerStatus(StrEnum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    BLOCKED = "Blocked"


class NotificationKind(StrEnum):
    """Customer notification events - serializes to string value in JSON."""

    CONFIRMATION = "confirmation"
    READY = "ready"
    DELIVERED = "delivered"
    STATUS_UPDATE = "statusUpdate"
    PAYMENT_REMINDER = "paymentReminder"
    CUSTOM = "custom"  # Free text written by staff, not tied to an order
