"""Customer registry."""

from laundry.services.customers.customer_service import CustomerService, order_stats_update
from laundry.services.customers.schemas import CustomerDraft, CustomerUpdate

__all__ = ["CustomerDraft", "CustomerService", "CustomerUpdate", "order_stats_update"]
