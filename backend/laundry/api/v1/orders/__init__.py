"""Orders API package.

- order_routes: order creation, lookup, metadata edits and deletion
- lifecycle_routes: status transitions, racks, delivery assignment, reminders
"""

from fastapi import APIRouter

from laundry.api.v1.orders.lifecycle_routes import router as lifecycle_router
from laundry.api.v1.orders.order_routes import router as order_router

# Create a combined router for all order-related endpoints
router = APIRouter()

router.include_router(order_router)
router.include_router(lifecycle_router)

__all__ = ["router"]
