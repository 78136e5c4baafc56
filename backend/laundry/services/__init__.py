"""Services module.

This module provides the service layer architecture:
- exceptions: Custom service exceptions
- counters: Sequence allocation and identifier formatting
- customers: Customer registry
- orders: Order repository and lifecycle engine
- notifications: Message templates and delivery dispatchers
"""
