"""Laundry order tracking: ticket numbering, status workflow and customer notifications."""
