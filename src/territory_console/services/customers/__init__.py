"""Customer service helpers."""

from .stats import (
    compute_account_progress,
    filter_customers,
    list_contact_progress,
    list_territories,
)

__all__ = [
    "compute_account_progress",
    "filter_customers",
    "list_contact_progress",
    "list_territories",
]
