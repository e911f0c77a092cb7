"""Supabase client for the territory console backend."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


# Tables read or written by the console:
#
#   customers            customer_id, customer_name, account_number, territory,
#                        account_classification, introduced_myself[_at|_by],
#                        visited_account[_at|_by]
#   addresses            address_id, customer_id, street, city, state, zip_code
#   geocoded_locations   address_id, latitude, longitude
#   sales                customer_id, category, sales_amount, year, comparison_type, period
#   contacts             contact_id, customer_id, contact_name, role, phone_number, email
#   territory_boundaries territory_name, latitude, longitude, sequence
#
# RPC: upsert_geocoded_location(p_address_id, p_latitude, p_longitude)
