"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection with a single head count on the customers table."""
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set TERRITORY_SUPABASE_URL and TERRITORY_SUPABASE_KEY environment variables.",
            "customers_count": 0,
        }

    try:
        response = supabase.table("customers").select("customer_id", count="exact", head=True).execute()
        count = response.count or 0
        return {
            "configured": True,
            "connected": True,
            "customers_count": count,
            "message": f"Database connected. Found {count} customers.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
