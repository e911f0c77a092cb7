"""Data access layer backed by Supabase."""

from .customers_repository import RepositoryError, TerritoryRepository, get_repository

__all__ = ["RepositoryError", "TerritoryRepository", "get_repository"]
