"""Route group exports."""

from . import customers, exports, health, markers, sales, territories

__all__ = ["customers", "exports", "health", "markers", "sales", "territories"]
