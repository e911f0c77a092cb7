"""Territory console backend: account markers, territory boundaries and sales rollups."""

__version__ = "0.1.0"
