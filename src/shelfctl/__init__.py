"""shelfctl — catalog filtering, sorting, and shelf assembly for media libraries."""

__version__ = "0.1.0"
