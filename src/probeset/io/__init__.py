"""I/O helpers for the probeset CLI."""

from .loader import LoadResult, load_roster, open_roster_for_read

__all__ = ["LoadResult", "load_roster", "open_roster_for_read"]
