"""
Storage layer for hunt.

Provides SQLite-based persistence with:
- Job and employer storage
- Description snapshots
- Record views for duplicate checks
- Export to CSV
"""

from hunt.storage.sqlite import JobDatabase

__all__ = ["JobDatabase"]
