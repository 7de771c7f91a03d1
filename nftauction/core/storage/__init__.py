"""
Persistent Storage Module.

Provides SQLite-backed persistence for:
- Blocks and Receipts
- World State
- Chain Metadata
"""

from nftauction.core.storage.sqlite_adapter import SQLiteAdapter
from nftauction.core.storage.storage_manager import StorageManager

__all__ = ["SQLiteAdapter", "StorageManager"]
