import sqlite3
import threading
from pathlib import Path
from typing import Optional, List, Tuple

from nftauction.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class SQLiteAdapter:
    """
    SQLite backend for the devnet chain.

    Provides:
    1. Blocks keyed by number (serialized Block + hash)
    2. Receipts keyed by tx hash, indexed by block
    3. The latest world state (single serialized blob)
    4. Chain metadata (chain id, pending clock increase, burned fees)
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn_local = threading.local()

        # Ensure directory exists
        if not db_path.parent.exists():
            db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            self._conn_local.conn = sqlite3.connect(
                self.db_path,
                timeout=30.0,
                check_same_thread=False
            )
            self._conn_local.conn.row_factory = sqlite3.Row
            self._conn_local.conn.execute("PRAGMA journal_mode=WAL;")
            self._conn_local.conn.execute("PRAGMA synchronous=NORMAL;")
        return self._conn_local.conn

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        with conn:
            # 1. Chain State (Metadata)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS chain_state (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)

            # 2. Blocks (number -> hash, data)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS blocks (
                    number INTEGER PRIMARY KEY,
                    block_hash BLOB NOT NULL,
                    data BLOB NOT NULL
                )
            """)

            # 3. Receipts (tx hash -> data, block)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS receipts (
                    tx_hash BLOB PRIMARY KEY,
                    block_number INTEGER NOT NULL,
                    data BLOB NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_receipt_block ON receipts(block_number);")

            # 4. World State (single row)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS world_state (
                    id INTEGER PRIMARY KEY CHECK (id = 0),
                    block_number INTEGER NOT NULL,
                    data BLOB NOT NULL
                )
            """)

    # =========================================================================
    # Chain State Operations
    # =========================================================================

    def set_chain_meta(self, key: str, value: str):
        conn = self._get_conn()
        with conn:
            conn.execute("INSERT OR REPLACE INTO chain_state (key, value) VALUES (?, ?)", (key, value))

    def get_chain_meta(self, key: str) -> Optional[str]:
        conn = self._get_conn()
        cursor = conn.execute("SELECT value FROM chain_state WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row['value'] if row else None

    # =========================================================================
    # Block Operations
    # =========================================================================

    def get_all_blocks(self) -> List[bytes]:
        """Get all block data ordered by number."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT data FROM blocks ORDER BY number ASC")
        return [row['data'] for row in cursor]

    def get_block_count(self) -> int:
        conn = self._get_conn()
        cursor = conn.execute("SELECT COUNT(*) as cnt FROM blocks")
        return cursor.fetchone()['cnt']

    def get_all_receipts(self) -> List[bytes]:
        """Get all receipt data ordered by block number."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT data FROM receipts ORDER BY block_number ASC")
        return [row['data'] for row in cursor]

    def delete_blocks_above(self, number: int):
        """Drop blocks (and their receipts) newer than `number`."""
        conn = self._get_conn()
        with conn:
            conn.execute("DELETE FROM receipts WHERE block_number > ?", (number,))
            conn.execute("DELETE FROM blocks WHERE number > ?", (number,))

    # =========================================================================
    # World State Operations
    # =========================================================================

    def save_world_state(self, block_number: int, data: bytes):
        conn = self._get_conn()
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO world_state (id, block_number, data) VALUES (0, ?, ?)",
                (block_number, data)
            )

    def get_world_state(self) -> Optional[Tuple[int, bytes]]:
        """Get (block_number, data) of the stored world state."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT block_number, data FROM world_state WHERE id = 0")
        row = cursor.fetchone()
        return (row['block_number'], row['data']) if row else None

    def persist_block_update(
        self,
        number: int,
        block_hash: bytes,
        block_data: bytes,
        receipts: List[Tuple[bytes, bytes]],
        world_state: bytes,
    ):
        """
        Atomically store a mined block with its receipts and post-state.

        Args:
            number: Block number
            block_hash: Block hash
            block_data: Serialized block
            receipts: List of (tx_hash, data)
            world_state: Serialized world state after the block
        """
        conn = self._get_conn()
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO blocks (number, block_hash, data) VALUES (?, ?, ?)",
                (number, block_hash, block_data)
            )

            for tx_hash, data in receipts:
                conn.execute(
                    "INSERT OR REPLACE INTO receipts (tx_hash, block_number, data) VALUES (?, ?, ?)",
                    (tx_hash, number, data)
                )

            conn.execute(
                "INSERT OR REPLACE INTO world_state (id, block_number, data) VALUES (0, ?, ?)",
                (number, world_state)
            )

    def close(self):
        """Close the connection of the current thread."""
        conn = getattr(self._conn_local, "conn", None)
        if conn is not None:
            conn.close()
            del self._conn_local.conn
