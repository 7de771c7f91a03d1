from pathlib import Path
from typing import Optional, List, Tuple

from nftauction.core.storage.sqlite_adapter import SQLiteAdapter
from nftauction.utils.logger import get_logger

logger = get_logger("storage.manager")


class StorageManager:
    """
    Manages persistent storage for a devnet chain.

    Coordinates data persistence using SQLite adapter.
    Handles:
    - Blocks and receipts
    - World state after the latest block
    - Metadata (chain id, clock, deployed addresses)
    """

    def __init__(self, data_dir: Path, db_name: str = "chain.db"):
        self.data_dir = Path(data_dir)
        self.db_path = self.data_dir / db_name
        self.adapter = SQLiteAdapter(self.db_path)

        logger.info(f"StorageManager initialized at {self.db_path}")

    # =========================================================================
    # Metadata
    # =========================================================================

    def save_meta(self, key: str, value: str):
        self.adapter.set_chain_meta(key, value)

    def get_meta(self, key: str) -> Optional[str]:
        return self.adapter.get_chain_meta(key)

    # =========================================================================
    # Blocks & State
    # =========================================================================

    def persist_block(
        self,
        number: int,
        block_hash: bytes,
        block_data: bytes,
        receipts: List[Tuple[bytes, bytes]],
        world_state: bytes,
    ):
        """Atomically persist a block, its receipts and the post-state."""
        self.adapter.persist_block_update(number, block_hash, block_data, receipts, world_state)

    def save_world_state(self, world_state: bytes):
        """Overwrite the stored world state (e.g. after a snapshot revert)."""
        self.adapter.save_world_state(self.get_height(), world_state)

    def truncate_blocks(self, number: int):
        """Forget everything mined after block `number`."""
        self.adapter.delete_blocks_above(number)
        logger.debug(f"Truncated stored chain to block {number}")

    def get_height(self) -> int:
        """Number of the latest stored block, -1 if empty."""
        return self.adapter.get_block_count() - 1

    def load_chain(self) -> Tuple[Optional[bytes], List[bytes], List[bytes]]:
        """
        Load full chain state.

        Returns:
            (world_state, blocks, receipts)
            world_state: serialized state or None if nothing stored
            blocks: serialized blocks ordered by number
            receipts: serialized receipts ordered by block
        """
        stored = self.adapter.get_world_state()
        world_state = stored[1] if stored else None
        blocks = self.adapter.get_all_blocks()
        receipts = self.adapter.get_all_receipts()
        return world_state, blocks, receipts

    def close(self):
        self.adapter.close()
