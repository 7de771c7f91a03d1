"""
Chain - In-process execution environment for contract code.

Conceptual Background:
---------------------
The Chain plays the part a Hardhat or Ganache node plays for Solidity tests:

1. **World State**: native balances, nonces, and contract accounts
   (code + storage, optionally behind a proxy)
2. **Transactions**: signed by accounts, validated, executed, mined
3. **Blocks**: one block per transaction (automine), with timestamps that
   tests can move forward with increase_time()

Transaction Processing:
----------------------
1. Validate: signature, chain id, nonce, field bounds, upfront cost
2. Snapshot world state
3. Execute: move value, dispatch to the contract method
4. On ContractRevert: restore snapshot, keep nonce bump, still charge gas
5. Charge gas_used * gas_price (burned), mine block, store receipt

Every transaction is atomic: either all of its state changes apply or none
do. Execution is strictly sequential, so no locking is needed.
"""

import copy
import importlib
import pickle
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, TYPE_CHECKING

from nftauction.crypto import (
    ZERO_ADDRESS,
    bytes_to_hex,
    hex_to_bytes,
    keccak256,
    recover_address,
    to_checksum_address,
)
from nftauction.core.config import ChainConfig
from nftauction.core.chain.account import Account, derive_accounts
from nftauction.core.chain.contract import (
    Contract,
    ContractHandle,
    is_external,
    is_payable,
)
from nftauction.core.chain.errors import ContractRevert, InvalidTransaction, RevertError
from nftauction.core.chain.transaction import (
    Block,
    LogEntry,
    Receipt,
    SignedTransaction,
    Transaction,
    class_path,
)
from nftauction.utils.logger import get_logger
from nftauction.utils.validation import validate_address, validate_integer, validate_uint256

if TYPE_CHECKING:
    from nftauction.core.storage.storage_manager import StorageManager

logger = get_logger("chain")


# =============================================================================
# World State
# =============================================================================


@dataclass
class ContractAccount:
    """
    A contract account.

    Attributes:
        code: Contract class (None for a proxy)
        storage: Attribute dict shared by every bound instance
        implementation: Address whose code runs against this storage (proxy)
    """
    code: Optional[type]
    storage: Dict[str, Any] = field(default_factory=dict)
    implementation: Optional[str] = None


@dataclass
class WorldState:
    """Everything a transaction can change. Deep-copied for rollback."""
    balances: Dict[str, int] = field(default_factory=dict)
    nonces: Dict[str, int] = field(default_factory=dict)
    contracts: Dict[str, ContractAccount] = field(default_factory=dict)


@dataclass
class CallFrame:
    """msg context of one contract invocation."""
    sender: str
    to: str
    value: int
    method: str


# =============================================================================
# Chain
# =============================================================================


class Chain:
    """
    Simulated blockchain with automine.

    Attributes:
        config: Chain configuration
        accounts: Funded dev accounts derived from config.account_seed
        blocks: Mined blocks, index == block number
        receipts: Receipts by transaction hash
        total_burned: Wei burned as gas fees
    """

    def __init__(
        self,
        config: Optional[ChainConfig] = None,
        storage_manager: Optional["StorageManager"] = None,
    ):
        """
        Initialize the chain.

        Args:
            config: Chain configuration. None = defaults
            storage_manager: Persistence manager. None = in-memory only.
        """
        self.config = config or ChainConfig()
        self.accounts: List[Account] = derive_accounts(self.config.account_seed, self.config.account_count)

        self._state = WorldState()
        self.blocks: List[Block] = []
        self.receipts: Dict[bytes, Receipt] = {}
        self.total_burned = 0

        # Clock manipulation
        self._pending_time_increase = 0

        # Execution context (only set while a transaction or call runs)
        self._frames: List[CallFrame] = []
        self._logs: List[LogEntry] = []
        self._frame_count = 0
        self._exec_timestamp: Optional[int] = None
        self._exec_block_number: Optional[int] = None

        # Classes deployed in this process, by class path
        self._code_registry: Dict[str, type] = {}

        # evm_snapshot / evm_revert
        self._snapshots: Dict[int, tuple] = {}
        self._next_snapshot_id = 1

        # Persistence
        self.storage_manager = storage_manager

        if not (storage_manager and self._load_from_storage()):
            self._create_genesis()

    # =========================================================================
    # Genesis
    # =========================================================================

    def _create_genesis(self) -> None:
        """Fund dev accounts and mine block 0."""
        for account in self.accounts:
            self._state.balances[account.address] = self.config.initial_balance
            self._state.nonces[account.address] = 0

        timestamp = self.config.genesis_timestamp
        if timestamp is None:
            timestamp = int(time.time())

        genesis = Block(number=0, timestamp=timestamp, parent_hash=bytes(32))
        self.blocks.append(genesis)

        if self.storage_manager:
            self.storage_manager.save_meta("chain_id", str(self.config.chain_id))
            self._persist_block(genesis, [])

        logger.info(
            f"Genesis created: {len(self.accounts)} accounts, "
            f"{self.config.initial_balance} wei each, timestamp={timestamp}"
        )

    # =========================================================================
    # State Access
    # =========================================================================

    @property
    def latest_block(self) -> Block:
        return self.blocks[-1]

    @property
    def block_number(self) -> int:
        return self.latest_block.number

    def time(self) -> int:
        """Timestamp of the latest block."""
        return self.latest_block.timestamp

    def balance_of(self, address: str) -> int:
        return self._state.balances.get(address, 0)

    def nonce_of(self, address: str) -> int:
        return self._state.nonces.get(address, 0)

    def is_contract(self, address: str) -> bool:
        return address in self._state.contracts

    def get_implementation(self, address: str) -> Optional[str]:
        """Implementation address behind a proxy, None for plain contracts."""
        account = self._state.contracts.get(address)
        return account.implementation if account else None

    def code_at(self, address: str) -> type:
        """Contract class that executes for `address` (resolving proxies)."""
        account = self._state.contracts.get(address)
        if account is None:
            raise ValueError(f"No contract at {address}")
        return self._resolve_code(account)

    def has_method(self, address: str, method: str) -> bool:
        account = self._state.contracts.get(address)
        return account is not None and is_external(self._resolve_code(account), method)

    def contract(self, address: str, signer: Optional[Account] = None) -> ContractHandle:
        """Handle to an already deployed contract."""
        if not self.is_contract(address):
            raise ValueError(f"No contract at {address}")
        return ContractHandle(self, address, signer)

    def get_receipt(self, tx_hash: bytes) -> Optional[Receipt]:
        return self.receipts.get(tx_hash)

    def _resolve_code(self, account: ContractAccount) -> type:
        if account.implementation is not None:
            return self._state.contracts[account.implementation].code
        return account.code

    # =========================================================================
    # Execution Environment (used by Contract)
    # =========================================================================

    @property
    def current_frame(self) -> CallFrame:
        if not self._frames:
            raise RuntimeError("No contract execution in progress")
        return self._frames[-1]

    @property
    def exec_timestamp(self) -> int:
        return self._exec_timestamp

    @property
    def exec_block_number(self) -> int:
        return self._exec_block_number

    def emit_log(self, address: str, event: str, args: Dict[str, Any]) -> None:
        self._logs.append(LogEntry(address=address, event=event, args=dict(args), log_index=len(self._logs)))

    def internal_call(self, caller: str, target: str, method: str, args: Tuple, value: int) -> Any:
        """Contract-to-contract call; msg.sender becomes the caller."""
        if not self._frames:
            raise RuntimeError("internal_call outside of execution")
        return self._invoke(caller, target, method, args, value)

    def send_value(self, sender: str, to: str, amount: int) -> None:
        """Move native value, invoking `receive` if the recipient is a contract."""
        if self.is_contract(to):
            if not self.has_method(to, "receive"):
                raise ContractRevert("Contract cannot receive ether")
            self._invoke(sender, to, "receive", (), amount)
        else:
            self._move_value(sender, to, amount)

    def set_implementation(self, proxy: str, implementation: str) -> None:
        """Point a proxy at new code. Called from UUPSUpgradeable.upgrade_to."""
        account = self._state.contracts.get(proxy)
        if account is None or account.implementation is None:
            raise ContractRevert("ERC1967: not a proxy")
        account.implementation = implementation

    # =========================================================================
    # Transaction Building
    # =========================================================================

    def build_transaction(
        self,
        account: Account,
        to: Optional[str],
        method: Optional[str] = None,
        args: Tuple = (),
        value: int = 0,
        gas_price: Optional[int] = None,
        gas_limit: Optional[int] = None,
        code: Optional[type] = None,
        implementation: Optional[str] = None,
    ) -> Transaction:
        """Fill in chain id, nonce and gas defaults for `account`."""
        code_ref = None
        if code is not None:
            code_ref = class_path(code)
            self._code_registry[code_ref] = code

        return Transaction(
            chain_id=self.config.chain_id,
            nonce=self.nonce_of(account.address),
            sender=account.address,
            to=to_checksum_address(to) if to is not None else None,
            method=method,
            args=tuple(args),
            value=value,
            gas_price=self.config.gas_price if gas_price is None else gas_price,
            gas_limit=self.config.gas_limit if gas_limit is None else gas_limit,
            code=code_ref,
            implementation=implementation,
        )

    def transact(
        self,
        account: Account,
        to: str,
        method: str,
        *args: Any,
        value: int = 0,
        gas_price: Optional[int] = None,
    ) -> Receipt:
        """Sign and send a contract call from `account`."""
        tx = self.build_transaction(account, to, method, args, value=value, gas_price=gas_price)
        return self.send_transaction(account.sign_transaction(tx))

    def transfer(self, account: Account, to: str, amount: int, gas_price: Optional[int] = None) -> Receipt:
        """Send native value from `account` to `to`."""
        tx = self.build_transaction(account, to, None, (), value=amount, gas_price=gas_price)
        return self.send_transaction(account.sign_transaction(tx))

    def deploy(self, account: Account, code: type, *args: Any, value: int = 0) -> ContractHandle:
        """Deploy `code`, running its constructor with `args`."""
        if not (isinstance(code, type) and issubclass(code, Contract)):
            raise TypeError(f"{code!r} is not a Contract subclass")
        tx = self.build_transaction(account, None, None, args, value=value, code=code)
        receipt = self.send_transaction(account.sign_transaction(tx))
        return ContractHandle(self, receipt.contract_address, account)

    def deploy_behind_proxy(
        self,
        account: Account,
        implementation: str,
        initializer: Optional[str] = None,
        args: Tuple = (),
    ) -> ContractHandle:
        """Deploy a proxy to `implementation`, calling `initializer` through it."""
        tx = self.build_transaction(account, None, initializer, args, implementation=implementation)
        receipt = self.send_transaction(account.sign_transaction(tx))
        return ContractHandle(self, receipt.contract_address, account)

    # =========================================================================
    # Transaction Validation
    # =========================================================================

    def validate_transaction(self, signed: SignedTransaction) -> Tuple[bool, str]:
        """
        Validate a signed transaction against current state.

        Checks:
        1. Field bounds (value, gas price, gas limit)
        2. Chain id (replay protection)
        3. Addresses and deployment shape
        4. Signature recovers to the sender
        5. Nonce is the sender's next nonce
        6. Sender can pay value + gas_limit * gas_price

        Returns:
            (is_valid, error_message)
        """
        tx = signed.tx

        for ok, err in (
            validate_uint256(tx.value, "value"),
            validate_integer(tx.gas_price, "gas_price", min_val=1),
            validate_integer(tx.gas_limit, "gas_limit", min_val=self.config.intrinsic_gas),
            validate_integer(tx.nonce, "nonce"),
            validate_address(tx.sender, "sender"),
        ):
            if not ok:
                return False, err

        if tx.chain_id != self.config.chain_id:
            return False, f"Wrong chain id: {tx.chain_id} != {self.config.chain_id}"

        if tx.is_deployment:
            if (tx.code is None) == (tx.implementation is None):
                return False, "Deployment needs exactly one of code or implementation"
            if tx.implementation is not None and not self.is_contract(tx.implementation):
                return False, "Proxy implementation is not a contract"
            if tx.code is not None and self._load_code(tx.code) is None:
                return False, f"Unknown contract code {tx.code}"
        else:
            ok, err = validate_address(tx.to, "to")
            if not ok:
                return False, err

        if recover_address(tx.signing_hash(), signed.signature) != tx.sender:
            return False, "Invalid signature"

        expected_nonce = self.nonce_of(tx.sender)
        if tx.nonce != expected_nonce:
            return False, f"Invalid nonce: expected {expected_nonce}, got {tx.nonce}"

        upfront = tx.value + tx.gas_limit * tx.gas_price
        if self.balance_of(tx.sender) < upfront:
            return False, "Insufficient funds for gas * price + value"

        return True, ""

    # =========================================================================
    # Transaction Application
    # =========================================================================

    def send_transaction(self, signed: SignedTransaction) -> Receipt:
        """
        Execute a signed transaction and mine it into a new block.

        Returns:
            Receipt of the successful transaction

        Raises:
            InvalidTransaction: rejected before execution (not mined)
            RevertError: executed but reverted (mined, gas charged)
        """
        is_valid, error = self.validate_transaction(signed)
        if not is_valid:
            raise InvalidTransaction(error)

        tx = signed.tx
        tx_hash = signed.tx_hash
        pending_increase = self._pending_time_increase
        timestamp = self._next_timestamp()
        block_number = self.block_number + 1

        snapshot = copy.deepcopy(self._state)
        self._state.nonces[tx.sender] = tx.nonce + 1

        status, reason = 1, None
        return_value, contract_address = None, None

        with self._execution(timestamp, block_number):
            try:
                return_value, contract_address = self._execute(tx)
                if self._gas_used() > tx.gas_limit:
                    raise ContractRevert("out of gas")
            except ContractRevert as exc:
                status, reason = 0, exc.reason
                return_value, contract_address = None, None
                self._state = snapshot
                self._state.nonces[tx.sender] = tx.nonce + 1
            except Exception:
                self._state = snapshot
                self._pending_time_increase = pending_increase
                raise

            gas_used = min(self._gas_used(), tx.gas_limit)
            logs = list(self._logs) if status else []

        fee = gas_used * tx.gas_price
        self._state.balances[tx.sender] = self.balance_of(tx.sender) - fee
        self.total_burned += fee

        receipt = Receipt(
            tx_hash=tx_hash,
            block_number=block_number,
            sender=tx.sender,
            to=tx.to,
            status=status,
            gas_used=gas_used,
            gas_price=tx.gas_price,
            logs=logs,
            return_value=return_value,
            contract_address=contract_address,
            revert_reason=reason,
        )
        block = Block(
            number=block_number,
            timestamp=timestamp,
            parent_hash=self.latest_block.hash,
            tx_hashes=[tx_hash],
        )
        self.blocks.append(block)
        self.receipts[tx_hash] = receipt

        target = tx.to or contract_address
        logger.debug(
            f"Tx {bytes_to_hex(tx_hash)[:10]}... {tx.sender[:10]} -> {target} "
            f"{tx.method or ('deploy' if tx.is_deployment else 'transfer')} gas={gas_used}"
        )
        if status:
            logger.info(f"Mined block {block_number} ts={timestamp}: {tx.method or 'tx'} ok, gas={gas_used}")
        else:
            logger.warning(f"Mined block {block_number} ts={timestamp}: {tx.method or 'tx'} reverted: {reason}")

        if self.storage_manager:
            self._persist_block(block, [receipt])

        if not status:
            raise RevertError(reason, receipt)
        return receipt

    def _execute(self, tx: Transaction) -> Tuple[Any, Optional[str]]:
        """Run the transaction body. Returns (return_value, created_address)."""
        if tx.is_deployment:
            address = self._contract_address(tx.sender, tx.nonce)
            if tx.implementation is not None:
                self._state.contracts[address] = ContractAccount(code=None, implementation=tx.implementation)
                result = None
                if tx.method:
                    result = self._invoke(tx.sender, address, tx.method, tx.args, tx.value)
                else:
                    self._move_value(tx.sender, address, tx.value)
            else:
                self._state.contracts[address] = ContractAccount(code=self._load_code(tx.code))
                result = self._invoke(tx.sender, address, "constructor", tx.args, tx.value, deploying=True)
            return result, address

        if tx.method is None:
            self._frame_count += 1
            self.send_value(tx.sender, tx.to, tx.value)
            return None, None

        return self._invoke(tx.sender, tx.to, tx.method, tx.args, tx.value), None

    def _invoke(
        self,
        sender: str,
        to: str,
        method: str,
        args: Tuple,
        value: int,
        deploying: bool = False,
    ) -> Any:
        """Dispatch one call frame."""
        account = self._state.contracts.get(to)
        if account is None:
            raise ContractRevert(f"Call to non-contract address {to}")

        code = self._resolve_code(account)
        if not (deploying or is_external(code, method)):
            raise ContractRevert(f"Function {method!r} not found on {code.__name__}")

        fn = getattr(code, method)
        if value and not is_payable(fn):
            raise ContractRevert("Function is not payable")

        self._move_value(sender, to, value)

        self._frames.append(CallFrame(sender=sender, to=to, value=value, method=method))
        self._frame_count += 1
        try:
            return fn(self._bind(to, account, code), *args)
        finally:
            self._frames.pop()

    def _bind(self, address: str, account: ContractAccount, code: type) -> Contract:
        """Create a transient instance whose attributes are the account storage."""
        instance = code.__new__(code)
        instance._address = address
        instance._chain = self
        instance.__dict__ = account.storage
        return instance

    def _move_value(self, sender: str, to: str, amount: int) -> None:
        if amount == 0:
            return
        if amount < 0:
            raise ContractRevert("Negative value transfer")
        if self.balance_of(sender) < amount:
            raise ContractRevert("Insufficient balance for transfer")
        self._state.balances[sender] = self.balance_of(sender) - amount
        self._state.balances[to] = self.balance_of(to) + amount

    def _gas_used(self) -> int:
        return (
            self.config.intrinsic_gas +
            self.config.call_gas * self._frame_count +
            self.config.log_gas * len(self._logs)
        )

    @contextmanager
    def _execution(self, timestamp: int, block_number: int) -> Iterator[None]:
        """Set up and tear down per-execution context."""
        self._exec_timestamp = timestamp
        self._exec_block_number = block_number
        self._frames = []
        self._logs = []
        self._frame_count = 0
        try:
            yield
        finally:
            self._exec_timestamp = None
            self._exec_block_number = None
            self._frames = []
            self._logs = []
            self._frame_count = 0

    def _load_code(self, code_ref: str) -> Optional[type]:
        """Resolve a class path, preferring classes deployed in this process."""
        if code_ref in self._code_registry:
            return self._code_registry[code_ref]

        module_name, _, qualname = code_ref.partition(":")
        try:
            obj: Any = importlib.import_module(module_name)
            for part in qualname.split("."):
                obj = getattr(obj, part)
        except (ImportError, AttributeError):
            return None

        if not (isinstance(obj, type) and issubclass(obj, Contract)):
            return None
        self._code_registry[code_ref] = obj
        return obj

    @staticmethod
    def _contract_address(sender: str, nonce: int) -> str:
        """address = keccak256(sender || nonce)[-20:]"""
        digest = keccak256(hex_to_bytes(sender) + nonce.to_bytes(32, byteorder="big"))
        return to_checksum_address(digest[-20:].hex())

    # =========================================================================
    # Read-only Calls
    # =========================================================================

    def call(
        self,
        address: str,
        method: str,
        *args: Any,
        sender: Optional[str] = None,
        value: int = 0,
    ) -> Any:
        """
        Execute a method against the latest state and discard its writes.

        Raises:
            RevertError: if the method reverts (receipt is None)
        """
        snapshot = copy.deepcopy(self._state)
        with self._execution(self.latest_block.timestamp, self.block_number):
            try:
                return self._invoke(sender or ZERO_ADDRESS, address, method, args, value)
            except ContractRevert as exc:
                raise RevertError(exc.reason) from None
            finally:
                self._state = snapshot

    # =========================================================================
    # Time & Mining
    # =========================================================================

    def _next_timestamp(self) -> int:
        timestamp = self.latest_block.timestamp + self.config.block_time + self._pending_time_increase
        self._pending_time_increase = 0
        return timestamp

    def increase_time(self, seconds: int) -> int:
        """
        Move the clock forward; applies to the next mined block.

        Returns:
            Total pending increase in seconds
        """
        if seconds < 0:
            raise ValueError("Cannot move time backwards")
        self._pending_time_increase += seconds
        if self.storage_manager:
            self._persist_meta()
        return self._pending_time_increase

    def mine(self, blocks: int = 1) -> Block:
        """Mine empty blocks. Returns the last one."""
        if blocks < 1:
            raise ValueError("Must mine at least one block")
        for _ in range(blocks):
            block = Block(
                number=self.block_number + 1,
                timestamp=self._next_timestamp(),
                parent_hash=self.latest_block.hash,
            )
            self.blocks.append(block)
            if self.storage_manager:
                self._persist_block(block, [])
        logger.debug(f"Mined {blocks} empty block(s), now at {self.block_number}")
        return self.latest_block

    # =========================================================================
    # Snapshots
    # =========================================================================

    def snapshot(self) -> int:
        """Capture full chain state. Returns an id for revert()."""
        snapshot_id = self._next_snapshot_id
        self._next_snapshot_id += 1
        self._snapshots[snapshot_id] = (
            copy.deepcopy(self._state),
            list(self.blocks),
            dict(self.receipts),
            self._pending_time_increase,
            self.total_burned,
        )
        return snapshot_id

    def revert(self, snapshot_id: int) -> None:
        """Restore a snapshot. It and every later snapshot are consumed."""
        if snapshot_id not in self._snapshots:
            raise ValueError(f"Unknown snapshot id {snapshot_id}")

        state, blocks, receipts, pending, burned = self._snapshots[snapshot_id]
        self._state = state
        self.blocks = blocks
        self.receipts = receipts
        self._pending_time_increase = pending
        self.total_burned = burned

        for sid in [s for s in self._snapshots if s >= snapshot_id]:
            del self._snapshots[sid]

        if self.storage_manager:
            self.storage_manager.truncate_blocks(self.block_number)
            self._persist_world()

        logger.info(f"Reverted to snapshot {snapshot_id} (block {self.block_number})")

    # =========================================================================
    # Persistence
    # =========================================================================

    def _persist_block(self, block: Block, receipts: List[Receipt]) -> None:
        """Persist a block, its receipts and the resulting world state."""
        self.storage_manager.persist_block(
            block.number,
            block.hash,
            pickle.dumps(block),
            [(r.tx_hash, pickle.dumps(r)) for r in receipts],
            pickle.dumps(self._state),
        )
        self._persist_meta()

    def _persist_world(self) -> None:
        self.storage_manager.save_world_state(pickle.dumps(self._state))
        self._persist_meta()

    def _persist_meta(self) -> None:
        self.storage_manager.save_meta("pending_time_increase", str(self._pending_time_increase))
        self.storage_manager.save_meta("total_burned", str(self.total_burned))

    def _load_from_storage(self) -> bool:
        """Load state from storage manager. Returns False if storage is empty."""
        world_blob, block_blobs, receipt_blobs = self.storage_manager.load_chain()
        if world_blob is None or not block_blobs:
            return False

        stored_chain_id = self.storage_manager.get_meta("chain_id")
        if stored_chain_id is not None and int(stored_chain_id) != self.config.chain_id:
            raise ValueError(f"Stored chain has chain_id {stored_chain_id}, config has {self.config.chain_id}")

        self._state = pickle.loads(world_blob)
        self.blocks = [pickle.loads(blob) for blob in block_blobs]
        for blob in receipt_blobs:
            receipt = pickle.loads(blob)
            self.receipts[receipt.tx_hash] = receipt

        self._pending_time_increase = int(self.storage_manager.get_meta("pending_time_increase") or 0)
        self.total_burned = int(self.storage_manager.get_meta("total_burned") or 0)

        logger.info(
            f"Loaded chain: height={self.block_number}, "
            f"{len(self._state.contracts)} contracts, {len(self.receipts)} receipts"
        )
        return True

    # =========================================================================
    # Utility
    # =========================================================================

    def __repr__(self) -> str:
        return f"Chain(height={self.block_number}, contracts={len(self._state.contracts)})"

    def stats(self) -> dict:
        """Get chain statistics."""
        return {
            "block_number": self.block_number,
            "timestamp": self.time(),
            "contracts": len(self._state.contracts),
            "transactions": len(self.receipts),
            "reverted": sum(1 for r in self.receipts.values() if not r.status),
            "total_burned": self.total_burned,
        }


# =============================================================================
# Test Helpers
# =============================================================================


@contextmanager
def reverts(reason: Optional[str] = None) -> Iterator[None]:
    """
    Assert that the enclosed block reverts, optionally with `reason`.

        with reverts("Only admin can create auctions"):
            auction.connect(bidder).create_auction(600, nft, price, 1)
    """
    try:
        yield
    except RevertError as exc:
        if reason is not None and exc.reason != reason:
            raise AssertionError(f"Expected revert {reason!r}, got {exc.reason!r}") from exc
    else:
        raise AssertionError("Transaction did not revert")
