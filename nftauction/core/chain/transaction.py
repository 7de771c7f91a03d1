"""
Transaction - Signed calls into the simulated chain.

Conceptual Background:
---------------------
Every state change on the chain is a Transaction signed by an account.
A transaction is one of three kinds:

1. Value transfer: `to` is set, `method` is None
2. Contract call: `to` and `method` are set
3. Deployment: `to` is None and either `code` (a contract class path) or
   `implementation` (an existing contract to put behind a proxy) is set

Signing:
-------
The signing hash is keccak256 over a canonical JSON encoding of every field
except the signature. The chain recovers the signer from the signature and
rejects the transaction if it does not match `sender`, so a transaction can
only be submitted by the holder of the sender's key.

Receipts:
--------
Each mined transaction produces a Receipt. A reverted transaction is still
mined: it consumes the nonce and pays gas, but its state changes are
discarded and `status` is 0.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from nftauction.crypto import keccak256, bytes_to_hex


# =============================================================================
# Canonical Encoding
# =============================================================================


def _encode_value(value: Any) -> Any:
    """JSON fallback for argument types that json cannot encode directly."""
    if isinstance(value, (bytes, bytearray)):
        return {"bytes": bytes(value).hex()}
    if isinstance(value, type):
        return {"class": class_path(value)}
    if isinstance(value, tuple):
        return list(value)
    raise TypeError(f"Unsupported argument type: {type(value).__name__}")


def class_path(cls: type) -> str:
    """Importable 'module:QualName' reference for a contract class."""
    return f"{cls.__module__}:{cls.__qualname__}"


# =============================================================================
# Transaction
# =============================================================================


@dataclass
class Transaction:
    """
    An unsigned transaction.

    Attributes:
        chain_id: Chain the transaction is valid on (replay protection)
        nonce: Sender's transaction count
        sender: Checksummed sender address
        to: Target address, None for deployments
        method: Contract method to invoke, None for plain transfers
        args: Positional method (or constructor) arguments
        value: Native value in wei sent along
        gas_price: Wei per gas unit
        gas_limit: Maximum gas the sender will pay for
        code: Contract class path for deployments
        implementation: Implementation address for proxy deployments
    """
    chain_id: int
    nonce: int
    sender: str
    to: Optional[str]
    method: Optional[str] = None
    args: Tuple[Any, ...] = ()
    value: int = 0
    gas_price: int = 0
    gas_limit: int = 0
    code: Optional[str] = None
    implementation: Optional[str] = None

    @property
    def is_deployment(self) -> bool:
        return self.to is None

    def signing_payload(self) -> bytes:
        """Canonical byte representation for hashing."""
        payload = [
            self.chain_id,
            self.nonce,
            self.sender,
            self.to,
            self.method,
            list(self.args),
            self.value,
            self.gas_price,
            self.gas_limit,
            self.code,
            self.implementation,
        ]
        return json.dumps(payload, default=_encode_value, separators=(",", ":")).encode()

    def signing_hash(self) -> bytes:
        return keccak256(self.signing_payload())


@dataclass
class SignedTransaction:
    """A transaction plus its 65-byte recoverable signature."""
    tx: Transaction
    signature: bytes

    @property
    def tx_hash(self) -> bytes:
        return keccak256(self.tx.signing_payload() + self.signature)


# =============================================================================
# Logs, Receipts, Blocks
# =============================================================================


@dataclass
class LogEntry:
    """An event emitted by a contract during execution."""
    address: str
    event: str
    args: Dict[str, Any]
    log_index: int = 0


@dataclass
class Receipt:
    """
    Outcome of a mined transaction.

    Attributes:
        tx_hash: Transaction hash
        block_number: Block that includes the transaction
        sender: Transaction sender
        to: Target address (None for deployments)
        status: 1 on success, 0 on revert
        gas_used: Gas consumed
        gas_price: Wei per gas unit paid
        logs: Events emitted (empty on revert)
        return_value: Value returned by the called method
        contract_address: Address created by a deployment
        revert_reason: Reason string when status is 0
    """
    tx_hash: bytes
    block_number: int
    sender: str
    to: Optional[str]
    status: int
    gas_used: int
    gas_price: int
    logs: List[LogEntry] = field(default_factory=list)
    return_value: Any = None
    contract_address: Optional[str] = None
    revert_reason: Optional[str] = None

    @property
    def fee(self) -> int:
        """Total wei paid for gas."""
        return self.gas_used * self.gas_price

    def events(self, name: str) -> List[LogEntry]:
        """All logs with the given event name."""
        return [log for log in self.logs if log.event == name]

    def __repr__(self) -> str:
        return (
            f"Receipt(tx={bytes_to_hex(self.tx_hash)[:10]}..., block={self.block_number}, "
            f"status={self.status}, gas={self.gas_used})"
        )


@dataclass
class Block:
    """A mined block. Blocks hold at most one transaction (automine)."""
    number: int
    timestamp: int
    parent_hash: bytes
    tx_hashes: List[bytes] = field(default_factory=list)

    @property
    def hash(self) -> bytes:
        header = (
            self.number.to_bytes(8, byteorder="big") +
            self.timestamp.to_bytes(8, byteorder="big") +
            self.parent_hash +
            b"".join(self.tx_hashes)
        )
        return keccak256(header)
