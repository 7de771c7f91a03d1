"""
Contract - Base class and modifiers for contract code.

Conceptual Background:
---------------------
A contract is a Python class whose instances are transient views over an
account's storage. The chain never calls __init__: for every call frame it
binds a fresh instance whose __dict__ *is* the account's storage dict, so
attribute writes are storage writes and roll back with the transaction.

    class Counter(Contract):
        def constructor(self, start):
            self._count = start

        @view
        def count(self):
            return self._count

        def increment(self):
            require(self.msg_sender == self._owner, "Not owner")
            self._count += 1

Conventions:
-----------
- Public methods are the external interface. Names starting with "_" and
  the helpers defined on Contract itself are never dispatched externally.
- Storage attributes are underscore-prefixed so they cannot shadow methods.
- require() aborts the whole transaction with a reason string.
"""

import functools
from typing import Any, Callable, Optional, TYPE_CHECKING

from nftauction.core.chain.errors import ContractRevert

if TYPE_CHECKING:
    from nftauction.core.chain.chain import Chain
    from nftauction.core.chain.account import Account
    from nftauction.core.chain.transaction import Receipt


# =============================================================================
# Modifiers
# =============================================================================


def require(condition: Any, reason: str = "") -> None:
    """Revert the current transaction unless `condition` holds."""
    if not condition:
        raise ContractRevert(reason)


def view(fn: Callable) -> Callable:
    """Mark a method as read-only. Handles call it without a transaction."""
    fn._contract_view = True
    return fn


def payable(fn: Callable) -> Callable:
    """Allow a method to receive native value."""
    fn._contract_payable = True
    return fn


def initializer(fn: Callable) -> Callable:
    """Allow a method to run at most once per storage (proxy initializers)."""

    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs):
        require(
            not self.__dict__.get("_initialized", False),
            "Initializable: contract is already initialized",
        )
        self._initialized = True
        return fn(self, *args, **kwargs)

    return wrapper


def non_reentrant(fn: Callable) -> Callable:
    """Reject calls into any non_reentrant method while one is running."""

    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs):
        require(not self.__dict__.get("_entered", False), "ReentrancyGuard: reentrant call")
        self._entered = True
        try:
            return fn(self, *args, **kwargs)
        finally:
            self._entered = False

    return wrapper


def is_view(fn: Callable) -> bool:
    return getattr(fn, "_contract_view", False)


def is_payable(fn: Callable) -> bool:
    return getattr(fn, "_contract_payable", False)


# =============================================================================
# Contract Base
# =============================================================================


class Contract:
    """
    Base class for contract code.

    Exposes the execution environment of the current call frame
    (msg.sender, msg.value, block.timestamp) and the operations a contract
    may perform on the chain (calls, value transfers, events).
    """

    __slots__ = ("_address", "_chain")

    def constructor(self, *args) -> None:
        """Runs once at deployment. Override to initialize storage."""

    # =========================================================================
    # Execution Environment
    # =========================================================================

    @property
    def address(self) -> str:
        return self._address

    @property
    def msg_sender(self) -> str:
        return self._chain.current_frame.sender

    @property
    def msg_value(self) -> int:
        return self._chain.current_frame.value

    @property
    def block_timestamp(self) -> int:
        return self._chain.exec_timestamp

    @property
    def block_number(self) -> int:
        return self._chain.exec_block_number

    # =========================================================================
    # Chain Operations
    # =========================================================================

    def emit(self, event: str, **args: Any) -> None:
        """Emit an event log."""
        self._chain.emit_log(self._address, event, args)

    def call(self, target: str, method: str, *args: Any, value: int = 0) -> Any:
        """Call another contract. Reverts inside it revert this transaction too."""
        return self._chain.internal_call(self._address, target, method, args, value)

    def send_value(self, to: str, amount: int) -> None:
        """Send native value held by this contract."""
        self._chain.send_value(self._address, to, amount)

    def balance(self, address: Optional[str] = None) -> int:
        """Native balance of `address` (default: this contract)."""
        return self._chain.balance_of(address or self._address)

    def is_contract(self, address: str) -> bool:
        return self._chain.is_contract(address)

    def implements(self, address: str, method: str) -> bool:
        """Whether the contract at `address` exposes `method`."""
        return self._chain.has_method(address, method)


# Helpers on the base class are internal even though they are public names
INTERNAL_NAMES = frozenset(name for name in vars(Contract) if not name.startswith("__"))


def is_external(code: type, method: str) -> bool:
    """Whether `method` may be invoked from outside the contract."""
    if not method or method.startswith("_") or method in INTERNAL_NAMES:
        return False
    return callable(getattr(code, method, None))


# =============================================================================
# Contract Handle
# =============================================================================


class ContractHandle:
    """
    Client-side handle to a deployed contract.

    Attribute access returns a callable for the contract method:
    - @view methods are executed read-only and return their result
    - other methods are sent as signed transactions and return a Receipt

        auction.connect(bidder).bid_with(0, amount, ZERO_ADDRESS, value=amount)
        auction.auctions(0).highest_bidder
    """

    def __init__(self, chain: "Chain", address: str, signer: Optional["Account"] = None):
        self._chain = chain
        self._address = address
        self._signer = signer

    @property
    def address(self) -> str:
        return self._address

    @property
    def signer(self) -> Optional["Account"]:
        return self._signer

    def connect(self, signer: "Account") -> "ContractHandle":
        """Return a handle that sends transactions from `signer`."""
        return ContractHandle(self._chain, self._address, signer)

    def __getattr__(self, name: str) -> Callable:
        if name.startswith("_"):
            raise AttributeError(name)

        code = self._chain.code_at(self._address)
        if not is_external(code, name):
            raise AttributeError(f"{code.__name__} has no external method {name!r}")

        if is_view(getattr(code, name)):
            def read(*args: Any) -> Any:
                sender = self._signer.address if self._signer else None
                return self._chain.call(self._address, name, *args, sender=sender)
            return read

        def send(*args: Any, value: int = 0, gas_price: Optional[int] = None) -> "Receipt":
            if self._signer is None:
                raise ValueError("No signer connected; use .connect(account)")
            return self._chain.transact(
                self._signer, self._address, name, *args, value=value, gas_price=gas_price
            )
        return send

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ContractHandle):
            return self._address == other._address
        if isinstance(other, str):
            return self._address == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._address)

    def __str__(self) -> str:
        return self._address

    def __repr__(self) -> str:
        code = self._chain.code_at(self._address)
        return f"<{code.__name__} {self._address}>"
