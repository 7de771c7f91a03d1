"""Exceptions raised by contract code and at the transaction boundary."""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from nftauction.core.chain.transaction import Receipt


class ContractRevert(Exception):
    """
    Raised inside contract code to abort the current transaction.

    Never escapes the chain: it is converted to RevertError once the
    transaction's state changes have been rolled back.
    """

    def __init__(self, reason: str = ""):
        super().__init__(reason)
        self.reason = reason


class RevertError(Exception):
    """
    A transaction or call reverted.

    Attributes:
        reason: Revert reason string given to require()
        receipt: Receipt of the mined (failed) transaction, None for calls
    """

    def __init__(self, reason: str, receipt: Optional["Receipt"] = None):
        super().__init__(reason or "execution reverted")
        self.reason = reason
        self.receipt = receipt


class InvalidTransaction(ValueError):
    """A transaction was rejected before execution and was not mined."""
