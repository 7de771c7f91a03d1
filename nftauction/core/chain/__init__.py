"""
Simulated Chain Module.

An automining, single-process blockchain for running contract code:
- Accounts, signed transactions, receipts and blocks
- Contract base class with require/view/payable modifiers
- UUPS proxies for upgradeable contracts
- Time travel and snapshots for tests
"""

from nftauction.core.chain.account import Account, derive_accounts
from nftauction.core.chain.chain import Chain, CallFrame, ContractAccount, WorldState, reverts
from nftauction.core.chain.contract import (
    Contract,
    ContractHandle,
    initializer,
    non_reentrant,
    payable,
    require,
    view,
)
from nftauction.core.chain.errors import ContractRevert, InvalidTransaction, RevertError
from nftauction.core.chain.proxy import UUPSUpgradeable, deploy_proxy, upgrade_proxy
from nftauction.core.chain.transaction import (
    Block,
    LogEntry,
    Receipt,
    SignedTransaction,
    Transaction,
)

__all__ = [
    "Account",
    "derive_accounts",
    "Chain",
    "CallFrame",
    "ContractAccount",
    "WorldState",
    "reverts",
    "Contract",
    "ContractHandle",
    "initializer",
    "non_reentrant",
    "payable",
    "require",
    "view",
    "ContractRevert",
    "InvalidTransaction",
    "RevertError",
    "UUPSUpgradeable",
    "deploy_proxy",
    "upgrade_proxy",
    "Block",
    "LogEntry",
    "Receipt",
    "SignedTransaction",
    "Transaction",
]
