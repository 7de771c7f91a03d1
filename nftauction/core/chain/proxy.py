"""
UUPS Proxies - Upgradeable contracts behind a stable address.

Conceptual Background:
---------------------
A proxy account owns storage and balance but no code of its own. Every call
to it executes the code of its *implementation* against the proxy's storage
(delegatecall). Upgrading swaps the implementation and keeps the storage,
so users keep talking to the same address.

In the UUPS pattern the upgrade function lives in the implementation, not
the proxy:

    proxy ──delegates──▶ Implementation V1 (upgrade_to, _authorize_upgrade)
          ──upgrade_to(V2)──▶ Implementation V2

Implementations never run their constructor through the proxy, so state is
set up by an initializer that may only run once.
"""

from typing import Any, Optional, Tuple

from nftauction.core.chain.contract import Contract, ContractHandle, require
from nftauction.utils.logger import get_logger

logger = get_logger("proxy")


class UUPSUpgradeable(Contract):
    """
    Base for implementations that can be upgraded through their proxy.

    Subclasses must define _authorize_upgrade() to restrict who upgrades.
    """

    def constructor(self) -> None:
        # Lock the implementation's own storage against initialization
        self._initialized = True

    def upgrade_to(self, new_implementation: str) -> None:
        """Point the proxy at `new_implementation`."""
        require(
            self._chain.get_implementation(self.address) is not None,
            "Function must be called through delegatecall",
        )
        self._authorize_upgrade(new_implementation)
        require(self.is_contract(new_implementation), "ERC1967: new implementation is not a contract")

        self._chain.set_implementation(self.address, new_implementation)
        self.emit("Upgraded", implementation=new_implementation)

    def _authorize_upgrade(self, new_implementation: str) -> None:
        raise NotImplementedError


def deploy_proxy(
    chain,
    account,
    implementation_cls: type,
    args: Tuple[Any, ...] = (),
    initializer: Optional[str] = "initialize",
) -> ContractHandle:
    """
    Deploy `implementation_cls` and a proxy in front of it.

    Equivalent of OpenZeppelin's upgrades.deployProxy(..., {kind: "uups"}).

    Returns:
        Handle to the proxy, connected to `account`
    """
    implementation = chain.deploy(account, implementation_cls)
    proxy = chain.deploy_behind_proxy(account, implementation.address, initializer, args)
    logger.info(f"Deployed {implementation_cls.__name__} proxy {proxy.address} -> {implementation.address}")
    return proxy


def upgrade_proxy(chain, account, proxy_address: str, new_implementation_cls: type) -> ContractHandle:
    """Deploy new code and upgrade the proxy at `proxy_address` to it."""
    implementation = chain.deploy(account, new_implementation_cls)
    chain.transact(account, proxy_address, "upgrade_to", implementation.address)
    logger.info(f"Upgraded proxy {proxy_address} -> {new_implementation_cls.__name__} at {implementation.address}")
    return ContractHandle(chain, proxy_address, account)
