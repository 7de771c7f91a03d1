"""
Deployment helpers for the auction house.

Wires together the contracts a running marketplace needs: the NFT
collection, the auction proxy, price feeds and optional ERC20 currencies.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from nftauction.crypto import ZERO_ADDRESS
from nftauction.core.auction.nft_auction import NftAuction
from nftauction.core.chain.account import Account
from nftauction.core.chain.chain import Chain
from nftauction.core.chain.contract import ContractHandle
from nftauction.core.chain.proxy import deploy_proxy
from nftauction.core.oracle.price_feed import MockPriceFeed
from nftauction.core.tokens.erc20 import MockERC20
from nftauction.core.tokens.erc721 import MockNFT
from nftauction.utils.logger import get_logger

logger = get_logger("auction.deploy")

# 2000 USD with 8 decimals, the usual ETH/USD feed format
DEFAULT_ETH_PRICE = 2000 * 10**8


@dataclass
class AuctionHouse:
    """
    Handles to a deployed auction house, all connected to the admin.

    Attributes:
        admin: Account that owns the auction contract
        nft: MockNFT collection
        auction: NftAuction proxy
        feeds: currency address -> price feed handle
        tokens: symbol -> ERC20 handle
    """
    admin: Account
    nft: ContractHandle
    auction: ContractHandle
    feeds: Dict[str, ContractHandle] = field(default_factory=dict)
    tokens: Dict[str, ContractHandle] = field(default_factory=dict)

    def add_price_feed(self, chain: Chain, currency: str, answer: int, decimals: int = 8) -> ContractHandle:
        """Deploy a feed for `currency` and register it with the auction."""
        feed = chain.deploy(self.admin, MockPriceFeed, answer, decimals)
        self.auction.set_price_feed(currency, feed.address)
        self.feeds[currency] = feed
        return feed

    def add_token(
        self,
        chain: Chain,
        name: str,
        symbol: str,
        initial_supply: int,
        usd_price: int,
        decimals: int = 18,
        feed_decimals: int = 8,
    ) -> ContractHandle:
        """Deploy an ERC20 bid currency priced at `usd_price` (feed units)."""
        token = chain.deploy(self.admin, MockERC20, name, symbol, initial_supply, decimals)
        self.add_price_feed(chain, token.address, usd_price, feed_decimals)
        self.tokens[symbol] = token
        logger.info(f"Registered bid currency {symbol} at {token.address}")
        return token

    def mint_and_approve(self, token_id: int, owner: Optional[Account] = None) -> None:
        """Mint `token_id` to `owner` (default admin) and approve the auction."""
        owner = owner or self.admin
        self.nft.mint(owner.address, token_id)
        self.nft.connect(owner).approve(self.auction.address, token_id)


def deploy_auction_house(
    chain: Chain,
    admin: Account,
    eth_price: Optional[int] = None,
) -> AuctionHouse:
    """
    Deploy a MockNFT and an NftAuction proxy owned by `admin`.

    Args:
        chain: Target chain
        admin: Deployer; becomes the auction admin
        eth_price: If given, also deploy and register a native-asset feed

    Returns:
        AuctionHouse with handles connected to `admin`
    """
    nft = chain.deploy(admin, MockNFT)
    auction = deploy_proxy(chain, admin, NftAuction)
    house = AuctionHouse(admin=admin, nft=nft, auction=auction)

    if eth_price is not None:
        house.add_price_feed(chain, ZERO_ADDRESS, eth_price)

    logger.info(f"Auction house deployed: auction={auction.address}, nft={nft.address}")
    return house
