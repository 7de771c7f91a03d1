"""
NFT Auction Module.

Provides the upgradeable auction contract and helpers to deploy it:
- Auction record and NftAuction contract
- AuctionHouse bundle (NFT collection, auction proxy, feeds, currencies)
"""

from nftauction.core.auction.nft_auction import Auction, NftAuction
from nftauction.core.auction.deploy import (
    AuctionHouse,
    DEFAULT_ETH_PRICE,
    deploy_auction_house,
)

__all__ = [
    "Auction",
    "NftAuction",
    "AuctionHouse",
    "DEFAULT_ETH_PRICE",
    "deploy_auction_house",
]
