"""
Token Contracts.

Mock ERC20 and ERC721 contracts used as bid currencies and auctioned
assets on the devnet and in tests.
"""

from nftauction.core.tokens.erc20 import MockERC20
from nftauction.core.tokens.erc721 import ERC721_RECEIVED, MockNFT

__all__ = ["MockERC20", "MockNFT", "ERC721_RECEIVED"]
