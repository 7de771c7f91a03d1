"""Price Oracle Module."""

from nftauction.core.oracle.price_feed import MockPriceFeed

__all__ = ["MockPriceFeed"]
