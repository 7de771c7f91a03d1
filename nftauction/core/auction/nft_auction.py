"""
NftAuction - Upgradeable English auction for NFTs with multi-currency bids.

Conceptual Background:
---------------------
The admin escrows an NFT in the contract and opens an auction with a
starting price (in the native asset) and a duration. Anyone except the
seller can then bid, in the native asset or in any ERC20 that has a price
feed. Bids in different currencies are compared by their USD value:

    usd = amount * answer * 1e18 / (10**feed_decimals * 10**token_decimals)

so 1.1 ETH at 2000 USD and 2200 TEST at 1 USD are worth the same.

Lifecycle:
---------
    Created ──bid_with──▶ Open ──(now >= start + duration)──▶ Due ──end_auction──▶ Closed

- Each accepted bid records the new leader, then refunds the previous
  highest bidder in their currency. bid_with and end_auction are
  non-reentrant.
- end_auction sends the NFT to the winner and the winning funds to the
  seller, or returns the NFT to the seller if nobody bid.
- end_auction reverts with "Auction has not ended" both before the deadline
  and once the auction is already closed.

The contract is deployed behind a UUPS proxy; only the admin can upgrade.
"""

from dataclasses import dataclass, replace
from typing import Optional

from nftauction.crypto import ZERO_ADDRESS, is_valid_address, to_checksum_address
from nftauction.core.chain.contract import initializer, non_reentrant, payable, require, view
from nftauction.core.chain.proxy import UUPSUpgradeable
from nftauction.core.tokens.erc721 import ERC721_RECEIVED
from nftauction.utils.logger import get_logger

logger = get_logger("auction")

NATIVE = ZERO_ADDRESS
NATIVE_DECIMALS = 18
USD_DECIMALS = 18
MIN_DURATION = 10


# =============================================================================
# Auction Record
# =============================================================================


@dataclass
class Auction:
    """
    One auction. Unknown ids read as the all-zero record.

    Attributes:
        seller: Creator of the auction, receives the winning funds
        duration: Seconds from start_time until bidding closes
        starting_price: Minimum bid, in wei of the native asset
        start_time: Block timestamp of creation
        ended: Set once by end_auction
        highest_bidder: Current leader (zero address if no bids)
        highest_bid: Current leading amount, in units of token_address
        nft_contract: ERC721 contract of the escrowed token
        token_id: Escrowed token id
        token_address: Currency of highest_bid (zero address = native)
    """
    seller: str = ZERO_ADDRESS
    duration: int = 0
    starting_price: int = 0
    start_time: int = 0
    ended: bool = False
    highest_bidder: str = ZERO_ADDRESS
    highest_bid: int = 0
    nft_contract: str = ZERO_ADDRESS
    token_id: int = 0
    token_address: str = ZERO_ADDRESS

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration

    @property
    def has_bids(self) -> bool:
        return self.highest_bidder != ZERO_ADDRESS


# =============================================================================
# Auction Contract
# =============================================================================


class NftAuction(UUPSUpgradeable):
    """
    Auction house contract.

    Storage:
        _admin: Sole account allowed to create/end auctions and configure feeds
        _auctions: auction id -> Auction
        _next_auction_id: Id of the next auction
        _price_feeds: currency address -> price feed address
    """

    @initializer
    def initialize(self) -> None:
        self._admin = self.msg_sender
        self._auctions = {}
        self._next_auction_id = 0
        self._price_feeds = {}

    # =========================================================================
    # Admin
    # =========================================================================

    def set_price_feed(self, currency: str, feed: str) -> None:
        """Use `feed` to price `currency` (zero address = native asset)."""
        require(self.msg_sender == self._admin, "Only admin can set price feeds")
        require(self.is_contract(feed), "Invalid price feed")
        currency = _currency_key(currency)
        self._price_feeds[currency] = feed
        self.emit("PriceFeedSet", currency=currency, feed=feed)

    def _authorize_upgrade(self, new_implementation: str) -> None:
        require(self.msg_sender == self._admin, "Only admin can upgrade")

    # =========================================================================
    # Auction Lifecycle
    # =========================================================================

    def create_auction(self, duration: int, nft_address: str, starting_price: int, token_id: int) -> int:
        """
        Escrow `token_id` and open an auction for it.

        The NFT must be approved for this contract beforehand.

        Returns:
            New auction id
        """
        seller = self.msg_sender
        require(seller == self._admin, "Only admin can create auctions")
        require(duration > MIN_DURATION, "Duration must be greater than 10s")
        require(starting_price > 0, "Starting price must be greater than 0")
        require(self.is_contract(nft_address), "Invalid NFT contract")

        self.call(nft_address, "transfer_from", seller, self.address, token_id)

        auction_id = self._next_auction_id
        self._next_auction_id += 1
        self._auctions[auction_id] = Auction(
            seller=seller,
            duration=duration,
            starting_price=starting_price,
            start_time=self.block_timestamp,
            nft_contract=nft_address,
            token_id=token_id,
        )

        self.emit(
            "AuctionCreated",
            auction_id=auction_id,
            seller=seller,
            nft_contract=nft_address,
            token_id=token_id,
            starting_price=starting_price,
            duration=duration,
        )
        logger.info(f"Auction {auction_id} created: token {token_id}, start price {starting_price}, {duration}s")
        return auction_id

    @payable
    @non_reentrant
    def bid_with(self, auction_id: int, amount: int, token_address: str) -> None:
        """
        Bid `amount` of `token_address` (zero address = native asset).

        Native bids must send exactly `amount` as value. Token bids must have
        approved this contract for `amount` and send no value.
        """
        require(auction_id in self._auctions, "Auction does not exist")
        auction = self._auctions[auction_id]
        bidder = self.msg_sender
        token_address = _currency_key(token_address)

        require(
            not auction.ended and self.block_timestamp < auction.end_time,
            "Auction has ended",
        )
        require(bidder != auction.seller, "Seller cannot bid")
        require(amount > 0, "Bid amount must be greater than 0")

        if token_address == NATIVE:
            require(self.msg_value == amount, "ETH value must equal bid amount")
        else:
            require(self.msg_value == 0, "ETH not accepted for token bids")

        bid_value = self._usd_value(token_address, amount)
        require(
            bid_value >= self._usd_value(NATIVE, auction.starting_price),
            "Bid must be at least the starting price",
        )
        if auction.has_bids:
            require(
                bid_value > self._usd_value(auction.token_address, auction.highest_bid),
                "Bid must be higher than the current highest bid",
            )

        # Record the new leader before any external call
        self._auctions[auction_id] = replace(
            auction,
            highest_bidder=bidder,
            highest_bid=amount,
            token_address=token_address,
        )

        if token_address != NATIVE:
            self.call(token_address, "transfer_from", bidder, self.address, amount)

        if auction.has_bids:
            self._pay(auction.token_address, auction.highest_bidder, auction.highest_bid)

        self.emit("BidPlaced", auction_id=auction_id, bidder=bidder, amount=amount, token_address=token_address)
        logger.info(f"Auction {auction_id}: bid {amount} of {_currency_label(token_address)} by {bidder[:10]}")

    @non_reentrant
    def end_auction(self, auction_id: int) -> None:
        """
        Settle a due auction: NFT to the winner, funds to the seller.

        The NFT moves with a plain transfer, so a winner that does not
        implement on_erc721_received cannot block settlement.
        """
        require(auction_id in self._auctions, "Auction does not exist")
        require(self.msg_sender == self._admin, "Only admin can end auctions")

        auction = self._auctions[auction_id]
        require(
            not auction.ended and self.block_timestamp >= auction.end_time,
            "Auction has not ended",
        )

        auction = replace(auction, ended=True)
        self._auctions[auction_id] = auction

        if auction.has_bids:
            self.call(auction.nft_contract, "transfer_from", self.address, auction.highest_bidder, auction.token_id)
            self._pay(auction.token_address, auction.seller, auction.highest_bid)
        else:
            self.call(auction.nft_contract, "transfer_from", self.address, auction.seller, auction.token_id)

        self.emit(
            "AuctionEnded",
            auction_id=auction_id,
            winner=auction.highest_bidder,
            amount=auction.highest_bid,
            token_address=auction.token_address,
        )
        if auction.has_bids:
            logger.info(f"Auction {auction_id} ended: won by {auction.highest_bidder[:10]} for {auction.highest_bid}")
        else:
            logger.info(f"Auction {auction_id} ended without bids, NFT returned to seller")

    # =========================================================================
    # Views
    # =========================================================================

    @view
    def auctions(self, auction_id: int) -> Auction:
        return self._auctions.get(auction_id, Auction())

    @view
    def auction_count(self) -> int:
        return self._next_auction_id

    @view
    def admin(self) -> str:
        return self._admin

    @view
    def price_feed(self, currency: str) -> str:
        return self._price_feeds.get(_currency_key(currency), ZERO_ADDRESS)

    @view
    def get_chainlink_data_feed_latest_answer(self, currency: str) -> int:
        """Latest raw answer of the feed configured for `currency`."""
        feed = self._price_feeds.get(_currency_key(currency))
        require(feed is not None, "Price feed not set")
        _, answer, _, _, _ = self.call(feed, "latest_round_data")
        return answer

    @view
    def usd_value(self, currency: str, amount: int) -> int:
        """USD value of `amount` of `currency`, with 18 decimals."""
        return self._usd_value(_currency_key(currency), amount)

    def on_erc721_received(self, operator: str, sender: str, token_id: int, data: bytes = b"") -> bytes:
        return ERC721_RECEIVED

    # =========================================================================
    # Internals
    # =========================================================================

    def _usd_value(self, currency: str, amount: int) -> int:
        feed = self._price_feeds.get(currency)
        require(feed is not None, "Price feed not set")

        _, answer, _, _, _ = self.call(feed, "latest_round_data")
        require(answer > 0, "Invalid price")
        feed_decimals = self.call(feed, "decimals")

        if currency == NATIVE:
            currency_decimals = NATIVE_DECIMALS
        else:
            currency_decimals = self.call(currency, "decimals")

        return amount * answer * 10**USD_DECIMALS // (10**feed_decimals * 10**currency_decimals)

    def _pay(self, currency: str, to: str, amount: int) -> None:
        if currency == NATIVE:
            self.send_value(to, amount)
        else:
            self.call(currency, "transfer", to, amount)


def _currency_key(currency: str) -> str:
    """Checksummed form of a currency address, used as the feed key."""
    require(is_valid_address(currency), "Invalid currency address")
    return to_checksum_address(currency)


def _currency_label(token_address: Optional[str]) -> str:
    return "ETH" if token_address in (None, NATIVE) else token_address[:10]
