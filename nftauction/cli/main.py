"""
nftauction CLI - Command Line Interface for the NFT auction devnet

Main entry point for all CLI commands. `devnet` and `auction` commands
operate on a persistent chain stored under --data-dir, so state carries
over between invocations. `demo` runs entirely in memory.
"""

from contextlib import contextmanager
from pathlib import Path

import click

from nftauction.utils.logger import setup_logging, get_logger

logger = get_logger("cli")

DB_NAME = "chain.db"

# Metadata keys for deployed contracts
META_AUCTION = "auction_address"
META_NFT = "nft_address"
META_TOKEN = "token_address"

DEVNET_NFT_IDS = range(1, 6)
DEVNET_TOKEN_GRANT = "10000"


def _fail(message: str):
    click.echo(f"❌ {message}")
    raise click.exceptions.Exit(1)


@contextmanager
def _open_chain(ctx):
    """Open the persistent devnet chain, closing storage afterwards."""
    from nftauction.core.chain import Chain
    from nftauction.core.storage import StorageManager

    storage = StorageManager(ctx.obj["data_dir"], db_name=DB_NAME)
    try:
        yield Chain(ctx.obj["config"], storage_manager=storage)
    finally:
        storage.close()


def _load_house(chain):
    """Handles to the deployed contracts, connected to the admin account."""
    storage = chain.storage_manager
    addresses = {key: storage.get_meta(key) for key in (META_AUCTION, META_NFT, META_TOKEN)}
    if not addresses[META_AUCTION]:
        _fail("Devnet not initialized. Run: nftauction devnet init")

    admin = chain.accounts[0]
    return (
        chain.contract(addresses[META_AUCTION], admin),
        chain.contract(addresses[META_NFT], admin),
        chain.contract(addresses[META_TOKEN], admin),
    )


def _account(chain, index: int):
    if not 0 <= index < len(chain.accounts):
        _fail(f"Account index must be between 0 and {len(chain.accounts) - 1}")
    return chain.accounts[index]


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--data-dir", default=None, help="Data directory (default: config data_dir)")
@click.option("--config", "config_path", default=None, help="Path to a .env file")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, data_dir, config_path):
    """NFT auction devnet - upgradeable multi-currency NFT auctions"""
    import logging

    from pydantic import ValidationError
    from nftauction.core.config import load_config

    try:
        config = load_config(config_path)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="configuration")

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["data_dir"] = Path(data_dir).expanduser() if data_dir else Path(config.data_dir).expanduser()
    ctx.obj["data_dir"].mkdir(parents=True, exist_ok=True)

    level = logging.DEBUG if debug else getattr(logging, config.log_level.upper(), logging.INFO)
    setup_logging(level=level, log_dir=str(ctx.obj["data_dir"] / "logs"))


# =============================================================================
# Demo Command
# =============================================================================


@cli.command("demo")
@click.pass_context
def demo(ctx):
    """Run an in-memory auction from creation to settlement"""
    from nftauction.crypto import ZERO_ADDRESS
    from nftauction.core.chain import Chain
    from nftauction.core.auction import DEFAULT_ETH_PRICE, deploy_auction_house
    from nftauction.utils.units import format_ether, parse_ether

    click.echo("=" * 60)
    click.echo("  NFT AUCTION - DEMO")
    click.echo("=" * 60)
    click.echo()

    # Setup
    click.echo("📦 Starting in-memory chain...")
    chain = Chain(ctx.obj["config"])
    admin, bidder = chain.accounts[0], chain.accounts[1]
    click.echo(f"  ✓ Admin:  {admin.address}")
    click.echo(f"  ✓ Bidder: {bidder.address}")
    click.echo()

    click.echo("🏛️  Deploying auction house...")
    house = deploy_auction_house(chain, admin, eth_price=DEFAULT_ETH_PRICE)
    click.echo(f"  ✓ NftAuction proxy: {house.auction.address}")
    click.echo(f"  ✓ Implementation:   {chain.get_implementation(house.auction.address)}")
    click.echo(f"  ✓ MockNFT:          {house.nft.address}")
    click.echo(f"  ✓ ETH/USD feed:     {house.auction.get_chainlink_data_feed_latest_answer(ZERO_ADDRESS)}")
    click.echo()

    token_id = 1
    duration = 600
    click.echo(f"🖼️  Creating auction for NFT #{token_id} (start 1 ETH, {duration}s)...")
    house.mint_and_approve(token_id)
    receipt = house.auction.create_auction(duration, house.nft.address, parse_ether("1"), token_id)
    auction_id = receipt.return_value
    click.echo(f"  ✓ Auction #{auction_id} created, NFT owner: {house.nft.owner_of(token_id)}")
    click.echo()

    seller_before = chain.balance_of(admin.address)

    click.echo("💸 Bidder bids 2 ETH...")
    bid = parse_ether("2")
    house.auction.connect(bidder).bid_with(auction_id, bid, ZERO_ADDRESS, value=bid)
    info = house.auction.auctions(auction_id)
    click.echo(f"  ✓ Highest bid: {format_ether(info.highest_bid)} ETH by {info.highest_bidder}")
    click.echo()

    click.echo(f"⏩ Advancing clock {duration}s...")
    chain.increase_time(duration)
    chain.mine()
    click.echo(f"  ✓ Block {chain.block_number} at {chain.time()}")
    click.echo()

    click.echo("⚖️  Ending auction...")
    end_receipt = house.auction.end_auction(auction_id)
    info = house.auction.auctions(auction_id)
    gained = chain.balance_of(admin.address) - seller_before
    click.echo(f"  ✓ Ended: {info.ended}")
    click.echo(f"  ✓ NFT owner: {house.nft.owner_of(token_id)}")
    click.echo(f"  ✓ Seller received: {format_ether(gained)} ETH (after {format_ether(end_receipt.fee)} ETH gas)")
    click.echo()

    click.echo("📊 Chain Statistics:")
    for key, value in chain.stats().items():
        click.echo(f"  {key}: {value}")
    click.echo()
    click.echo("✅ Demo complete!")


# =============================================================================
# Devnet Commands
# =============================================================================


@cli.group()
def devnet():
    """Persistent devnet management"""
    pass


@devnet.command("init")
@click.option("--reset", is_flag=True, help="Delete existing chain data first")
@click.pass_context
def devnet_init(ctx, reset):
    """Deploy the auction house, price feeds and a test token"""
    from nftauction.crypto import ZERO_ADDRESS
    from nftauction.core.auction import DEFAULT_ETH_PRICE, deploy_auction_house
    from nftauction.utils.units import parse_ether

    data_dir = ctx.obj["data_dir"]
    if reset:
        for path in data_dir.glob(f"{DB_NAME}*"):
            path.unlink()
        click.echo("🗑️  Existing chain data removed")

    with _open_chain(ctx) as chain:
        storage = chain.storage_manager
        if storage.get_meta(META_AUCTION):
            click.echo("Devnet already initialized (use --reset to start over).")
            return

        admin = chain.accounts[0]
        click.echo("🏛️  Deploying auction house...")
        house = deploy_auction_house(chain, admin, eth_price=DEFAULT_ETH_PRICE)
        token = house.add_token(chain, "Test Token", "TEST", parse_ether("1000000"), 1 * 10**8)

        for token_id in DEVNET_NFT_IDS:
            house.nft.mint(admin.address, token_id)
        for account in chain.accounts[1:]:
            token.transfer(account.address, parse_ether(DEVNET_TOKEN_GRANT))

        storage.save_meta(META_AUCTION, house.auction.address)
        storage.save_meta(META_NFT, house.nft.address)
        storage.save_meta(META_TOKEN, token.address)

        click.echo(f"  ✓ NftAuction: {house.auction.address}")
        click.echo(f"  ✓ MockNFT:    {house.nft.address} (tokens {DEVNET_NFT_IDS.start}-{DEVNET_NFT_IDS.stop - 1} owned by admin)")
        click.echo(f"  ✓ TEST token: {token.address} ({DEVNET_TOKEN_GRANT} per account)")
        click.echo(f"  ✓ Feeds: ETH {house.auction.price_feed(ZERO_ADDRESS)}, TEST {house.auction.price_feed(token.address)}")
        logger.info(f"Devnet initialized in {data_dir}")
        click.echo(f"✅ Devnet ready at block {chain.block_number}")


@devnet.command("accounts")
@click.pass_context
def devnet_accounts(ctx):
    """List dev accounts with ETH and TEST balances"""
    from nftauction.utils.units import format_ether

    with _open_chain(ctx) as chain:
        token = None
        token_address = chain.storage_manager.get_meta(META_TOKEN)
        if token_address:
            token = chain.contract(token_address)

        for i, account in enumerate(chain.accounts):
            line = f"  [{i}] {account.address}  {format_ether(chain.balance_of(account.address))} ETH"
            if token is not None:
                line += f"  {format_ether(token.balance_of(account.address))} TEST"
            click.echo(line)


@devnet.command("advance")
@click.argument("seconds", type=click.IntRange(min=0))
@click.pass_context
def devnet_advance(ctx, seconds):
    """Move the chain clock forward and mine a block"""
    with _open_chain(ctx) as chain:
        chain.increase_time(seconds)
        block = chain.mine()
        click.echo(f"⏩ Block {block.number} mined at timestamp {block.timestamp}")


@devnet.command("status")
@click.pass_context
def devnet_status(ctx):
    """Show chain statistics"""
    with _open_chain(ctx) as chain:
        click.echo("Devnet Statistics")
        click.echo("-" * 40)
        for key, value in chain.stats().items():
            click.echo(f"  {key}: {value}")


# =============================================================================
# Auction Commands
# =============================================================================


@cli.group()
def auction():
    """Auction commands (run as the admin unless --account is given)"""
    pass


@auction.command("create")
@click.option("--duration", default=600, type=int, help="Auction duration in seconds")
@click.option("--price", required=True, help="Starting price in ETH")
@click.option("--token-id", required=True, type=int, help="NFT token id to auction")
@click.pass_context
def auction_create(ctx, duration, price, token_id):
    """Escrow an admin-owned NFT and open an auction"""
    from nftauction.core.chain import InvalidTransaction, RevertError
    from nftauction.utils.units import parse_ether

    try:
        starting_price = parse_ether(price)
    except ValueError as e:
        _fail(str(e))

    with _open_chain(ctx) as chain:
        house_auction, nft, _ = _load_house(chain)
        try:
            nft.approve(house_auction.address, token_id)
            receipt = house_auction.create_auction(duration, nft.address, starting_price, token_id)
        except RevertError as e:
            _fail(f"Reverted: {e.reason}")
        except InvalidTransaction as e:
            _fail(f"Rejected: {e}")

        click.echo(f"✓ Auction #{receipt.return_value} created for NFT #{token_id}")
        click.echo(f"  Starting price: {price} ETH, duration: {duration}s")


@auction.command("bid")
@click.argument("auction_id", type=int)
@click.argument("amount")
@click.option("--account", "account_index", default=1, type=int, help="Bidder account index")
@click.option("--token", "use_token", is_flag=True, help="Bid in TEST instead of ETH")
@click.pass_context
def auction_bid(ctx, auction_id, amount, account_index, use_token):
    """Bid AMOUNT (ETH, or TEST with --token) on an auction"""
    from nftauction.crypto import ZERO_ADDRESS
    from nftauction.core.chain import InvalidTransaction, RevertError
    from nftauction.utils.units import parse_units

    with _open_chain(ctx) as chain:
        house_auction, _, token = _load_house(chain)
        bidder = _account(chain, account_index)

        decimals = token.decimals() if use_token else 18
        try:
            value = parse_units(amount, decimals)
        except ValueError as e:
            _fail(str(e))

        try:
            if use_token:
                token.connect(bidder).approve(house_auction.address, value)
                house_auction.connect(bidder).bid_with(auction_id, value, token.address)
            else:
                house_auction.connect(bidder).bid_with(auction_id, value, ZERO_ADDRESS, value=value)
        except RevertError as e:
            _fail(f"Reverted: {e.reason}")
        except InvalidTransaction as e:
            _fail(f"Rejected: {e}")

        currency = "TEST" if use_token else "ETH"
        click.echo(f"✓ Bid {amount} {currency} on auction #{auction_id} from account {account_index}")


@auction.command("end")
@click.argument("auction_id", type=int)
@click.pass_context
def auction_end(ctx, auction_id):
    """Settle an auction whose deadline has passed"""
    from nftauction.core.chain import InvalidTransaction, RevertError

    with _open_chain(ctx) as chain:
        house_auction, nft, _ = _load_house(chain)
        try:
            house_auction.end_auction(auction_id)
        except RevertError as e:
            _fail(f"Reverted: {e.reason}")
        except InvalidTransaction as e:
            _fail(f"Rejected: {e}")

        info = house_auction.auctions(auction_id)
        click.echo(f"✓ Auction #{auction_id} ended")
        click.echo(f"  NFT #{info.token_id} owner: {nft.owner_of(info.token_id)}")


@auction.command("show")
@click.argument("auction_id", type=int)
@click.pass_context
def auction_show(ctx, auction_id):
    """Show an auction record"""
    from nftauction.utils.units import format_ether, format_units

    with _open_chain(ctx) as chain:
        house_auction, _, token = _load_house(chain)
        if auction_id >= house_auction.auction_count():
            _fail(f"Auction #{auction_id} does not exist")

        info = house_auction.auctions(auction_id)
        if info.token_address == token.address:
            highest = f"{format_units(info.highest_bid, token.decimals())} TEST"
        else:
            highest = f"{format_ether(info.highest_bid)} ETH"

        if info.ended:
            status = "ended"
        elif chain.time() >= info.end_time:
            status = "due"
        else:
            status = f"open ({info.end_time - chain.time()}s left)"

        click.echo(f"Auction #{auction_id}")
        click.echo("-" * 40)
        click.echo(f"  Status:         {status}")
        click.echo(f"  Seller:         {info.seller}")
        click.echo(f"  NFT:            {info.nft_contract} #{info.token_id}")
        click.echo(f"  Starting price: {format_ether(info.starting_price)} ETH")
        click.echo(f"  Start time:     {info.start_time} (+{info.duration}s)")
        click.echo(f"  Highest bidder: {info.highest_bidder}")
        click.echo(f"  Highest bid:    {highest}")


if __name__ == "__main__":
    cli()
