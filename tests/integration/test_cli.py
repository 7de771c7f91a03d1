"""
End-to-end CLI tests: every command runs against a persistent devnet in a
temporary directory, so state has to survive between invocations.
"""

import pytest
from click.testing import CliRunner

from nftauction.cli.main import cli
from nftauction.utils.logger import setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    # The CLI binds log handlers to the runner's captured stdout
    setup_logging(log_to_file=False)


@pytest.fixture
def run(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    data_dir = tmp_path / "devnet"

    def invoke(*args):
        return runner.invoke(cli, ["--data-dir", str(data_dir), *args])

    return invoke


@pytest.fixture
def devnet(run):
    result = run("devnet", "init")
    assert result.exit_code == 0, result.output
    return run


def test_demo(run):
    result = run("demo")
    assert result.exit_code == 0, result.output
    assert "Ended: True" in result.output
    assert "Demo complete!" in result.output


def test_init(run):
    result = run("devnet", "init")
    assert result.exit_code == 0, result.output
    assert "Devnet ready at block" in result.output

    again = run("devnet", "init")
    assert again.exit_code == 0
    assert "Devnet already initialized" in again.output


def test_init_reset(devnet):
    result = devnet("devnet", "init", "--reset")
    assert result.exit_code == 0, result.output
    assert "Devnet ready at block" in result.output


def test_accounts(devnet):
    result = devnet("devnet", "accounts")
    assert result.exit_code == 0, result.output
    assert "[9]" in result.output
    assert "10000 TEST" in result.output


def test_commands_need_init(run):
    for args in (["auction", "show", "0"], ["auction", "end", "0"], ["auction", "bid", "0", "1"]):
        result = run(*args)
        assert result.exit_code == 1
        assert "Devnet not initialized" in result.output


def test_auction_flow(devnet):
    result = devnet("auction", "create", "--price", "1", "--token-id", "1")
    assert result.exit_code == 0, result.output
    assert "✓ Auction #0 created for NFT #1" in result.output

    # 1.5 ETH at 2000 USD = 3000 USD
    result = devnet("auction", "bid", "0", "1.5")
    assert result.exit_code == 0, result.output
    assert "✓ Bid 1.5 ETH on auction #0 from account 1" in result.output

    result = devnet("auction", "bid", "0", "1000", "--token", "--account", "2")
    assert result.exit_code == 1
    assert "Reverted: Bid must be at least the starting price" in result.output

    result = devnet("auction", "bid", "0", "2500", "--token", "--account", "2")
    assert result.exit_code == 1
    assert "Reverted: Bid must be higher than the current highest bid" in result.output

    result = devnet("auction", "bid", "0", "3500", "--token", "--account", "2")
    assert result.exit_code == 0, result.output

    result = devnet("auction", "show", "0")
    assert result.exit_code == 0, result.output
    assert "3500 TEST" in result.output
    assert "open" in result.output

    result = devnet("auction", "end", "0")
    assert result.exit_code == 1
    assert "Reverted: Auction has not ended" in result.output

    result = devnet("devnet", "advance", "600")
    assert result.exit_code == 0, result.output

    result = devnet("auction", "end", "0")
    assert result.exit_code == 0, result.output
    assert "✓ Auction #0 ended" in result.output

    result = devnet("auction", "show", "0")
    assert "ended" in result.output

    result = devnet("devnet", "accounts")
    assert "6500 TEST" in result.output


def test_bid_on_missing_auction(devnet):
    result = devnet("auction", "bid", "3", "1")
    assert result.exit_code == 1
    assert "Reverted: Auction does not exist" in result.output


def test_show_missing_auction(devnet):
    result = devnet("auction", "show", "3")
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_invalid_account(devnet):
    result = devnet("auction", "bid", "0", "1", "--account", "42")
    assert result.exit_code == 1
    assert "Account index must be between 0 and 9" in result.output


def test_status(devnet):
    result = devnet("devnet", "status")
    assert result.exit_code == 0, result.output
    assert "block_number" in result.output
