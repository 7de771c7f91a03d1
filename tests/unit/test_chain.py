"""
Unit tests for the chain simulator.

Tests cover:
1. Genesis and dev accounts
2. Transaction validation (signature, nonce, chain id, funds)
3. Execution, gas accounting and events
4. Revert rollback semantics
5. Native value transfers
6. Time travel, views and snapshots
"""

import pytest

from nftauction.crypto import ZERO_ADDRESS, sign
from nftauction.core.config import ChainConfig
from nftauction.core.chain import (
    Chain,
    Contract,
    InvalidTransaction,
    RevertError,
    SignedTransaction,
    non_reentrant,
    payable,
    require,
    reverts,
    view,
)

GENESIS_TS = 1_700_000_000


# =============================================================================
# Test Contracts
# =============================================================================


class Counter(Contract):
    def constructor(self, start=0):
        self._count = start
        self._owner = self.msg_sender

    @view
    def count(self):
        return self._count

    @view
    def owner(self):
        return self._owner

    def increment(self, by=1):
        require(self.msg_sender == self._owner, "Not owner")
        self._count += by
        self.emit("Incremented", by=by)
        return self._count

    def fail_after_write(self):
        self._count = 999
        require(False, "boom")

    def crash(self):
        self._count = -1
        raise RuntimeError("bug in contract")

    @payable
    def deposit(self):
        self.emit("Deposit", sender=self.msg_sender, value=self.msg_value)

    def withdraw(self, amount):
        self.send_value(self.msg_sender, amount)

    def now(self):
        return self.block_timestamp

    def _secret(self):
        return 42


class Vault(Contract):
    @payable
    def receive(self):
        self._received = self.__dict__.get("_received", 0) + self.msg_value

    @view
    def received(self):
        return self.__dict__.get("_received", 0)


class Caller(Contract):
    def poke(self, counter):
        return self.call(counter, "increment", 1)


class Guarded(Contract):
    @non_reentrant
    def enter(self, depth):
        self._calls = self.__dict__.get("_calls", 0) + 1
        if depth:
            self.call(self.address, "enter", depth - 1)

    @view
    def calls(self):
        return self.__dict__.get("_calls", 0)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def chain():
    """Create an in-memory chain with a fixed genesis timestamp."""
    return Chain(ChainConfig(genesis_timestamp=GENESIS_TS))


@pytest.fixture
def alice(chain):
    return chain.accounts[0]


@pytest.fixture
def bob(chain):
    return chain.accounts[1]


@pytest.fixture
def counter(chain, alice):
    return chain.deploy(alice, Counter, 10)


# =============================================================================
# Genesis
# =============================================================================


class TestGenesis:
    """Tests for the initial chain state."""

    def test_genesis_block(self, chain):
        assert chain.block_number == 0
        assert chain.time() == GENESIS_TS
        assert chain.latest_block.parent_hash == bytes(32)

    def test_accounts_funded(self, chain):
        assert len(chain.accounts) == 10
        for account in chain.accounts:
            assert chain.balance_of(account.address) == chain.config.initial_balance
            assert chain.nonce_of(account.address) == 0

    def test_accounts_deterministic(self, chain):
        other = Chain(ChainConfig(genesis_timestamp=GENESIS_TS))
        assert [a.address for a in other.accounts] == [a.address for a in chain.accounts]

    def test_seed_changes_accounts(self, chain):
        other = Chain(ChainConfig(account_seed="another seed"))
        assert other.accounts[0].address != chain.accounts[0].address


# =============================================================================
# Transaction Validation
# =============================================================================


class TestValidation:
    """Tests for rejection before execution."""

    def test_wrong_nonce(self, chain, alice, bob):
        tx = chain.build_transaction(alice, bob.address, value=1)
        tx.nonce += 1
        with pytest.raises(InvalidTransaction, match="Invalid nonce"):
            chain.send_transaction(alice.sign_transaction(tx))
        assert chain.block_number == 0

    def test_forged_signature(self, chain, alice, bob):
        tx = chain.build_transaction(alice, bob.address, value=1)
        forged = SignedTransaction(tx=tx, signature=sign(tx.signing_hash(), bob.keypair.private_key))
        with pytest.raises(InvalidTransaction, match="Invalid signature"):
            chain.send_transaction(forged)

    def test_tampered_transaction(self, chain, alice, bob):
        tx = chain.build_transaction(alice, bob.address, value=1)
        signed = alice.sign_transaction(tx)
        signed.tx.value = 10**18
        with pytest.raises(InvalidTransaction, match="Invalid signature"):
            chain.send_transaction(signed)

    def test_sign_for_other_sender(self, chain, alice, bob):
        tx = chain.build_transaction(alice, bob.address, value=1)
        with pytest.raises(ValueError):
            bob.sign_transaction(tx)

    def test_wrong_chain_id(self, chain, alice, bob):
        tx = chain.build_transaction(alice, bob.address, value=1)
        tx.chain_id = 1
        with pytest.raises(InvalidTransaction, match="Wrong chain id"):
            chain.send_transaction(alice.sign_transaction(tx))

    def test_insufficient_funds(self, chain, alice, bob):
        with pytest.raises(InvalidTransaction, match="Insufficient funds"):
            chain.transfer(alice, bob.address, chain.balance_of(alice.address))
        assert chain.nonce_of(alice.address) == 0

    def test_zero_gas_price(self, chain, alice, bob):
        with pytest.raises(InvalidTransaction, match="gas_price"):
            chain.transfer(alice, bob.address, 1, gas_price=0)

    def test_negative_value(self, chain, alice, bob):
        tx = chain.build_transaction(alice, bob.address, value=-1)
        with pytest.raises(InvalidTransaction, match="value"):
            chain.send_transaction(alice.sign_transaction(tx))


# =============================================================================
# Execution
# =============================================================================


class TestExecution:
    """Tests for successful execution."""

    def test_transfer(self, chain, alice, bob):
        alice_before = chain.balance_of(alice.address)
        bob_before = chain.balance_of(bob.address)

        receipt = chain.transfer(alice, bob.address, 10**18)

        assert receipt.status == 1
        assert receipt.block_number == 1
        assert chain.balance_of(bob.address) == bob_before + 10**18
        assert chain.balance_of(alice.address) == alice_before - 10**18 - receipt.fee
        assert chain.nonce_of(alice.address) == 1
        assert chain.total_burned == receipt.fee

    def test_deploy(self, chain, alice, counter):
        assert chain.is_contract(counter.address)
        assert counter.count() == 10
        assert counter.owner() == alice.address
        assert chain.nonce_of(alice.address) == 1

    def test_contract_addresses_unique(self, chain, alice, counter):
        second = chain.deploy(alice, Counter)
        assert second.address != counter.address

    def test_deploy_rejects_non_contract(self, chain, alice):
        with pytest.raises(TypeError):
            chain.deploy(alice, dict)

    def test_call_returns_value(self, counter):
        receipt = counter.increment(5)
        assert receipt.return_value == 15
        assert counter.count() == 15

    def test_gas_accounting(self, chain, counter):
        receipt = counter.increment()
        config = chain.config
        assert receipt.gas_used == config.intrinsic_gas + config.call_gas + config.log_gas
        assert receipt.fee == receipt.gas_used * config.gas_price

    def test_custom_gas_price(self, counter):
        receipt = counter.increment(gas_price=7)
        assert receipt.gas_price == 7
        assert receipt.fee == receipt.gas_used * 7

    def test_events(self, counter):
        receipt = counter.increment(2)
        events = receipt.events("Incremented")
        assert len(events) == 1
        assert events[0].args == {"by": 2}
        assert events[0].address == counter.address

    def test_block_links(self, chain, counter):
        counter.increment()
        assert chain.blocks[-1].parent_hash == chain.blocks[-2].hash
        assert chain.get_receipt(chain.blocks[-1].tx_hashes[0]).status == 1

    def test_nested_call_sender(self, chain, alice, counter):
        caller = chain.deploy(alice, Caller)
        with reverts("Not owner"):
            caller.poke(counter.address)

    def test_stats(self, chain, counter):
        counter.increment()
        stats = chain.stats()
        assert stats["block_number"] == 2
        assert stats["contracts"] == 1
        assert stats["transactions"] == 2
        assert stats["reverted"] == 0


# =============================================================================
# Reverts
# =============================================================================


class TestReverts:
    """Tests for revert rollback semantics."""

    def test_revert_rolls_back_storage(self, chain, alice, counter):
        balance_before = chain.balance_of(alice.address)

        with pytest.raises(RevertError) as exc_info:
            counter.fail_after_write()

        receipt = exc_info.value.receipt
        assert exc_info.value.reason == "boom"
        assert receipt.status == 0
        assert receipt.revert_reason == "boom"
        assert receipt.logs == []
        assert counter.count() == 10
        # Mined, nonce consumed, gas paid
        assert chain.block_number == 2
        assert chain.nonce_of(alice.address) == 2
        assert chain.balance_of(alice.address) == balance_before - receipt.fee

    def test_revert_from_other_sender(self, counter, bob):
        with reverts("Not owner"):
            counter.connect(bob).increment()
        assert counter.count() == 10

    def test_revert_refunds_value(self, chain, counter, bob):
        before = chain.balance_of(bob.address)
        with pytest.raises(RevertError) as exc_info:
            counter.connect(bob).increment(value=10**18)
        assert exc_info.value.reason == "Function is not payable"
        assert chain.balance_of(bob.address) == before - exc_info.value.receipt.fee

    def test_unknown_function(self, chain, alice, counter):
        with pytest.raises(RevertError, match="not found"):
            chain.transact(alice, counter.address, "does_not_exist")
        with pytest.raises(AttributeError):
            counter.does_not_exist

    def test_internal_functions_not_callable(self, chain, alice, counter):
        with pytest.raises(RevertError, match="not found"):
            chain.transact(alice, counter.address, "_secret")
        with pytest.raises(RevertError, match="not found"):
            chain.transact(alice, counter.address, "constructor", 0)
        with pytest.raises(RevertError, match="not found"):
            chain.transact(alice, counter.address, "send_value", alice.address, 1)

    def test_out_of_gas(self, chain, alice, counter):
        tx = chain.build_transaction(alice, counter.address, "increment", gas_limit=chain.config.intrinsic_gas + 1)
        with pytest.raises(RevertError, match="out of gas") as exc_info:
            chain.send_transaction(alice.sign_transaction(tx))
        assert exc_info.value.receipt.gas_used == tx.gas_limit
        assert counter.count() == 10

    def test_python_error_propagates(self, chain, alice, counter):
        height = chain.block_number
        with pytest.raises(RuntimeError, match="bug in contract"):
            counter.crash()
        assert counter.count() == 10
        assert chain.block_number == height
        assert chain.nonce_of(alice.address) == 1

    def test_reverts_helper_checks_reason(self, counter, bob):
        with pytest.raises(AssertionError):
            with reverts("something else"):
                counter.connect(bob).increment()

    def test_reverts_helper_requires_revert(self, counter):
        with pytest.raises(AssertionError):
            with reverts():
                counter.increment()


# =============================================================================
# Native Value
# =============================================================================


class TestNativeValue:
    """Tests for value moving through contracts."""

    def test_payable_deposit_and_withdraw(self, chain, alice, counter):
        receipt = counter.deposit(value=3 * 10**18)
        assert chain.balance_of(counter.address) == 3 * 10**18
        assert receipt.events("Deposit")[0].args["value"] == 3 * 10**18

        counter.withdraw(10**18)
        assert chain.balance_of(counter.address) == 2 * 10**18

    def test_withdraw_more_than_held(self, counter):
        with reverts("Insufficient balance for transfer"):
            counter.withdraw(1)

    def test_transfer_to_receiving_contract(self, chain, alice):
        vault = chain.deploy(alice, Vault)
        chain.transfer(alice, vault.address, 5)
        assert chain.balance_of(vault.address) == 5
        assert vault.received() == 5

    def test_transfer_to_contract_without_receive(self, chain, alice, counter):
        with reverts("Contract cannot receive ether"):
            chain.transfer(alice, counter.address, 5)
        assert chain.balance_of(counter.address) == 0


# =============================================================================
# Time, Views, Snapshots
# =============================================================================


class TestTime:
    """Tests for block timestamps."""

    def test_block_time(self, chain, counter):
        receipt = counter.now()
        assert receipt.return_value == GENESIS_TS + 2

    def test_increase_time(self, chain, counter):
        chain.increase_time(600)
        assert counter.now().return_value == GENESIS_TS + 2 + 600
        # Applied once
        assert counter.now().return_value == GENESIS_TS + 2 + 600 + 1

    def test_mine(self, chain):
        chain.increase_time(100)
        block = chain.mine()
        assert block.number == 1
        assert block.timestamp == GENESIS_TS + 101
        assert block.tx_hashes == []

        chain.mine(3)
        assert chain.block_number == 4

    def test_invalid_time_and_mine(self, chain):
        with pytest.raises(ValueError):
            chain.increase_time(-1)
        with pytest.raises(ValueError):
            chain.mine(0)


class TestViews:
    """Tests for read-only calls."""

    def test_call_discards_writes(self, chain, alice, counter):
        assert chain.call(counter.address, "increment", 5, sender=alice.address) == 15
        assert counter.count() == 10
        assert chain.block_number == 1

    def test_call_revert(self, chain, counter):
        with pytest.raises(RevertError) as exc_info:
            chain.call(counter.address, "increment")
        assert exc_info.value.reason == "Not owner"
        assert exc_info.value.receipt is None

    def test_handle_without_signer(self, chain, counter):
        handle = chain.contract(counter.address)
        assert handle.count() == 10
        with pytest.raises(ValueError):
            handle.increment()

    def test_contract_lookup(self, chain, alice, counter):
        assert chain.contract(counter.address, alice) == counter.address
        with pytest.raises(ValueError):
            chain.contract(ZERO_ADDRESS)


class TestSnapshots:
    """Tests for evm_snapshot / evm_revert style rollback."""

    def test_snapshot_revert(self, chain, alice, bob, counter):
        snapshot_id = chain.snapshot()
        balance = chain.balance_of(bob.address)

        counter.increment()
        chain.transfer(alice, bob.address, 10**18)
        chain.increase_time(1000)

        chain.revert(snapshot_id)
        assert counter.count() == 10
        assert chain.block_number == 1
        assert chain.balance_of(bob.address) == balance
        assert chain.nonce_of(alice.address) == 1
        assert counter.now().return_value == GENESIS_TS + 2

    def test_snapshot_consumed(self, chain):
        first = chain.snapshot()
        second = chain.snapshot()
        chain.revert(first)
        with pytest.raises(ValueError):
            chain.revert(first)
        with pytest.raises(ValueError):
            chain.revert(second)


# =============================================================================
# Modifiers
# =============================================================================


class TestNonReentrant:
    """Tests for the non_reentrant modifier."""

    def test_sequential_calls_allowed(self, chain, alice):
        guarded = chain.deploy(alice, Guarded)
        guarded.enter(0)
        guarded.enter(0)
        assert guarded.calls() == 2

    def test_reentry_reverts(self, chain, alice):
        guarded = chain.deploy(alice, Guarded)
        with reverts("ReentrancyGuard: reentrant call"):
            guarded.enter(1)
        assert guarded.calls() == 0

        # Lock is released after the failed transaction
        guarded.enter(0)
        assert guarded.calls() == 1
