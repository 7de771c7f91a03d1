"""
Account - Externally owned accounts for the simulated chain.

An account is a secp256k1 keypair. Its address is derived from the public
key, and it authorizes transactions by signing them.
"""

from dataclasses import dataclass
from typing import List

from nftauction.crypto import KeyPair, keypair_from_seed, sign
from nftauction.core.chain.transaction import SignedTransaction, Transaction


@dataclass
class Account:
    """An externally owned account (signer)."""
    keypair: KeyPair

    @property
    def address(self) -> str:
        return self.keypair.address

    def sign_transaction(self, tx: Transaction) -> SignedTransaction:
        """Sign a transaction with this account's private key."""
        if tx.sender != self.address:
            raise ValueError(f"Transaction sender {tx.sender} is not {self.address}")
        return SignedTransaction(tx=tx, signature=sign(tx.signing_hash(), self.keypair.private_key))

    def __repr__(self) -> str:
        return f"Account({self.address})"

    def __str__(self) -> str:
        return self.address


def derive_accounts(seed: str, count: int) -> List[Account]:
    """
    Derive `count` deterministic dev accounts from a seed.

    The same seed always yields the same addresses, so a persisted devnet
    can be reopened with the same signers.
    """
    return [Account(keypair_from_seed(seed, i)) for i in range(count)]
