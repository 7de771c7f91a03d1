"""
MockERC20 - Fungible test token with the ERC20 surface.

Mirrors OpenZeppelin's ERC20 closely enough that auction code written
against it behaves as it would against a real token: balances, allowances,
transfer_from spending the allowance, and the same revert reasons.
"""

from nftauction.crypto import ZERO_ADDRESS
from nftauction.core.chain.contract import Contract, require, view


class MockERC20(Contract):
    """ERC20 token whose whole initial supply goes to the deployer."""

    def constructor(self, name: str, symbol: str, initial_supply: int, decimals: int = 18) -> None:
        require(0 <= decimals <= 77, "ERC20: invalid decimals")
        self._name = name
        self._symbol = symbol
        self._decimals = decimals
        self._total_supply = 0
        self._balances = {}
        self._allowances = {}
        self._mint(self.msg_sender, initial_supply)

    # =========================================================================
    # Views
    # =========================================================================

    @view
    def name(self) -> str:
        return self._name

    @view
    def symbol(self) -> str:
        return self._symbol

    @view
    def decimals(self) -> int:
        return self._decimals

    @view
    def total_supply(self) -> int:
        return self._total_supply

    @view
    def balance_of(self, owner: str) -> int:
        return self._balances.get(owner, 0)

    @view
    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    # =========================================================================
    # Transfers
    # =========================================================================

    def transfer(self, to: str, amount: int) -> bool:
        self._transfer(self.msg_sender, to, amount)
        return True

    def approve(self, spender: str, amount: int) -> bool:
        require(spender != ZERO_ADDRESS, "ERC20: approve to the zero address")
        require(amount >= 0, "ERC20: invalid amount")
        self._allowances[(self.msg_sender, spender)] = amount
        self.emit("Approval", owner=self.msg_sender, spender=spender, value=amount)
        return True

    def transfer_from(self, sender: str, to: str, amount: int) -> bool:
        spender = self.msg_sender
        allowed = self._allowances.get((sender, spender), 0)
        require(allowed >= amount, "ERC20: insufficient allowance")
        self._allowances[(sender, spender)] = allowed - amount
        self._transfer(sender, to, amount)
        return True

    def mint(self, to: str, amount: int) -> None:
        """Open mint, test tokens only."""
        self._mint(to, amount)

    # =========================================================================
    # Internals
    # =========================================================================

    def _transfer(self, sender: str, to: str, amount: int) -> None:
        require(to != ZERO_ADDRESS, "ERC20: transfer to the zero address")
        require(amount >= 0, "ERC20: invalid amount")
        balance = self._balances.get(sender, 0)
        require(balance >= amount, "ERC20: transfer amount exceeds balance")
        self._balances[sender] = balance - amount
        self._balances[to] = self._balances.get(to, 0) + amount
        self.emit("Transfer", sender=sender, to=to, value=amount)

    def _mint(self, to: str, amount: int) -> None:
        require(to != ZERO_ADDRESS, "ERC20: mint to the zero address")
        require(amount >= 0, "ERC20: invalid amount")
        self._total_supply += amount
        self._balances[to] = self._balances.get(to, 0) + amount
        self.emit("Transfer", sender=ZERO_ADDRESS, to=to, value=amount)
