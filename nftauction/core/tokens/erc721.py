"""
MockNFT - Non-fungible test token with the ERC721 surface.

Ownership, per-token approvals, operator approvals, and the safe transfer
handshake: transferring to a contract with safe_transfer_from requires the
recipient to answer on_erc721_received with ERC721_RECEIVED, so NFTs cannot
get stuck in contracts that do not know how to handle them.
"""

from nftauction.crypto import ZERO_ADDRESS, keccak256
from nftauction.core.chain.contract import Contract, require, view

# bytes4(keccak256("onERC721Received(address,address,uint256,bytes)"))
ERC721_RECEIVED = keccak256(b"onERC721Received(address,address,uint256,bytes)")[:4]


class MockNFT(Contract):
    """ERC721 collection with an open mint."""

    def constructor(self, name: str = "MockNFT", symbol: str = "MNFT") -> None:
        self._name = name
        self._symbol = symbol
        self._owners = {}
        self._balances = {}
        self._token_approvals = {}
        self._operator_approvals = {}

    @view
    def name(self) -> str:
        return self._name

    @view
    def symbol(self) -> str:
        return self._symbol

    @view
    def owner_of(self, token_id: int) -> str:
        owner = self._owners.get(token_id)
        require(owner is not None, "ERC721: invalid token ID")
        return owner

    @view
    def balance_of(self, owner: str) -> int:
        require(owner != ZERO_ADDRESS, "ERC721: address zero is not a valid owner")
        return self._balances.get(owner, 0)

    @view
    def get_approved(self, token_id: int) -> str:
        self.owner_of(token_id)
        return self._token_approvals.get(token_id, ZERO_ADDRESS)

    @view
    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return self._operator_approvals.get((owner, operator), False)

    def mint(self, to: str, token_id: int) -> None:
        require(to != ZERO_ADDRESS, "ERC721: mint to the zero address")
        require(token_id not in self._owners, "ERC721: token already minted")
        self._owners[token_id] = to
        self._balances[to] = self._balances.get(to, 0) + 1
        self.emit("Transfer", sender=ZERO_ADDRESS, to=to, token_id=token_id)

    def approve(self, to: str, token_id: int) -> None:
        owner = self.owner_of(token_id)
        require(to != owner, "ERC721: approval to current owner")
        require(
            self.msg_sender == owner or self.is_approved_for_all(owner, self.msg_sender),
            "ERC721: approve caller is not token owner or approved for all",
        )
        self._token_approvals[token_id] = to
        self.emit("Approval", owner=owner, approved=to, token_id=token_id)

    def set_approval_for_all(self, operator: str, approved: bool) -> None:
        require(operator != self.msg_sender, "ERC721: approve to caller")
        self._operator_approvals[(self.msg_sender, operator)] = bool(approved)
        self.emit("ApprovalForAll", owner=self.msg_sender, operator=operator, approved=bool(approved))

    def transfer_from(self, sender: str, to: str, token_id: int) -> None:
        require(self._is_approved_or_owner(self.msg_sender, token_id), "ERC721: caller is not token owner or approved")
        self._transfer(sender, to, token_id)

    def safe_transfer_from(self, sender: str, to: str, token_id: int, data: bytes = b"") -> None:
        require(self._is_approved_or_owner(self.msg_sender, token_id), "ERC721: caller is not token owner or approved")
        self._transfer(sender, to, token_id)
        require(
            self._check_on_erc721_received(sender, to, token_id, data),
            "ERC721: transfer to non ERC721Receiver implementer",
        )

    # =========================================================================
    # Internals
    # =========================================================================

    def _is_approved_or_owner(self, spender: str, token_id: int) -> bool:
        owner = self.owner_of(token_id)
        return (
            spender == owner
            or self.is_approved_for_all(owner, spender)
            or self._token_approvals.get(token_id) == spender
        )

    def _transfer(self, sender: str, to: str, token_id: int) -> None:
        require(self.owner_of(token_id) == sender, "ERC721: transfer from incorrect owner")
        require(to != ZERO_ADDRESS, "ERC721: transfer to the zero address")

        self._token_approvals.pop(token_id, None)
        self._balances[sender] -= 1
        self._balances[to] = self._balances.get(to, 0) + 1
        self._owners[token_id] = to
        self.emit("Transfer", sender=sender, to=to, token_id=token_id)

    def _check_on_erc721_received(self, sender: str, to: str, token_id: int, data: bytes) -> bool:
        if not self.is_contract(to):
            return True
        if not self.implements(to, "on_erc721_received"):
            return False
        answer = self.call(to, "on_erc721_received", self.msg_sender, sender, token_id, data)
        return answer == ERC721_RECEIVED
