"""
MockPriceFeed - Chainlink AggregatorV3 stand-in.

Reports a USD price with `decimals` fixed-point digits, e.g. 2000 USD with
8 decimals is 2000 * 10**8. Each update_answer() opens a new round stamped
with the block timestamp, like an aggregator receiving a new report.
"""

from nftauction.core.chain.contract import Contract, require, view


class MockPriceFeed(Contract):
    """Settable price feed exposing the AggregatorV3 read surface."""

    def constructor(self, answer: int, decimals: int = 8, description: str = "Mock / USD") -> None:
        require(0 <= decimals <= 18, "Invalid decimals")
        self._decimals = decimals
        self._description = description
        self._round_id = 0
        self._answer = 0
        self._updated_at = 0
        self._start_round(answer)

    @view
    def decimals(self) -> int:
        return self._decimals

    @view
    def description(self) -> str:
        return self._description

    @view
    def version(self) -> int:
        return 4

    @view
    def latest_round_data(self):
        """(round_id, answer, started_at, updated_at, answered_in_round)"""
        return (self._round_id, self._answer, self._updated_at, self._updated_at, self._round_id)

    @view
    def latest_answer(self) -> int:
        return self._answer

    def update_answer(self, answer: int) -> None:
        self._start_round(answer)

    def _start_round(self, answer: int) -> None:
        self._round_id += 1
        self._answer = answer
        self._updated_at = self.block_timestamp
        self.emit("AnswerUpdated", current=answer, round_id=self._round_id, updated_at=self._updated_at)
