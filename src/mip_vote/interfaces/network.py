"""NetworkClient protocol - the ledger as seen by the submission pipeline."""

from __future__ import annotations

from typing import Protocol

from mip_vote.models.results import SubmissionResult
from mip_vote.models.transaction import SignedTransaction


class NetworkClient(Protocol):
    """Broadcasts signed transactions and reports their settlement.

    ``submit`` raises NetworkError for transient failures and
    TransactionRejected when the ledger refuses the transaction.
    """

    async def fetch_nonce(self, address: str) -> int:
        """Return the account's current sequence number."""
        ...

    async def submit(self, signed: SignedTransaction) -> str:
        """Broadcast a signed transaction and return its hash."""
        ...

    async def await_confirmation(self, tx_hash: str, timeout: float) -> SubmissionResult:
        """Wait until the transaction settles or ``timeout`` seconds pass."""
        ...

    async def get_status(self, tx_hash: str) -> SubmissionResult | None:
        """One-shot status lookup. None if the ledger has no record yet."""
        ...

    async def close(self) -> None:
        ...
