"""Vote transaction records, before and after signing."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class VoteTransaction:
    """An unsigned self-transfer carrying a vote memo.

    There is no receiver field: the receiver is always the sender.
    """

    sender: str  # ledger address
    amount: int  # stroops, nominal
    fee: int  # stroops
    memo: str

    @property
    def receiver(self) -> str:
        return self.sender


@dataclass(frozen=True)
class SignedTransaction:
    """A VoteTransaction bound to a sequence number and signed."""

    transaction: VoteTransaction
    nonce: int  # account sequence used by the envelope
    envelope_xdr: str
    tx_hash: str  # hex
    proof: bytes | None = None
