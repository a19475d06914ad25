"""Signer and Prover protocols - local, CPU-bound transaction steps."""

from __future__ import annotations

from typing import Protocol

from mip_vote.keys import KeyMaterial
from mip_vote.models.transaction import SignedTransaction, VoteTransaction


class Signer(Protocol):
    """Turns a vote transaction into a signed ledger envelope."""

    memo_limit: int  # bytes the ledger's memo field holds
    fee_limit: int  # largest fee the envelope format can carry

    def sign(self, tx: VoteTransaction, keys: KeyMaterial, nonce: int) -> SignedTransaction:
        """Sign ``tx`` at account sequence ``nonce``. Raises SigningError."""
        ...


class Prover(Protocol):
    """Attaches a correctness proof where the ledger requires one."""

    async def prove(self, signed: SignedTransaction) -> SignedTransaction:
        """Return the transaction with its proof attached. Raises ProofError."""
        ...
