"""Provers for ledgers with and without transaction correctness proofs."""

from __future__ import annotations

from mip_vote.models.transaction import SignedTransaction


class NullProver:
    """For ledgers that need no proof: passes the transaction through."""

    async def prove(self, signed: SignedTransaction) -> SignedTransaction:
        return signed
