"""Vote transaction assembly."""

from __future__ import annotations

from mip_vote.exceptions import BuildError, MemoTooLong
from mip_vote.keys import KeyMaterial
from mip_vote.models.transaction import VoteTransaction
from mip_vote.models.vote import Fee, Vote
from mip_vote.vote.encoder import MEMO_MAX_BYTES

# The amount carries no meaning; only sender and memo do.
NOMINAL_AMOUNT = 1  # stroops


def build(
    vote: Vote,
    fee: Fee | int,
    keys: KeyMaterial,
    *,
    amount: int = NOMINAL_AMOUNT,
    memo_limit: int = MEMO_MAX_BYTES,
    fee_limit: int | None = None,
) -> VoteTransaction:
    """Compose a self-transfer from the key's address carrying the vote memo.

    ``fee_limit`` is the largest fee the ledger's envelope can encode; it is
    a format bound, not a judgement of whether the fee is sufficient.
    """
    fee_amount = fee.amount if isinstance(fee, Fee) else fee
    if fee_amount < 0:
        raise BuildError("fee must be >= 0")
    if fee_limit is not None and fee_amount > fee_limit:
        raise BuildError(f"fee {fee_amount} exceeds the ledger maximum of {fee_limit}")
    if amount <= 0:
        raise BuildError("transfer amount must be positive")

    size = len(vote.memo.encode("utf-8"))
    if size > memo_limit:
        raise MemoTooLong(
            f"memo {vote.memo!r} is {size} bytes, ledger memo holds {memo_limit}"
        )

    return VoteTransaction(
        sender=keys.address,
        amount=amount,
        fee=fee_amount,
        memo=vote.memo,
    )
