"""Memo tallying: count the latest vote per account for one proposal."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from mip_vote.models.vote import Vote
from mip_vote.vote.encoder import decode_memo

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteRecord:
    """A memo-bearing transaction as read back from the ledger."""

    account: str
    tx_hash: str
    memo: str
    height: int  # ledger sequence
    nonce: int  # account sequence

    def is_newer_than(self, other: VoteRecord) -> bool:
        return self.height > other.height or (
            self.height == other.height and self.nonce > other.nonce
        )


@dataclass
class TallyResult:
    """Latest vote of each account on a proposal."""

    proposal_id: int
    votes: dict[str, tuple[VoteRecord, Vote]] = field(default_factory=dict)

    @property
    def yes(self) -> int:
        return sum(1 for _, vote in self.votes.values() if vote.support)

    @property
    def no(self) -> int:
        return sum(1 for _, vote in self.votes.values() if not vote.support)

    @property
    def total(self) -> int:
        return len(self.votes)


def tally(records: Iterable[VoteRecord], proposal_id: int) -> TallyResult:
    """Tally records voting on ``proposal_id``.

    Memos that are not votes, or vote on another proposal, are skipped.
    An account that voted more than once is counted by its newest vote.
    """
    result = TallyResult(proposal_id=proposal_id)
    skipped = 0

    for record in records:
        decoded = decode_memo(record.memo)
        if not isinstance(decoded, Vote) or decoded.proposal_id != proposal_id:
            skipped += 1
            continue

        current = result.votes.get(record.account)
        if current is None or record.is_newer_than(current[0]):
            result.votes[record.account] = (record, decoded)

    log.debug(
        "Tallied MIP%d: %d yes, %d no (%d records skipped)",
        proposal_id, result.yes, result.no, skipped,
    )
    return result
