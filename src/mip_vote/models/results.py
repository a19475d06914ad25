"""Submission outcomes and pipeline states."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SubmissionStatus(str, Enum):
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    NETWORK_ERROR = "network_error"
    TIMED_OUT = "timed_out"


class PipelineState(str, Enum):
    """Where a vote transaction is in the submission pipeline."""

    BUILT = "built"
    SIGNED = "signed"
    PROVED = "proved"
    BROADCAST = "broadcast"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionResult:
    """Terminal outcome of submitting a vote transaction."""

    status: SubmissionStatus
    tx_hash: str | None = None
    reason: str | None = None
    ledger: int | None = None  # ledger sequence that included the tx

    def __post_init__(self):
        if not isinstance(self.status, SubmissionStatus):
            object.__setattr__(self, "status", SubmissionStatus(self.status))

    @property
    def success(self) -> bool:
        return self.status == SubmissionStatus.CONFIRMED

    @classmethod
    def confirmed(cls, tx_hash: str, ledger: int | None = None) -> SubmissionResult:
        return cls(status=SubmissionStatus.CONFIRMED, tx_hash=tx_hash, ledger=ledger)

    @classmethod
    def rejected(cls, reason: str, tx_hash: str | None = None) -> SubmissionResult:
        return cls(status=SubmissionStatus.REJECTED, tx_hash=tx_hash, reason=reason)

    @classmethod
    def network_error(cls, reason: str, tx_hash: str | None = None) -> SubmissionResult:
        return cls(status=SubmissionStatus.NETWORK_ERROR, tx_hash=tx_hash, reason=reason)

    @classmethod
    def timed_out(cls, tx_hash: str) -> SubmissionResult:
        return cls(
            status=SubmissionStatus.TIMED_OUT,
            tx_hash=tx_hash,
            reason="confirmation timed out",
        )
