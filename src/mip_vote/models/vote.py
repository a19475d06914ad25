"""Validated vote and fee values, and the errors returned for bad input."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ValidationCode(str, Enum):
    """Why a vote or fee string was refused."""

    MALFORMED_VOTE = "malformed_vote"
    INVALID_PROPOSAL_ID = "invalid_proposal_id"
    UNSUPPORTED_CHARACTERS = "unsupported_characters"
    MEMO_TOO_LONG = "memo_too_long"
    INVALID_FEE = "invalid_fee"


@dataclass(frozen=True)
class ValidationError:
    """A refused input, returned by value rather than raised."""

    code: ValidationCode
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Vote:
    """A single governance decision on one proposal."""

    raw: str
    proposal_id: int
    support: bool
    memo: str  # exact on-chain memo text


@dataclass(frozen=True)
class Fee:
    """Transaction fee in the ledger's smallest unit (stroops)."""

    amount: int
    warning: str | None = None
