"""Exception hierarchy for failures that are not plain invalid input."""

from __future__ import annotations


class MipVoteError(Exception):
    """Base class for mip_vote errors."""


class BuildError(MipVoteError):
    """Raised when a vote transaction cannot be assembled."""


class MemoTooLong(BuildError):
    """Raised when a memo does not fit the ledger's memo budget."""


class SigningError(MipVoteError):
    """Raised when a transaction cannot be signed. Never retried."""


class KeyDerivationError(SigningError):
    """Raised when the supplied secret does not decode to a keypair."""


class ProofError(MipVoteError):
    """Raised when a correctness proof cannot be produced. Never retried."""


class NetworkError(MipVoteError):
    """Transient failure talking to the ledger. Eligible for retry."""


class TransactionRejected(MipVoteError):
    """The ledger explicitly refused the transaction. Terminal."""

    def __init__(self, reason: str, tx_hash: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.tx_hash = tx_hash
