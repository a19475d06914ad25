"""Data models for the mip_vote tool."""

from mip_vote.models.vote import Fee, ValidationCode, ValidationError, Vote
from mip_vote.models.transaction import SignedTransaction, VoteTransaction
from mip_vote.models.results import PipelineState, SubmissionResult, SubmissionStatus
from mip_vote.models.config import (
    NetworkProfile,
    SubmissionSettings,
    VoteConfig,
)

__all__ = [
    "Fee", "ValidationCode", "ValidationError", "Vote",
    "SignedTransaction", "VoteTransaction",
    "PipelineState", "SubmissionResult", "SubmissionStatus",
    "NetworkProfile", "SubmissionSettings", "VoteConfig",
]
