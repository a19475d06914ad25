"""Sign -> prove -> broadcast -> confirm."""

from mip_vote.pipeline.prover import NullProver
from mip_vote.pipeline.submission import SubmissionPipeline

__all__ = ["NullProver", "SubmissionPipeline"]
