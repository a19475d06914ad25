"""Vote parsing, fee parsing, transaction assembly and tallying."""

from mip_vote.vote.encoder import MEMO_MAX_BYTES, canonical_memo, decode_memo, validate
from mip_vote.vote.fee import parse_fee
from mip_vote.vote.builder import NOMINAL_AMOUNT, build
from mip_vote.vote.tally import TallyResult, VoteRecord, tally

__all__ = [
    "MEMO_MAX_BYTES", "canonical_memo", "decode_memo", "validate",
    "parse_fee",
    "NOMINAL_AMOUNT", "build",
    "TallyResult", "VoteRecord", "tally",
]
