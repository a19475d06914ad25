"""Vote string validation and memo encoding.

Accepted shapes are ``MIP<n>`` (support) and ``no MIP<n>`` (oppose). The
on-chain memo is re-derived from the parsed vote so that every spelling of
the same vote lands on-chain as the same bytes, and tallies can compare
memos by exact match.
"""

from __future__ import annotations

import re

from mip_vote.models.vote import ValidationCode, ValidationError, Vote

MEMO_MAX_BYTES = 32
PROPOSAL_TOKEN = "MIP"
NEGATION_MARKER = "no"

VOTE_EXAMPLE = '"MIP3" or "no MIP3"'

_VOTE_SHAPE = re.compile(r"^(?:(?P<negation>(?i:no)) +)?MIP(?P<number>.*)$")
_DIGITS = re.compile(r"^[0-9]+$")
_MEMO_SHAPE = re.compile(r"^(?:(?P<negation>no) )?mip(?P<number>0|[1-9][0-9]*)$")


def _is_memo_text(text: str) -> bool:
    return all(" " <= ch <= "~" for ch in text)


def canonical_memo(support: bool, proposal_id: int) -> str:
    """Encode a vote as its canonical memo text."""
    if proposal_id < 0:
        raise ValueError("proposal_id must be >= 0")
    token = f"{PROPOSAL_TOKEN}{proposal_id}"
    return token if support else f"{NEGATION_MARKER} {token}"


def validate(raw: str, *, canonical: bool = True) -> Vote | ValidationError:
    """Parse a vote string into a Vote, or return why it was refused.

    With ``canonical=False`` the memo is the trimmed input as typed.
    """
    text = raw.strip()

    if not _is_memo_text(text):
        return ValidationError(
            ValidationCode.UNSUPPORTED_CHARACTERS,
            "Vote contains characters the memo field cannot carry "
            "(printable ASCII only)",
        )

    match = _VOTE_SHAPE.match(text)
    number = match.group("number") if match else ""
    if not number or not number[0].isdigit():
        return ValidationError(
            ValidationCode.MALFORMED_VOTE,
            f"Malformed vote {raw!r}. Expected shape such as {VOTE_EXAMPLE}",
        )

    if not _DIGITS.match(number):
        return ValidationError(
            ValidationCode.INVALID_PROPOSAL_ID,
            f"Invalid proposal number {number!r}. Expected digits only after "
            f'"{PROPOSAL_TOKEN}", for instance {VOTE_EXAMPLE}',
        )

    # Leading zeros never reach a canonical memo; anything longer cannot fit.
    significant = number.lstrip("0") or "0"
    if len(significant) > MEMO_MAX_BYTES or (not canonical and len(text) > MEMO_MAX_BYTES):
        return ValidationError(
            ValidationCode.MEMO_TOO_LONG,
            f"Vote memo is too long, the memo field holds {MEMO_MAX_BYTES} bytes",
        )

    proposal_id = int(significant)
    support = match.group("negation") is None
    memo = canonical_memo(support, proposal_id) if canonical else text

    size = len(memo.encode("ascii"))
    if size > MEMO_MAX_BYTES:
        return ValidationError(
            ValidationCode.MEMO_TOO_LONG,
            f"Vote memo is {size} bytes, the memo field holds {MEMO_MAX_BYTES}",
        )

    return Vote(raw=raw, proposal_id=proposal_id, support=support, memo=memo)


def decode_memo(memo: str) -> Vote | ValidationError:
    """Read a vote back from an on-chain memo.

    Matching is case-insensitive, as vote aggregation has always compared
    memos, so verbatim-mode memos like ``"mip3"`` still count. Otherwise the
    memo must be exact: one space after "no", no leading zeros and no
    surrounding whitespace.
    """
    text = memo.rstrip("\x00")
    match = _MEMO_SHAPE.match(text.lower()) if len(text) <= MEMO_MAX_BYTES else None
    if match is None:
        return ValidationError(
            ValidationCode.MALFORMED_VOTE, f"Memo {memo!r} is not a vote"
        )
    return Vote(
        raw=memo,
        proposal_id=int(match.group("number")),
        support=match.group("negation") is None,
        memo=text,
    )
