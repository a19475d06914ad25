"""Fee argument parsing."""

from __future__ import annotations

import re

from mip_vote.models.vote import Fee, ValidationCode, ValidationError

ZERO_FEE_WARNING = "zero fee may be rejected by the network"

_WHOLE_NUMBER = re.compile(r"^[0-9]+$")


def parse_fee(raw: str) -> Fee | ValidationError:
    """Parse a fee in stroops. Whole, non-negative numbers only.

    No upper bound is enforced here; the network decides whether the fee
    is sufficient.
    """
    text = raw.strip()
    if not _WHOLE_NUMBER.match(text):
        return ValidationError(
            ValidationCode.INVALID_FEE,
            f"Specified fee {raw!r} is not a whole, non-negative number",
        )
    try:
        amount = int(text)
    except ValueError:
        # Over the interpreter's int-from-string digit limit
        return ValidationError(
            ValidationCode.INVALID_FEE,
            f"Specified fee has {len(text)} digits, too many to read",
        )
    return Fee(amount=amount, warning=ZERO_FEE_WARNING if amount == 0 else None)
