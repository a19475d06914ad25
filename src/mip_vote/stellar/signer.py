"""Stellar signer - payment-to-self envelope with a text memo."""

from __future__ import annotations

import logging
from decimal import Decimal

from stellar_sdk import Account, Asset, TransactionBuilder

from mip_vote.exceptions import SigningError
from mip_vote.keys import KeyMaterial
from mip_vote.models.transaction import SignedTransaction, VoteTransaction

log = logging.getLogger(__name__)

STROOPS_PER_XLM = 10_000_000
TEXT_MEMO_MAX_BYTES = 28
MAX_BASE_FEE = 2**32 - 1  # uint32 fee field, one operation


def stroops_to_xlm(stroops: int) -> str:
    return f"{Decimal(stroops) / STROOPS_PER_XLM:.7f}"


class StellarSigner:
    """Signs vote transactions as classic Stellar payments.

    The envelope is a single native payment from the account to itself with
    the vote as text memo and the fee as base fee.
    """

    memo_limit = TEXT_MEMO_MAX_BYTES
    fee_limit = MAX_BASE_FEE

    def __init__(self, network_passphrase: str, tx_timeout: int = 300) -> None:
        self._network_passphrase = network_passphrase
        self._tx_timeout = tx_timeout

    def sign(self, tx: VoteTransaction, keys: KeyMaterial, nonce: int) -> SignedTransaction:
        """Build and sign the envelope at account sequence ``nonce``."""
        if tx.sender != keys.address:
            raise SigningError("transaction sender does not match the signing key")

        try:
            envelope = (
                TransactionBuilder(
                    source_account=Account(tx.sender, nonce),
                    network_passphrase=self._network_passphrase,
                    base_fee=tx.fee,
                )
                .append_payment_op(
                    destination=tx.receiver,
                    asset=Asset.native(),
                    amount=stroops_to_xlm(tx.amount),
                )
                .add_text_memo(tx.memo)
                .set_timeout(self._tx_timeout)
                .build()
            )
            envelope.sign(keys.keypair)
        except Exception as exc:
            # Report the error type only; SDK messages may quote inputs.
            raise SigningError(
                f"could not sign vote transaction ({type(exc).__name__})"
            ) from None

        signed = SignedTransaction(
            transaction=tx,
            nonce=envelope.transaction.sequence,
            envelope_xdr=envelope.to_xdr(),
            tx_hash=envelope.hash_hex(),
        )
        log.debug(
            "Signed vote tx %s (memo=%r, fee=%d, seq=%d)",
            signed.tx_hash[:16], tx.memo, tx.fee, signed.nonce,
        )
        return signed
