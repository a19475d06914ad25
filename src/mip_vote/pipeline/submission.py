"""Submission pipeline - sign, prove, broadcast and confirm a vote transaction."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from mip_vote.exceptions import (
    NetworkError,
    ProofError,
    SigningError,
    TransactionRejected,
)
from mip_vote.interfaces.network import NetworkClient
from mip_vote.interfaces.signer import Prover, Signer
from mip_vote.keys import KeyMaterial
from mip_vote.models.config import SubmissionSettings
from mip_vote.models.results import PipelineState, SubmissionResult, SubmissionStatus
from mip_vote.models.transaction import SignedTransaction, VoteTransaction
from mip_vote.pipeline.prover import NullProver
from mip_vote.pipeline.retry import retry_transient

log = logging.getLogger(__name__)

# Extra time granted to the network client to report its own timeout
CONFIRM_GRACE = 1.0  # seconds

_TERMINAL_STATES = {
    SubmissionStatus.CONFIRMED: PipelineState.CONFIRMED,
    SubmissionStatus.REJECTED: PipelineState.REJECTED,
    SubmissionStatus.TIMED_OUT: PipelineState.TIMED_OUT,
    SubmissionStatus.NETWORK_ERROR: PipelineState.FAILED,
}


class SubmissionPipeline:
    """Drives a built vote transaction to a terminal SubmissionResult.

    Built -> Signed -> Proved -> Broadcast -> Confirmed | Rejected | TimedOut

    Signing and proof failures raise and are never retried. Transient
    network failures while loading the sequence number or broadcasting are
    retried with backoff; every broadcast retry resends the same signed
    envelope. Ledger rejections end the run immediately.

    The network client is injected; one pipeline serves one account and
    signs one transaction at a time.
    """

    def __init__(
        self,
        network: NetworkClient,
        signer: Signer,
        keys: KeyMaterial,
        *,
        prover: Prover | None = None,
        settings: SubmissionSettings | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._network = network
        self._signer = signer
        self._keys = keys
        self._prover = prover or NullProver()
        self._settings = settings or SubmissionSettings()
        self._sleep = sleep

        self.state: PipelineState | None = None
        self.history: list[PipelineState] = []
        self.signed: SignedTransaction | None = None

        self._signed_by_tx: dict[VoteTransaction, SignedTransaction] = {}
        self._broadcast_hashes: set[str] = set()

    def _enter(self, state: PipelineState) -> None:
        self.state = state
        self.history.append(state)
        log.debug("Pipeline -> %s", state.value)

    def _finish(self, result: SubmissionResult) -> SubmissionResult:
        self._enter(_TERMINAL_STATES[result.status])
        return result

    # ── Steps ──────────────────────────────────────────────

    def _sign(self, tx: VoteTransaction, nonce: int) -> SignedTransaction:
        try:
            return self._signer.sign(tx, self._keys, nonce)
        except SigningError:
            self._enter(PipelineState.FAILED)
            raise
        except Exception as exc:
            self._enter(PipelineState.FAILED)
            raise SigningError(f"signing failed ({type(exc).__name__})") from None

    async def _prove(self, signed: SignedTransaction) -> SignedTransaction:
        try:
            return await self._prover.prove(signed)
        except ProofError:
            self._enter(PipelineState.FAILED)
            raise
        except Exception as exc:
            self._enter(PipelineState.FAILED)
            raise ProofError(f"proof generation failed: {exc}") from exc

    async def _broadcast(self, signed: SignedTransaction) -> str:
        if signed.tx_hash in self._broadcast_hashes:
            log.info("Tx %s already broadcast, not resending", signed.tx_hash[:16])
            return signed.tx_hash

        s = self._settings
        tx_hash = await retry_transient(
            lambda: self._network.submit(signed),
            max_attempts=s.broadcast_attempts,
            base_delay=s.retry_base_delay,
            max_delay=s.retry_max_delay,
            what="broadcast",
            sleep=self._sleep,
        )
        self._broadcast_hashes.add(signed.tx_hash)
        return tx_hash

    async def _confirm(self, tx_hash: str) -> SubmissionResult:
        timeout = self._settings.confirm_timeout
        try:
            return await asyncio.wait_for(
                self._network.await_confirmation(tx_hash, timeout),
                timeout=timeout + CONFIRM_GRACE,
            )
        except asyncio.TimeoutError:
            return SubmissionResult.timed_out(tx_hash)
        except NetworkError as exc:
            return SubmissionResult.network_error(str(exc), tx_hash=tx_hash)

    # ── Entry point ────────────────────────────────────────

    async def submit(self, tx: VoteTransaction) -> SubmissionResult:
        """Run ``tx`` through the pipeline and return its terminal outcome.

        Submitting the same transaction again reuses its signed envelope and
        does not broadcast it a second time.
        """
        self.history = []
        self._enter(PipelineState.BUILT)
        s = self._settings

        signed = self._signed_by_tx.get(tx)
        if signed is None:
            try:
                nonce = await retry_transient(
                    lambda: self._network.fetch_nonce(tx.sender),
                    max_attempts=s.broadcast_attempts,
                    base_delay=s.retry_base_delay,
                    max_delay=s.retry_max_delay,
                    what="sequence lookup",
                    sleep=self._sleep,
                )
            except TransactionRejected as exc:
                return self._finish(SubmissionResult.rejected(exc.reason))
            except NetworkError as exc:
                return self._finish(SubmissionResult.network_error(str(exc)))

            signed = self._sign(tx, nonce)
            self._enter(PipelineState.SIGNED)
            signed = await self._prove(signed)
            self._enter(PipelineState.PROVED)
            self._signed_by_tx[tx] = signed
        else:
            self._enter(PipelineState.SIGNED)
            self._enter(PipelineState.PROVED)

        self.signed = signed
        log.info(
            "Submitting vote %r from %s (fee=%d, tx=%s)",
            tx.memo, tx.sender, tx.fee, signed.tx_hash[:16],
        )

        try:
            tx_hash = await self._broadcast(signed)
        except TransactionRejected as exc:
            log.error("Vote tx %s rejected: %s", signed.tx_hash[:16], exc.reason)
            return self._finish(
                SubmissionResult.rejected(exc.reason, tx_hash=exc.tx_hash or signed.tx_hash)
            )
        except NetworkError as exc:
            return self._finish(
                SubmissionResult.network_error(str(exc), tx_hash=signed.tx_hash)
            )
        self._enter(PipelineState.BROADCAST)

        result = await self._confirm(tx_hash)
        log.info("Vote tx %s finished: %s", tx_hash[:16], result.status.value)
        return self._finish(result)
