"""Horizon network client - broadcasts envelopes and polls for settlement."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx
from stellar_sdk import xdr

from mip_vote.exceptions import NetworkError, TransactionRejected
from mip_vote.models.results import SubmissionResult
from mip_vote.models.transaction import SignedTransaction

log = logging.getLogger(__name__)

# Ledger result codes rephrased for the voter
_REJECTION_REASONS = {
    "tx_bad_seq": "duplicate nonce",
    "tx_insufficient_fee": "insufficient fee",
    "tx_insufficient_balance": "insufficient balance",
    "tx_no_account": "account not found",
    "tx_bad_auth": "bad signature",
    "tx_too_late": "transaction expired",
}


def _result_code(result_xdr: str | None) -> str:
    """Turn a base64 TransactionResult into a Horizon-style code (tx_bad_seq)."""
    if not result_xdr:
        return "tx_failed"
    try:
        result = xdr.TransactionResult.from_xdr(result_xdr)
        name = result.result.code.name  # e.g. "txBAD_SEQ"
    except Exception as exc:
        log.debug("Could not decode result XDR: %s", exc)
        return "tx_failed"
    return "tx_" + name[2:].lower() if name.startswith("tx") else name.lower()


def rejection_reason(code: str) -> str:
    return _REJECTION_REASONS.get(code, code)


class HorizonNetworkClient:
    """NetworkClient backed by Horizon's REST API.

    Submission uses the async endpoint (/transactions_async) so that
    broadcast and confirmation are separate steps.
    """

    def __init__(
        self,
        horizon_url: str,
        request_timeout: float = 15.0,
        poll_interval: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = horizon_url.rstrip("/")
        self._poll_interval = poll_interval
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(request_timeout, connect=10),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Horizon request timed out: {path}") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Horizon unreachable: {exc}") from exc
        if resp.status_code >= 500:
            raise NetworkError(f"Horizon HTTP {resp.status_code} on {path}")
        return resp

    async def fetch_nonce(self, address: str) -> int:
        """Current sequence number of ``address``."""
        resp = await self._request("GET", f"/accounts/{address}")
        if resp.status_code == 404:
            raise TransactionRejected("account not found")
        if resp.status_code == 429:
            raise NetworkError("Horizon rate limit reached")
        if resp.status_code != 200:
            raise NetworkError(f"Horizon HTTP {resp.status_code} loading account")
        return int(resp.json()["sequence"])

    async def submit(self, signed: SignedTransaction) -> str:
        """Broadcast the envelope. Returns the hash once Horizon accepts it."""
        log.info("Broadcasting tx %s", signed.tx_hash[:16])
        resp = await self._request(
            "POST", "/transactions_async", data={"tx": signed.envelope_xdr},
        )
        if resp.status_code == 429:
            raise NetworkError("Horizon rate limit reached")

        try:
            body = resp.json()
        except ValueError as exc:
            raise NetworkError(f"Horizon HTTP {resp.status_code}: unreadable body") from exc

        status = body.get("tx_status")
        tx_hash = body.get("hash") or signed.tx_hash

        if status in ("PENDING", "DUPLICATE"):
            if status == "DUPLICATE":
                log.info("Tx %s already known to the network", tx_hash[:16])
            return tx_hash
        if status == "TRY_AGAIN_LATER":
            raise NetworkError("network asked to try again later")
        if status == "ERROR":
            code = _result_code(body.get("error_result_xdr"))
            raise TransactionRejected(rejection_reason(code), tx_hash=tx_hash)

        # Malformed envelope and similar problem+json responses
        detail = body.get("detail") or body.get("title") or f"HTTP {resp.status_code}"
        raise TransactionRejected(str(detail), tx_hash=tx_hash)

    async def get_status(self, tx_hash: str) -> SubmissionResult | None:
        """Settled outcome of ``tx_hash``, or None while it is not in a ledger."""
        resp = await self._request("GET", f"/transactions/{tx_hash}")
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise NetworkError(f"Horizon HTTP {resp.status_code} on transaction lookup")

        body = resp.json()
        ledger = body.get("ledger")
        if body.get("successful"):
            return SubmissionResult.confirmed(tx_hash, ledger=ledger)
        code = _result_code(body.get("result_xdr"))
        return SubmissionResult.rejected(rejection_reason(code), tx_hash=tx_hash)

    async def await_confirmation(self, tx_hash: str, timeout: float) -> SubmissionResult:
        """Poll until the transaction settles or ``timeout`` seconds pass."""
        deadline = time.monotonic() + timeout
        while True:
            try:
                result = await self.get_status(tx_hash)
            except NetworkError as exc:
                log.warning("Status poll for %s failed: %s", tx_hash[:16], exc)
                result = None

            if result is not None:
                log.info("Tx %s settled: %s", tx_hash[:16], result.status.value)
                return result

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                log.warning("Tx %s not settled after %.0fs", tx_hash[:16], timeout)
                return SubmissionResult.timed_out(tx_hash)
            await asyncio.sleep(min(self._poll_interval, remaining))
