"""Horizon network client against a mocked HTTP transport."""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from mip_vote.exceptions import NetworkError, TransactionRejected
from mip_vote.models.results import SubmissionStatus
from mip_vote.models.transaction import SignedTransaction
from mip_vote.stellar.horizon import HorizonNetworkClient, rejection_reason
from tests.factories import make_transaction

HORIZON = "https://horizon.test"
TX_HASH = "ab" * 32
ADDRESS = "GDNAG4KFFVF5HCSGRWZIXZNL2SR2KBGJSHW2A6FI6DZI62XF6IBLO4GD"

# TransactionResult XDR: fee 100, code txBAD_SEQ (-5) / txINSUFFICIENT_FEE (-9)
RESULT_BAD_SEQ = "AAAAAAAAAGT////7AAAAAA=="
RESULT_INSUFFICIENT_FEE = "AAAAAAAAAGT////3AAAAAA=="


def _client(handler) -> HorizonNetworkClient:
    return HorizonNetworkClient(
        HORIZON,
        request_timeout=1.0,
        poll_interval=0.01,
        transport=httpx.MockTransport(handler),
    )


def _signed() -> SignedTransaction:
    return SignedTransaction(
        transaction=make_transaction(ADDRESS),
        nonce=1001,
        envelope_xdr="AAAAENVELOPE",
        tx_hash=TX_HASH,
    )


# ── Sequence lookup ──────────────────────────────────────────────


async def test_fetch_nonce():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"id": ADDRESS, "sequence": "123456789012"})

    client = _client(handler)
    assert await client.fetch_nonce(ADDRESS) == 123456789012
    assert seen == [f"/accounts/{ADDRESS}"]
    await client.close()


async def test_fetch_nonce_unknown_account():
    client = _client(lambda r: httpx.Response(404, json={"title": "Resource Missing"}))
    with pytest.raises(TransactionRejected) as excinfo:
        await client.fetch_nonce(ADDRESS)
    assert excinfo.value.reason == "account not found"
    await client.close()


@pytest.mark.parametrize("status", [429, 500, 503])
async def test_fetch_nonce_transient(status):
    client = _client(lambda r: httpx.Response(status, json={}))
    with pytest.raises(NetworkError):
        await client.fetch_nonce(ADDRESS)
    await client.close()


# ── Broadcast ────────────────────────────────────────────────────


async def test_submit_pending():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/transactions_async"
        bodies.append(parse_qs(request.content.decode()))
        return httpx.Response(201, json={"hash": TX_HASH, "tx_status": "PENDING"})

    client = _client(handler)
    assert await client.submit(_signed()) == TX_HASH
    assert bodies == [{"tx": ["AAAAENVELOPE"]}]
    await client.close()


async def test_submit_duplicate_is_accepted():
    client = _client(lambda r: httpx.Response(409, json={"hash": TX_HASH, "tx_status": "DUPLICATE"}))
    assert await client.submit(_signed()) == TX_HASH
    await client.close()


@pytest.mark.parametrize(
    "result_xdr, reason",
    [
        (RESULT_BAD_SEQ, "duplicate nonce"),
        (RESULT_INSUFFICIENT_FEE, "insufficient fee"),
        ("not-xdr", "tx_failed"),
        (None, "tx_failed"),
    ],
)
async def test_submit_error_is_rejection(result_xdr, reason):
    body = {"hash": TX_HASH, "tx_status": "ERROR", "error_result_xdr": result_xdr}
    client = _client(lambda r: httpx.Response(400, json=body))
    with pytest.raises(TransactionRejected) as excinfo:
        await client.submit(_signed())
    assert excinfo.value.reason == reason
    assert excinfo.value.tx_hash == TX_HASH
    await client.close()


async def test_submit_malformed_envelope_is_rejection():
    body = {"title": "Transaction Malformed", "detail": "envelope could not be decoded"}
    client = _client(lambda r: httpx.Response(400, json=body))
    with pytest.raises(TransactionRejected) as excinfo:
        await client.submit(_signed())
    assert excinfo.value.reason == "envelope could not be decoded"
    await client.close()


async def test_submit_try_again_later():
    body = {"hash": TX_HASH, "tx_status": "TRY_AGAIN_LATER"}
    client = _client(lambda r: httpx.Response(503, json=body))
    with pytest.raises(NetworkError):
        await client.submit(_signed())
    await client.close()


@pytest.mark.parametrize(
    "exc", [httpx.ConnectError("refused"), httpx.ReadTimeout("slow")],
)
async def test_submit_transport_failures(exc):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    client = _client(handler)
    with pytest.raises(NetworkError):
        await client.submit(_signed())
    await client.close()


async def test_submit_unreadable_body():
    client = _client(lambda r: httpx.Response(200, text="<html>proxy</html>"))
    with pytest.raises(NetworkError):
        await client.submit(_signed())
    await client.close()


# ── Settlement ───────────────────────────────────────────────────


async def test_get_status_pending():
    client = _client(lambda r: httpx.Response(404, json={}))
    assert await client.get_status(TX_HASH) is None
    await client.close()


async def test_get_status_confirmed():
    body = {"hash": TX_HASH, "successful": True, "ledger": 51234}
    client = _client(lambda r: httpx.Response(200, json=body))
    result = await client.get_status(TX_HASH)
    assert result.status is SubmissionStatus.CONFIRMED
    assert result.ledger == 51234
    assert result.tx_hash == TX_HASH
    await client.close()


async def test_get_status_failed():
    body = {"hash": TX_HASH, "successful": False, "ledger": 7, "result_xdr": RESULT_BAD_SEQ}
    client = _client(lambda r: httpx.Response(200, json=body))
    result = await client.get_status(TX_HASH)
    assert result.status is SubmissionStatus.REJECTED
    assert result.reason == "duplicate nonce"
    await client.close()


async def test_await_confirmation_polls_until_found():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if len(calls) == 1:
            return httpx.Response(404, json={})
        if len(calls) == 2:
            return httpx.Response(502, json={})
        return httpx.Response(200, json={"hash": TX_HASH, "successful": True, "ledger": 9})

    client = _client(handler)
    result = await client.await_confirmation(TX_HASH, timeout=5)
    assert result.success
    assert calls == [f"/transactions/{TX_HASH}"] * 3
    await client.close()


async def test_await_confirmation_times_out():
    client = _client(lambda r: httpx.Response(404, json={}))
    result = await client.await_confirmation(TX_HASH, timeout=0.05)
    assert result.status is SubmissionStatus.TIMED_OUT
    assert result.tx_hash == TX_HASH
    await client.close()


# ── Misc ─────────────────────────────────────────────────────────


def test_rejection_reasons():
    assert rejection_reason("tx_bad_seq") == "duplicate nonce"
    assert rejection_reason("tx_insufficient_balance") == "insufficient balance"
    assert rejection_reason("tx_something_new") == "tx_something_new"


async def test_close():
    client = _client(lambda r: httpx.Response(404))
    await client.close()
    assert client._client.is_closed
