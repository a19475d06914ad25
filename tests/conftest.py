"""Shared fixtures for mip_vote tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key
from stellar_sdk import Keypair

from mip_vote.keys import KeyMaterial
from mip_vote.models.config import (
    DEFAULT_HORIZON_URLS,
    NETWORK_PASSPHRASES,
    SubmissionSettings,
    VoteConfig,
)
from mip_vote.pipeline.submission import SubmissionPipeline
from mip_vote.stellar.signer import StellarSigner

from tests.mocks import MockNetwork, RecordingSleep

DEVNET_PASSPHRASE = NETWORK_PASSPHRASES["devnet"]


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add network info to the report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "Stellar Testnet (devnet)"
    meta["Horizon"] = DEFAULT_HORIZON_URLS["devnet"]


def make_test_config(**overrides) -> VoteConfig:
    """Build a VoteConfig suitable for testing."""
    defaults = dict(
        fee=100,
        amount=1,
        canonical_memo=True,
        tx_timeout=60,
        request_timeout=1.0,
        poll_interval=0.01,
        submission=fast_settings(),
        log_level="warning",
    )
    defaults.update(overrides)
    return VoteConfig(**defaults)


def fast_settings(**overrides) -> SubmissionSettings:
    """Submission settings with no backoff delay and a short confirm wait."""
    defaults = dict(
        broadcast_attempts=3,
        retry_base_delay=0.0,
        retry_max_delay=0.0,
        confirm_timeout=1.0,
    )
    defaults.update(overrides)
    return SubmissionSettings(**defaults)


@pytest.fixture
def keypair():
    """Fresh random account keypair."""
    return Keypair.random()


@pytest.fixture
def keys(keypair):
    return KeyMaterial(keypair)


@pytest.fixture
def signer():
    return StellarSigner(DEVNET_PASSPHRASE, tx_timeout=60)


@pytest.fixture
def mock_network():
    return MockNetwork(sequence=1000)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def pipeline(mock_network, signer, keys, recording_sleep):
    """SubmissionPipeline wired to the mock network and the real signer."""
    return SubmissionPipeline(
        mock_network, signer, keys,
        settings=fast_settings(),
        sleep=recording_sleep,
    )
