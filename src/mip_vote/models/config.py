"""Configuration models for the vote tool."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class NetworkProfile:
    """Endpoint and passphrase of one ledger network."""

    name: str
    horizon_url: str
    network_passphrase: str


NETWORK_PASSPHRASES = {
    "devnet": "Test SDF Network ; September 2015",
    "mainnet": "Public Global Stellar Network ; September 2015",
}

DEFAULT_HORIZON_URLS = {
    "devnet": "https://horizon-testnet.stellar.org",
    "mainnet": "https://horizon.stellar.org",
}


@dataclass
class SubmissionSettings:
    """Retry and timeout knobs for the submission pipeline."""

    broadcast_attempts: int = 3
    retry_base_delay: float = 1.0  # seconds
    retry_max_delay: float = 8.0  # seconds
    confirm_timeout: float = 120.0  # seconds


@dataclass
class VoteConfig:
    """Complete tool configuration."""

    # Vote
    fee: int = 100  # stroops, used when no fee argument is given
    amount: int = 1  # stroops moved by the self-transfer
    canonical_memo: bool = True

    # Network
    horizon_urls: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_HORIZON_URLS)
    )
    tx_timeout: int = 300  # seconds of envelope validity
    request_timeout: float = 15.0  # seconds per HTTP request
    poll_interval: float = 2.0  # seconds between confirmation polls

    # Submission
    submission: SubmissionSettings = field(default_factory=SubmissionSettings)

    # Logging
    log_level: str = "warning"

    # Loaded from env var MIP_VOTE_SECRET only
    secret: str = ""

    def profile(self, network: str) -> NetworkProfile:
        """Resolve a network selector ("devnet" or "mainnet")."""
        if network not in NETWORK_PASSPHRASES:
            raise ValueError(
                f"unknown network {network!r}, expected one of: "
                f"{', '.join(sorted(NETWORK_PASSPHRASES))}"
            )
        return NetworkProfile(
            name=network,
            horizon_url=self.horizon_urls.get(network, DEFAULT_HORIZON_URLS[network]),
            network_passphrase=NETWORK_PASSPHRASES[network],
        )
