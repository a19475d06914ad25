"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from mip_vote.models.config import VoteConfig


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "MIP_VOTE_",
) -> VoteConfig:
    """Load configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (MIP_VOTE_SECRET, etc.)
        2. TOML config file
        3. Defaults from VoteConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = VoteConfig()

    # ── Vote section ───────────────────────────────────────
    vote = raw.get("vote", {})
    if (v := vote.get("fee")) is not None:
        cfg.fee = int(v)
    if v := vote.get("amount"):
        cfg.amount = int(v)
    if (v := vote.get("canonical_memo")) is not None:
        cfg.canonical_memo = bool(v)

    # ── Network section ────────────────────────────────────
    network = raw.get("network", {})
    for name in ("devnet", "mainnet"):
        if v := network.get(f"{name}_horizon_url"):
            cfg.horizon_urls[name] = str(v)
    if v := network.get("tx_timeout"):
        cfg.tx_timeout = int(v)
    if v := network.get("request_timeout"):
        cfg.request_timeout = float(v)
    if v := network.get("poll_interval"):
        cfg.poll_interval = float(v)

    # ── Submission section ─────────────────────────────────
    submission = raw.get("submission", {})
    if v := submission.get("broadcast_attempts"):
        cfg.submission.broadcast_attempts = int(v)
    if (v := submission.get("retry_base_delay")) is not None:
        cfg.submission.retry_base_delay = float(v)
    if (v := submission.get("retry_max_delay")) is not None:
        cfg.submission.retry_max_delay = float(v)
    if v := submission.get("confirm_timeout"):
        cfg.submission.confirm_timeout = float(v)

    # ── Logging section ────────────────────────────────────
    logging_raw = raw.get("logging", {})
    if v := logging_raw.get("level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if secret := os.environ.get(f"{env_prefix}SECRET"):
        cfg.secret = secret
    if fee := os.environ.get(f"{env_prefix}FEE"):
        cfg.fee = int(fee)
    if timeout := os.environ.get(f"{env_prefix}CONFIRM_TIMEOUT"):
        cfg.submission.confirm_timeout = float(timeout)
    if level := os.environ.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    return cfg
