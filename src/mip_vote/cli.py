"""CLI entry point for casting and checking MIP votes."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from mip_vote.config import load_config
from mip_vote.exceptions import (
    BuildError,
    KeyDerivationError,
    NetworkError,
    ProofError,
    SigningError,
    TransactionRejected,
)
from mip_vote.keys import KeyMaterial
from mip_vote.models.config import NETWORK_PASSPHRASES, NetworkProfile, VoteConfig
from mip_vote.models.results import SubmissionResult, SubmissionStatus
from mip_vote.models.vote import ValidationError
from mip_vote.pipeline.submission import SubmissionPipeline
from mip_vote.stellar.horizon import HorizonNetworkClient
from mip_vote.stellar.signer import StellarSigner, stroops_to_xlm
from mip_vote.vote.builder import build
from mip_vote.vote.encoder import validate
from mip_vote.vote.fee import parse_fee
from mip_vote.vote.tally import VoteRecord, tally

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VALIDATION = 2
EXIT_SIGNING = 3
EXIT_NETWORK = 4
EXIT_REJECTED = 5
EXIT_TIMED_OUT = 6

_RESULT_EXIT_CODES = {
    SubmissionStatus.CONFIRMED: EXIT_OK,
    SubmissionStatus.REJECTED: EXIT_REJECTED,
    SubmissionStatus.NETWORK_ERROR: EXIT_NETWORK,
    SubmissionStatus.TIMED_OUT: EXIT_TIMED_OUT,
}

NETWORK_CHOICE = click.Choice(sorted(NETWORK_PASSPHRASES))


def make_network_client(profile: NetworkProfile, cfg: VoteConfig) -> HorizonNetworkClient:
    return HorizonNetworkClient(
        profile.horizon_url,
        request_timeout=cfg.request_timeout,
        poll_interval=cfg.poll_interval,
    )


def _fail(message: str, code: int) -> None:
    """Print a single-line error and exit with ``code``."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(code)


def _load(ctx: click.Context) -> VoteConfig:
    try:
        cfg = load_config(ctx.obj["config_path"])
        if not ctx.obj["verbose"]:
            logging.getLogger().setLevel(cfg.log_level.upper())
    except (OSError, ValueError, TypeError) as exc:
        # TOMLDecodeError is a ValueError
        _fail(f"invalid configuration: {exc}", EXIT_VALIDATION)
    return cfg


def _report(result: SubmissionResult) -> None:
    if result.status == SubmissionStatus.CONFIRMED:
        click.echo("Vote confirmed!")
        click.echo(f"  Tx hash:  {result.tx_hash}")
        if result.ledger is not None:
            click.echo(f"  Ledger:   {result.ledger}")
    elif result.status == SubmissionStatus.TIMED_OUT:
        click.echo(
            f"Error: confirmation timed out for tx {result.tx_hash}; "
            "check it with 'mip-vote status' before voting again",
            err=True,
        )
    elif result.status == SubmissionStatus.REJECTED:
        click.echo(f"Error: vote rejected by the network: {result.reason}", err=True)
    else:
        click.echo(f"Error: network error: {result.reason}", err=True)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """mip-vote - cast improvement-proposal votes as memo transactions."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Voting ─────────────────────────────────────────────


@cli.command()
@click.argument("network", type=NETWORK_CHOICE)
@click.argument("vote")
@click.argument("secret")
@click.argument("fee", required=False)
@click.option("--timeout", type=float, default=None, help="Seconds to wait for confirmation")
@click.option("--dry-run", is_flag=True, help="Sign and print the envelope without broadcasting")
@click.option("--verbatim", is_flag=True, help="Use the vote text as typed for the memo")
@click.pass_context
def cast(
    ctx: click.Context,
    network: str,
    vote: str,
    secret: str,
    fee: str | None,
    timeout: float | None,
    dry_run: bool,
    verbatim: bool,
) -> None:
    """Cast VOTE (e.g. "MIP3" or "no MIP3") on NETWORK.

    SECRET is the voting account's secret seed; pass "-" to read it from
    MIP_VOTE_SECRET. FEE is in stroops and defaults to the configured fee.
    """
    cfg = _load(ctx)
    if timeout is not None:
        cfg.submission.confirm_timeout = timeout

    # All input is validated before any network call.
    parsed_vote = validate(vote, canonical=cfg.canonical_memo and not verbatim)
    if isinstance(parsed_vote, ValidationError):
        _fail(parsed_vote.message, EXIT_VALIDATION)

    parsed_fee = parse_fee(fee if fee is not None else str(cfg.fee))
    if isinstance(parsed_fee, ValidationError):
        _fail(parsed_fee.message, EXIT_VALIDATION)
    if parsed_fee.warning:
        log.warning("Fee %d: %s", parsed_fee.amount, parsed_fee.warning)

    if secret == "-":
        secret = cfg.secret
    try:
        keys = KeyMaterial.from_secret(secret)
    except KeyDerivationError as exc:
        _fail(str(exc), EXIT_SIGNING)

    profile = cfg.profile(network)
    signer = StellarSigner(profile.network_passphrase, cfg.tx_timeout)
    try:
        tx = build(
            parsed_vote, parsed_fee, keys,
            amount=cfg.amount,
            memo_limit=signer.memo_limit,
            fee_limit=signer.fee_limit,
        )
    except BuildError as exc:
        _fail(str(exc), EXIT_VALIDATION)

    click.echo(f"Casting vote on {network}")
    click.echo(f"  Address:  {tx.sender}")
    click.echo(f"  Memo:     {tx.memo}")
    click.echo(f"  Fee:      {tx.fee} stroops ({stroops_to_xlm(tx.fee)} XLM)")
    click.echo(f"  Amount:   {tx.amount} stroops (to self)")

    async def _cast() -> SubmissionResult | None:
        client = make_network_client(profile, cfg)
        try:
            if dry_run:
                nonce = await client.fetch_nonce(tx.sender)
                signed = signer.sign(tx, keys, nonce)
                click.echo(f"  Tx hash:  {signed.tx_hash}")
                click.echo(f"  Envelope: {signed.envelope_xdr}")
                return None
            pipeline = SubmissionPipeline(client, signer, keys, settings=cfg.submission)
            return await pipeline.submit(tx)
        finally:
            await client.close()

    try:
        result = asyncio.run(_cast())
    except (SigningError, ProofError) as exc:
        _fail(str(exc), EXIT_SIGNING)
    except TransactionRejected as exc:
        _fail(exc.reason, EXIT_REJECTED)
    except NetworkError as exc:
        _fail(str(exc), EXIT_NETWORK)

    if result is None:
        click.echo("Dry run: nothing broadcast.")
        return
    _report(result)
    sys.exit(_RESULT_EXIT_CODES[result.status])


@cli.command()
@click.argument("network", type=NETWORK_CHOICE)
@click.argument("tx_hash")
@click.pass_context
def status(ctx: click.Context, network: str, tx_hash: str) -> None:
    """Look up the outcome of a vote transaction by hash."""
    cfg = _load(ctx)
    profile = cfg.profile(network)

    async def _status() -> SubmissionResult | None:
        client = make_network_client(profile, cfg)
        try:
            return await client.get_status(tx_hash)
        finally:
            await client.close()

    try:
        result = asyncio.run(_status())
    except NetworkError as exc:
        _fail(str(exc), EXIT_NETWORK)

    if result is None:
        click.echo(f"Tx {tx_hash} is not in a ledger yet.")
        sys.exit(EXIT_TIMED_OUT)
    _report(result)
    sys.exit(_RESULT_EXIT_CODES[result.status])


# ── Tally ──────────────────────────────────────────────


@cli.command("tally")
@click.argument("records_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--proposal", "proposal_id", type=int, required=True, help="Proposal number to tally")
@click.pass_context
def tally_cmd(ctx: click.Context, records_file: str, proposal_id: int) -> None:
    """Tally vote memos from a JSON array of transaction records.

    Each record needs: account, hash, memo, height, nonce.
    """
    _load(ctx)
    try:
        with open(records_file) as f:
            data = json.load(f)
        records = [
            VoteRecord(
                account=str(r["account"]),
                tx_hash=str(r["hash"]),
                memo=str(r["memo"]),
                height=int(r["height"]),
                nonce=int(r["nonce"]),
            )
            for r in data
        ]
    except (ValueError, KeyError, TypeError) as exc:
        _fail(f"unreadable records file: {exc}", EXIT_VALIDATION)

    result = tally(records, proposal_id)
    click.echo(f"MIP{proposal_id}")
    click.echo(f"  Yes:      {result.yes}")
    click.echo(f"  No:       {result.no}")
    click.echo(f"  Voters:   {result.total}")
    for account, (record, vote) in sorted(result.votes.items()):
        choice = "yes" if vote.support else "no"
        click.echo(f"  [{choice:3s}] {account} tx={record.tx_hash[:16]}... height={record.height}")


# ── Info ───────────────────────────────────────────────


@cli.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show resolved configuration."""
    cfg = _load(ctx)
    click.echo(f"Fee:             {cfg.fee} stroops")
    click.echo(f"Amount:          {cfg.amount} stroops")
    click.echo(f"Canonical memo:  {cfg.canonical_memo}")
    for name in sorted(cfg.horizon_urls):
        click.echo(f"Horizon {name + ':':9s}{cfg.horizon_urls[name]}")
    click.echo(f"Attempts:        {cfg.submission.broadcast_attempts}")
    click.echo(f"Confirm timeout: {cfg.submission.confirm_timeout:.0f}s")
    click.echo(f"Secret:          {'***configured***' if cfg.secret else '(not set)'}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
